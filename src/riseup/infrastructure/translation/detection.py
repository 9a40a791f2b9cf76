"""Local language detection by script."""

from riseup.application.ports.translation import LanguageDetector
from riseup.domain.translation import persian_script_ratio


class ScriptLanguageDetector(LanguageDetector):
    """Tell Persian from the default language by the share of Persian letters.

    Costs no quota and cannot fail, so it also serves as the fallback when
    remote detection is unavailable.
    """

    def __init__(
        self,
        script_language: str = "fa",
        default_language: str = "en",
        min_ratio: float = 0.3,
    ):
        self._script_language = script_language
        self._default_language = default_language
        self._min_ratio = min_ratio

    async def detect(self, text: str) -> str:
        if persian_script_ratio(text) >= self._min_ratio:
            return self._script_language
        return self._default_language
