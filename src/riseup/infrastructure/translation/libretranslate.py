"""LibreTranslate provider."""

from __future__ import annotations

from typing import Any

import httpx

from riseup.infrastructure.translation.base import HttpTranslationProvider


class LibreTranslateProvider(HttpTranslationProvider):
    """Self-hosted or public LibreTranslate instance."""

    provider_name = "libretranslate"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url, timeout=timeout, transport=transport)
        self._api_key = api_key

    def _with_key(self, payload: dict[str, Any]) -> dict[str, Any]:
        if self._api_key:
            payload["api_key"] = self._api_key
        return payload

    async def translate(self, text: str, source: str, target: str) -> str:
        data = await self._post_json(
            "/translate",
            self._with_key({"q": text, "source": source, "target": target, "format": "text"}),
        )
        translated = data.get("translatedText") if isinstance(data, dict) else None
        if not isinstance(translated, str):
            raise self._malformed("translatedText")
        return translated

    async def detect(self, text: str) -> str:
        data = await self._post_json("/detect", self._with_key({"q": text}))
        # Candidates come back ordered by confidence
        if isinstance(data, list) and data and isinstance(data[0], dict) and data[0].get("language"):
            return data[0]["language"]
        raise self._malformed("language")
