"""Google Cloud Translation (v2 REST) provider."""

from __future__ import annotations

import httpx

from riseup.infrastructure.translation.base import HttpTranslationProvider

GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate"


class GoogleTranslateProvider(HttpTranslationProvider):
    provider_name = "google"

    def __init__(
        self,
        api_key: str,
        timeout: float = 10.0,
        base_url: str = GOOGLE_TRANSLATE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(base_url, timeout=timeout, transport=transport)
        self._api_key = api_key

    async def translate(self, text: str, source: str, target: str) -> str:
        data = await self._post_json(
            "/v2",
            {"q": text, "source": source, "target": target, "format": "text"},
            params={"key": self._api_key},
        )
        try:
            return data["data"]["translations"][0]["translatedText"]
        except (KeyError, IndexError, TypeError):
            raise self._malformed("translatedText") from None

    async def detect(self, text: str) -> str:
        data = await self._post_json(
            "/v2/detect",
            {"q": text},
            params={"key": self._api_key},
        )
        try:
            return data["data"]["detections"][0][0]["language"]
        except (KeyError, IndexError, TypeError):
            raise self._malformed("language") from None
