"""Corpus reader backed by an HTTP articles endpoint."""

from __future__ import annotations

import logging

import httpx

from riseup.application.ports.search import CorpusReader
from riseup.domain.search import SearchDocument
from riseup.domain.shared.exceptions import ProviderUnavailable, UpstreamTimeout
from riseup.infrastructure.corpus.parsing import parse_articles

logger = logging.getLogger(__name__)

PROVIDER = "corpus"


class HttpCorpusReader(CorpusReader):
    """Fetch recent articles with ``GET {base_url}?limit=N``."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._url = url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_recent_documents(self, limit: int) -> list[SearchDocument]:
        client = await self._get_client()
        try:
            response = await client.get(self._url, params={"limit": limit})
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            logger.warning("Corpus timeout: %s", e)
            raise UpstreamTimeout(PROVIDER, self._timeout) from e
        except httpx.HTTPStatusError as e:
            logger.warning("Corpus returned error %d", e.response.status_code)
            raise ProviderUnavailable(
                PROVIDER, details={"status": e.response.status_code}
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Corpus request failed (%s): %s", type(e).__name__, e)
            raise ProviderUnavailable(PROVIDER) from e

        documents = parse_articles(payload, limit)
        logger.info("Fetched %d documents from corpus", len(documents))
        return documents
