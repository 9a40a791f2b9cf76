"""Algolia REST client used as the hosted search backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from typing import Any
from urllib.parse import quote, urlencode

import httpx

from riseup.application.ports.search import HostedSearchPort
from riseup.domain.search import (
    FACET_FIELDS,
    FacetSet,
    SearchDocument,
    SearchFilters,
    SearchMode,
    SearchOptions,
    SearchPage,
)
from riseup.domain.shared.exceptions import (
    ConfigurationMissing,
    ProviderUnavailable,
    UpstreamTimeout,
)
from riseup.domain.shared.time import to_epoch_ms

logger = logging.getLogger(__name__)

PROVIDER = "algolia"
_BATCH_SIZE = 1000

INDEX_SETTINGS: dict[str, Any] = {
    "searchableAttributes": ["title", "body", "topics", "channelName"],
    "attributesForFaceting": list(FACET_FIELDS),
    "customRanking": ["desc(publishedAt)"],
    "hitsPerPage": 20,
    "maxValuesPerFacet": 100,
}


def _quote_value(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def build_filter_string(filters: SearchFilters) -> str:
    """Translate filters into Algolia's filter syntax (conjunction, OR-ed topics)."""
    parts: list[str] = []
    if filters.source:
        parts.append(f"source:{_quote_value(filters.source)}")
    if filters.topics:
        topics = " OR ".join(f"topics:{_quote_value(t)}" for t in sorted(filters.topics))
        parts.append(f"({topics})")
    if filters.channel_name:
        parts.append(f"channelName:{_quote_value(filters.channel_name)}")
    if filters.date_from:
        parts.append(f"publishedAt >= {to_epoch_ms(filters.date_from)}")
    if filters.date_to:
        parts.append(f"publishedAt <= {to_epoch_ms(filters.date_to)}")
    return " AND ".join(parts)


class AlgoliaSearchClient(HostedSearchPort):
    """HTTP client wrapper for one Algolia index.

    Reads go to the DSN host with the search key; index writes go to the
    main host with the admin key.
    """

    def __init__(
        self,
        app_id: str,
        search_key: str | None,
        admin_key: str | None = None,
        index_name: str = "articles",
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._app_id = app_id
        self._search_key = search_key
        self._admin_key = admin_key
        self._index_name = index_name
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def mode(self) -> SearchMode:
        return "hosted"

    @property
    def configured(self) -> bool:
        return bool(self._app_id and self._search_key)

    @property
    def _index_path(self) -> str:
        return f"/1/indexes/{quote(self._index_name, safe='')}"

    @property
    def _read_url(self) -> str:
        return f"https://{self._app_id}-dsn.algolia.net{self._index_path}"

    @property
    def _write_url(self) -> str:
        return f"https://{self._app_id}.algolia.net{self._index_path}"

    def _headers(self, api_key: str) -> dict[str, str]:
        return {
            "X-Algolia-Application-Id": self._app_id,
            "X-Algolia-API-Key": api_key,
            "Content-Type": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        url: str,
        api_key: str,
        payload: dict[str, Any],
    ) -> dict[str, Any]:
        client = await self._get_client()
        try:
            response = await client.request(
                method,
                url,
                content=json.dumps(payload),
                headers=self._headers(api_key),
            )
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.warning("Algolia timeout after %.1fs: %s", self._timeout, e)
            raise UpstreamTimeout(PROVIDER, self._timeout) from e
        except httpx.ConnectError as e:
            logger.warning("Algolia connection failed: %s", e)
            raise ProviderUnavailable(PROVIDER, details={"reason": "connect"}) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Algolia returned error %d: %s",
                e.response.status_code,
                e.response.text[:200] if e.response.text else "no body",
            )
            raise ProviderUnavailable(
                PROVIDER, details={"status": e.response.status_code}
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Algolia request failed (%s): %s", type(e).__name__, e)
            raise ProviderUnavailable(PROVIDER) from e

    async def _query(self, params: dict[str, Any]) -> dict[str, Any]:
        if not self.configured:
            raise ConfigurationMissing("Algolia search credentials missing")
        return await self._request(
            "POST",
            f"{self._read_url}/query",
            self._search_key,  # type: ignore[arg-type]
            {"params": urlencode(params)},
        )

    async def configure(self) -> None:
        """Probe the index with a zero-hit query."""
        await self._query({"query": "", "hitsPerPage": 0})
        logger.info("Algolia index %s reachable", self._index_name)

    async def search(self, options: SearchOptions) -> SearchPage:
        params: dict[str, Any] = {
            "query": options.query,
            "page": options.page,
            "hitsPerPage": options.hits_per_page,
        }
        filter_string = build_filter_string(options.filters)
        if filter_string:
            params["filters"] = filter_string

        data = await self._query(params)

        hits: list[SearchDocument] = []
        for hit in data.get("hits", []):
            try:
                hits.append(SearchDocument.from_article(hit))
            except ValueError as e:
                logger.debug("Skipping malformed hit %s: %s", hit.get("objectID"), e)

        return SearchPage(
            hits=hits,
            total_count=int(data.get("nbHits", len(hits))),
            page=int(data.get("page", options.page)),
            hits_per_page=int(data.get("hitsPerPage", options.hits_per_page)),
            mode="hosted",
        )

    async def facets(self) -> FacetSet:
        data = await self._query(
            {
                "query": "",
                "hitsPerPage": 0,
                "facets": json.dumps(list(FACET_FIELDS)),
                "maxValuesPerFacet": 100,
            }
        )
        raw = data.get("facets") or {}
        return {field: dict(raw.get(field) or {}) for field in FACET_FIELDS}

    async def index(self, documents: Sequence[SearchDocument]) -> int:
        if not (self._app_id and self._admin_key):
            raise ConfigurationMissing("Algolia admin credentials missing")

        await self._request("PUT", f"{self._write_url}/settings", self._admin_key, INDEX_SETTINGS)

        written = 0
        for start in range(0, len(documents), _BATCH_SIZE):
            chunk = documents[start : start + _BATCH_SIZE]
            await self._request(
                "POST",
                f"{self._write_url}/batch",
                self._admin_key,
                {
                    "requests": [
                        {"action": "updateObject", "body": doc.to_index_record()}
                        for doc in chunk
                    ]
                },
            )
            written += len(chunk)
            logger.debug("Saved %d/%d records to Algolia", written, len(documents))
        return written
