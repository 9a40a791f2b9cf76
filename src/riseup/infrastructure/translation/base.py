"""Shared HTTP plumbing for remote translation providers."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from riseup.application.ports.translation import TranslationProvider
from riseup.domain.shared.exceptions import ProviderUnavailable, UpstreamTimeout

logger = logging.getLogger(__name__)


class HttpTranslationProvider(TranslationProvider):
    """Base class for providers that speak JSON over HTTP.

    Subclasses set ``provider_name`` and build requests with
    ``_post_json``, which maps transport failures to domain errors.
    """

    provider_name: str = "http"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def name(self) -> str:
        return self.provider_name

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post_json(
        self,
        path: str,
        payload: dict[str, Any],
        params: dict[str, str] | None = None,
    ) -> Any:
        client = await self._get_client()
        try:
            response = await client.post(path, json=payload, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as e:
            logger.warning("%s timeout after %.1fs", self.name, self._timeout)
            raise UpstreamTimeout(self.name, self._timeout) from e
        except httpx.ConnectError as e:
            logger.warning("%s connection failed: %s", self.name, e)
            raise ProviderUnavailable(self.name, details={"reason": "connect"}) from e
        except httpx.HTTPStatusError as e:
            logger.warning(
                "%s returned error %d: %s",
                self.name,
                e.response.status_code,
                e.response.text[:200] if e.response.text else "no body",
            )
            raise ProviderUnavailable(
                self.name, details={"status": e.response.status_code}
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("%s request failed (%s): %s", self.name, type(e).__name__, e)
            raise ProviderUnavailable(self.name) from e

    def _malformed(self, what: str) -> ProviderUnavailable:
        logger.warning("%s returned a response without %s", self.name, what)
        return ProviderUnavailable(self.name, details={"reason": f"missing {what}"})
