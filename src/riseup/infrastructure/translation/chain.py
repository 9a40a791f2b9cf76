"""Try several translation providers in order."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from riseup.application.ports.translation import TranslationProvider
from riseup.domain.shared.exceptions import ProviderUnavailable, UpstreamTimeout

logger = logging.getLogger(__name__)


class ProviderChain(TranslationProvider):
    """Composite provider that moves on when one provider is unavailable.

    Raises ``ProviderUnavailable`` only when every provider failed.
    """

    def __init__(self, providers: Sequence[TranslationProvider]):
        if not providers:
            msg = "ProviderChain needs at least one provider"
            raise ValueError(msg)
        self._providers = list(providers)

    @property
    def name(self) -> str:
        return "+".join(p.name for p in self._providers)

    @property
    def providers(self) -> list[TranslationProvider]:
        return list(self._providers)

    async def translate(self, text: str, source: str, target: str) -> str:
        failures: dict[str, str] = {}
        for provider in self._providers:
            try:
                return await provider.translate(text, source, target)
            except (ProviderUnavailable, UpstreamTimeout) as e:
                logger.info("Provider %s failed, trying next: %s", provider.name, e)
                failures[provider.name] = e.code.value
        raise ProviderUnavailable("translation", details={"failures": failures})

    async def detect(self, text: str) -> str:
        failures: dict[str, str] = {}
        for provider in self._providers:
            try:
                return await provider.detect(text)
            except (ProviderUnavailable, UpstreamTimeout) as e:
                logger.info("Detection via %s failed, trying next: %s", provider.name, e)
                failures[provider.name] = e.code.value
        raise ProviderUnavailable("translation", details={"failures": failures})

    async def close(self) -> None:
        for provider in self._providers:
            await provider.close()
