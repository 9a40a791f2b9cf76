"""Application layer ports (aka interfaces)."""

from riseup.application.ports.search import (
    CorpusReader,
    HostedSearchPort,
    SearchBackend,
)
from riseup.application.ports.shared_store import SharedStore, SharedStoreError
from riseup.application.ports.translation import (
    LanguageDetector,
    TranslationProvider,
)

__all__ = [
    "CorpusReader",
    "HostedSearchPort",
    "LanguageDetector",
    "SearchBackend",
    "SharedStore",
    "SharedStoreError",
    "TranslationProvider",
]
