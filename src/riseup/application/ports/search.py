"""Search ports: the two search backends and the article corpus."""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from riseup.domain.search import (
    FacetSet,
    SearchDocument,
    SearchMode,
    SearchOptions,
    SearchPage,
)


class SearchBackend(ABC):
    """Capability shared by the hosted index and the fallback index."""

    @property
    @abstractmethod
    def mode(self) -> SearchMode:
        """Which backend this is, reported on every result."""

    @abstractmethod
    async def search(self, options: SearchOptions) -> SearchPage:
        """Run a filtered, paginated query."""

    @abstractmethod
    async def facets(self) -> FacetSet:
        """Document counts per value of every facet field."""


class HostedSearchPort(SearchBackend):
    """Remote search index that must be configured before use.

    Every remote call is bounded by a timeout. Failures raise
    ``ProviderUnavailable`` or ``UpstreamTimeout``.
    """

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether read credentials are present at all."""

    @abstractmethod
    async def configure(self) -> None:
        """Verify credentials and connectivity, raising when either is missing."""

    @abstractmethod
    async def index(self, documents: Sequence[SearchDocument]) -> int:
        """Save ``documents`` into the index, replacing records with the same id.

        Returns the number of records written.
        """

    async def close(self) -> None:  # noqa: B027
        """Release HTTP resources (optional)."""


class CorpusReader(ABC):
    """Read-only accessor for the article corpus."""

    @abstractmethod
    async def fetch_recent_documents(self, limit: int) -> list[SearchDocument]:
        """Return up to ``limit`` documents, most recent first."""

    async def close(self) -> None:  # noqa: B027
        """Release HTTP resources (optional)."""
