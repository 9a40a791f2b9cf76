"""Corpus reader backed by a local JSON export."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from riseup.application.ports.search import CorpusReader
from riseup.domain.search import SearchDocument
from riseup.domain.shared.exceptions import ProviderUnavailable
from riseup.infrastructure.corpus.parsing import parse_articles

logger = logging.getLogger(__name__)


class JsonFileCorpusReader(CorpusReader):
    """Read articles from a JSON file on every fetch."""

    def __init__(self, path: Path | str):
        self._path = Path(path)

    async def fetch_recent_documents(self, limit: int) -> list[SearchDocument]:
        try:
            raw = await asyncio.to_thread(self._path.read_text, encoding="utf-8")
            payload = json.loads(raw)
        except (OSError, ValueError) as e:
            logger.warning("Cannot read corpus file %s: %s", self._path, e)
            raise ProviderUnavailable("corpus", details={"path": str(self._path)}) from e

        return parse_articles(payload, limit)
