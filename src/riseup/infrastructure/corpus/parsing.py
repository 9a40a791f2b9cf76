"""Turn raw article payloads into search documents."""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from riseup.domain.search import SearchDocument

logger = logging.getLogger(__name__)


def parse_articles(payload: Any, limit: int) -> list[SearchDocument]:
    """Parse a list of articles (or ``{"articles": [...]}``).

    Malformed articles are skipped. The result is ordered newest first and
    capped at ``limit``.
    """
    if isinstance(payload, dict):
        payload = payload.get("articles", [])
    if not isinstance(payload, list):
        return []

    documents: list[SearchDocument] = []
    skipped = 0
    for article in payload:
        if not isinstance(article, dict):
            skipped += 1
            continue
        try:
            documents.append(SearchDocument.from_article(article))
        except PydanticValidationError:
            skipped += 1

    if skipped:
        logger.debug("Skipped %d malformed articles", skipped)

    documents.sort(key=lambda d: d.published_at, reverse=True)
    return documents[:limit]
