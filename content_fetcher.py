"""Single-query search with bounded document count and content size."""

from __future__ import annotations

import logging
from dataclasses import replace

from models import SearchDocument
from prompts import trim_prompt
from providers import SearchProvider

SEARCH_TIMEOUT_SECONDS = 30
SEARCH_RESULT_LIMIT = 5
MAX_DOCUMENT_CHARS = 25_000

LOGGER = logging.getLogger(__name__)


async def fetch_documents(
    search: SearchProvider,
    query: str,
    *,
    timeout_seconds: float = SEARCH_TIMEOUT_SECONDS,
    limit: int = SEARCH_RESULT_LIMIT,
    max_chars: int = MAX_DOCUMENT_CHARS,
) -> list[SearchDocument]:
    """Run one markdown search for query and truncate every document's content.

    Provider errors propagate unchanged; there is no retry.
    """
    documents = await search.search(
        query,
        timeout_seconds=timeout_seconds,
        limit=limit,
        formats=("markdown",),
    )
    documents = documents[:limit]
    LOGGER.debug("Search returned %s documents for query=%r", len(documents), query)
    return [replace(document, content=trim_prompt(document.content, max_chars)) for document in documents]
