"""Firecrawl search API client returning page content as markdown."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import requests

from errors import ProviderError, ProviderErrorKind, kind_for_status
from models import SearchDocument

FIRECRAWL_SEARCH_PATH = "/v1/search"
# Extra wall-clock allowance on top of the server-side search timeout.
_CLIENT_TIMEOUT_SLACK_SECONDS = 5.0

LOGGER = logging.getLogger(__name__)


class FirecrawlSearch:
    """Search provider backed by Firecrawl's /v1/search endpoint."""

    def __init__(self, api_key: str, base_url: str = "https://api.firecrawl.dev") -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")

    async def search(
        self,
        query: str,
        *,
        timeout_seconds: float,
        limit: int,
        formats: tuple[str, ...] = ("markdown",),
    ) -> list[SearchDocument]:
        """Run one search; the blocking request is moved off the event loop."""
        return await asyncio.to_thread(
            self._search_sync,
            query,
            timeout_seconds=timeout_seconds,
            limit=limit,
            formats=formats,
        )

    def _search_sync(
        self,
        query: str,
        *,
        timeout_seconds: float,
        limit: int,
        formats: tuple[str, ...],
    ) -> list[SearchDocument]:
        if not self.api_key:
            raise RuntimeError("FIRECRAWL_KEY environment variable is required")

        payload = {
            "query": query,
            "limit": limit,
            "timeout": int(timeout_seconds * 1000),
            "scrapeOptions": {"formats": list(formats)},
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        LOGGER.debug("Firecrawl search query=%r limit=%s", query, limit)
        try:
            response = requests.post(
                f"{self.base_url}{FIRECRAWL_SEARCH_PATH}",
                headers=headers,
                json=payload,
                timeout=timeout_seconds + _CLIENT_TIMEOUT_SLACK_SECONDS,
            )
            response.raise_for_status()
        except requests.Timeout as exc:
            raise ProviderError(
                f"Firecrawl search timed out after {timeout_seconds}s: {exc}",
                ProviderErrorKind.TIMEOUT,
            ) from exc
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise ProviderError(
                f"Firecrawl search failed with HTTP {status}: {exc}",
                kind_for_status(status),
            ) from exc
        except requests.RequestException as exc:
            raise ProviderError(f"Firecrawl search request failed: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise ProviderError("Firecrawl returned a non-JSON response") from exc

        return _parse_search_payload(body)


def _parse_search_payload(body: Any) -> list[SearchDocument]:
    """Normalize a Firecrawl search response into SearchDocument objects."""
    if not isinstance(body, dict):
        raise ProviderError("Unexpected Firecrawl response shape: expected an object")
    if body.get("success") is False:
        raise ProviderError(f"Firecrawl search unsuccessful: {body.get('error') or 'unknown error'}")

    data = body.get("data")
    if not isinstance(data, list):
        raise ProviderError("Unexpected Firecrawl response shape: 'data' is not a list")

    documents: list[SearchDocument] = []
    for item in data:
        if not isinstance(item, dict):
            continue
        metadata = item.get("metadata") if isinstance(item.get("metadata"), dict) else {}
        documents.append(
            SearchDocument(
                url=_as_str(item.get("url")) or _as_str(metadata.get("sourceURL")),
                title=_as_str(item.get("title")) or _as_str(metadata.get("title")),
                content=_as_str(item.get("markdown")),
            )
        )
    return documents


def _as_str(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""
