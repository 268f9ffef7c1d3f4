"""Constrained LLM extraction of conference records from search content."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Callable

from config import DEFAULT_CONTEXT_CHAR_BUDGET
from models import Record, SearchDocument, record_json_schema
from prompts import conference_system_prompt, extraction_prompt, trim_prompt
from providers import StructuredLLM

DEFAULT_MAX_RECORDS = 5
EXTRACTION_TIMEOUT_SECONDS = 60

LOGGER = logging.getLogger(__name__)


def records_schema(max_records: int) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "conferences": {
                "type": "array",
                "maxItems": max_records,
                "description": "Extracted conference listings",
                "items": record_json_schema(),
            }
        },
        "required": ["conferences"],
        "additionalProperties": False,
    }


async def extract_records(
    llm: StructuredLLM,
    *,
    topic: str,
    query: str,
    documents: list[SearchDocument],
    goal: str = "",
    max_records: int = DEFAULT_MAX_RECORDS,
    timeout_seconds: float = EXTRACTION_TIMEOUT_SECONDS,
    context_char_budget: int = DEFAULT_CONTEXT_CHAR_BUDGET,
    now: Callable[[], datetime] | None = None,
) -> list[Record]:
    """Extract up to max_records conference records from one query's documents.

    Documents without content are ignored; when none are left the LLM is not
    called. Every returned record carries the capture time taken after the
    call, and its reserved fields are reset to empty.
    """
    usable = [document for document in documents if document.content.strip()]
    if not usable:
        LOGGER.info("No content found for query=%r, skipping extraction", query)
        return []

    LOGGER.info("Extracting records for query=%r from %s documents", query, len(usable))

    result = await llm.generate(
        records_schema(max_records),
        conference_system_prompt(topic),
        trim_prompt(extraction_prompt(query, goal, usable, max_records), context_char_budget),
        schema_name="conferences",
        timeout_seconds=timeout_seconds,
    )

    raw_records = result.get("conferences")
    if not isinstance(raw_records, list):
        raise ValueError("Extraction response is missing the 'conferences' array")

    records = [Record.from_dict(item) for item in raw_records[:max_records]]

    captured_at = (now or _utc_now)().isoformat()
    records = [
        replace(record, date=captured_at, read_status="", labels=(), tags=())
        for record in records
    ]

    LOGGER.info("Extracted %s records for query=%r", len(records), query)
    return records


def _utc_now() -> datetime:
    return datetime.now(UTC)
