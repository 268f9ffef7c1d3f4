"""Multi-query search, extraction, dedup and deadline ranking of conference records."""

from __future__ import annotations

import asyncio
import logging
from datetime import date, datetime

from config import DEFAULT_CONCURRENCY, DEFAULT_CONTEXT_CHAR_BUDGET, DEFAULT_TOPIC, PipelineConfig
from content_fetcher import fetch_documents
from errors import ProviderErrorKind, classify_error
from models import QueryPlan, Record
from providers import SearchProvider, StructuredLLM, build_llm, build_search
from query_planner import DEFAULT_NUM_QUERIES, generate_query_plans
from record_extractor import DEFAULT_MAX_RECORDS, extract_records

DEFAULT_MIN_RESULTS = 10

LOGGER = logging.getLogger(__name__)


class ConferenceSearch:
    """Plan queries, fan them out under a concurrency cap, and merge the results.

    Per-query fetch or extraction failures contribute zero records; only a
    failure of the planning call aborts a run.
    """

    def __init__(
        self,
        search: SearchProvider,
        llm: StructuredLLM,
        *,
        topic: str = DEFAULT_TOPIC,
        concurrency: int = DEFAULT_CONCURRENCY,
        max_records_per_query: int = DEFAULT_MAX_RECORDS,
        context_char_budget: int = DEFAULT_CONTEXT_CHAR_BUDGET,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {concurrency}")
        if max_records_per_query < 1:
            raise ValueError(
                f"max_records_per_query must be at least 1, got {max_records_per_query}"
            )
        self.search = search
        self.llm = llm
        self.topic = topic
        self.concurrency = concurrency
        self.max_records_per_query = max_records_per_query
        self.context_char_budget = context_char_budget

    async def search_conferences(
        self,
        *,
        min_results: int = DEFAULT_MIN_RESULTS,
        max_queries: int = DEFAULT_NUM_QUERIES,
    ) -> list[Record]:
        """Return deduplicated records ordered by submission deadline.

        min_results is advisory: a shortfall is logged, never retried.
        """
        LOGGER.info("Starting conference search: topic=%r max_queries=%s", self.topic, max_queries)

        plans = await generate_query_plans(self.llm, topic=self.topic, num_queries=max_queries)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def run_plan(plan: QueryPlan) -> list[Record]:
            async with semaphore:
                return await self._records_for_plan(plan)

        results = await asyncio.gather(*(run_plan(plan) for plan in plans))

        flat = [record for records in results for record in records]
        unique = deduplicate_records(flat)
        ordered = sort_by_deadline(unique)

        LOGGER.info(
            "Conference search complete: queries=%s raw=%s unique=%s",
            len(plans),
            len(flat),
            len(ordered),
        )
        if len(ordered) < min_results:
            LOGGER.info(
                "Found %s conferences, fewer than the requested min_results=%s",
                len(ordered),
                min_results,
            )
        return ordered

    async def _records_for_plan(self, plan: QueryPlan) -> list[Record]:
        try:
            documents = await fetch_documents(self.search, plan.query)
            return await extract_records(
                self.llm,
                topic=self.topic,
                query=plan.query,
                goal=plan.goal,
                documents=documents,
                max_records=self.max_records_per_query,
                context_char_budget=self.context_char_budget,
            )
        except Exception as exc:  # a failed query contributes no records
            kind = classify_error(exc)
            if kind is ProviderErrorKind.TIMEOUT:
                LOGGER.warning("Timeout while processing query=%r: %s", plan.query, exc)
            elif kind is ProviderErrorKind.RATE_LIMIT:
                LOGGER.warning("Rate limited while processing query=%r: %s", plan.query, exc)
            else:
                LOGGER.exception("Unexpected error while processing query=%r: %s", plan.query, exc)
            return []


def deduplicate_records(records: list[Record]) -> list[Record]:
    """Keep the first record seen for each link."""
    seen: dict[str, Record] = {}
    for record in records:
        if record.link not in seen:
            seen[record.link] = record
    return list(seen.values())


def deadline_sort_key(record: Record) -> tuple[bool, date]:
    """Order key: known deadlines ascending, unknown or unparseable ones last."""
    deadline = _parse_deadline(record.deadline)
    if deadline is None:
        return (True, date.max)
    return (False, deadline)


def sort_by_deadline(records: list[Record]) -> list[Record]:
    # sorted() is stable, so records with unknown deadlines keep their order.
    return sorted(records, key=deadline_sort_key)


def _parse_deadline(raw: str) -> date | None:
    value = raw.strip()
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def build_conference_search(config: PipelineConfig) -> ConferenceSearch:
    """Wire the configured providers into a ConferenceSearch."""
    return ConferenceSearch(
        build_search(config),
        build_llm(config),
        topic=config.topic,
        concurrency=config.concurrency,
        context_char_budget=config.context_char_budget,
    )
