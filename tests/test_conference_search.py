"""Tests for the ConferenceSearch orchestrator and its dedup/sort helpers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from conference_search import (
    ConferenceSearch,
    deadline_sort_key,
    deduplicate_records,
    sort_by_deadline,
)
from errors import ProviderError, ProviderErrorKind
from models import Record, SearchDocument


def _record_dict(link: str, deadline: str = "", name: str | None = None) -> dict[str, Any]:
    return {
        "link": link,
        "name": name or f"Conference at {link}",
        "type": "domestic meeting",
        "scope": "anyone",
        "deadline": deadline,
        "term": "2 days",
        "conference_start_date": "",
        "conference_end_date": "",
        "icon": "",
        "conference_organizer": "Organizer",
        "institution": "Institution",
        "text": "Overview",
        "date": "1999-01-01T00:00:00+00:00",
        "read_status": "",
        "labels": [],
        "tags": [],
    }


def _record(link: str, deadline: str = "", name: str | None = None) -> Record:
    return Record.from_dict(_record_dict(link, deadline, name))


class FakeSearch:
    """Search provider returning one document per query unless told otherwise."""

    def __init__(
        self,
        errors: dict[str, Exception] | None = None,
        empty: set[str] | None = None,
        delay: float = 0.0,
    ) -> None:
        self.errors = errors or {}
        self.empty = empty or set()
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def search(self, query, *, timeout_seconds, limit, formats=("markdown",)):
        self.calls.append(query)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            if query in self.errors:
                raise self.errors[query]
            content = "" if query in self.empty else f"Official page for {query}"
            return [SearchDocument(url=f"https://search.example/{query}", title=query, content=content)]
        finally:
            self.in_flight -= 1


class FakeLLM:
    """Structured LLM answering planner calls with fixed queries and extraction
    calls with the records registered for the query found in the prompt."""

    def __init__(
        self,
        queries: list[str],
        records: dict[str, list[dict[str, Any]] | Exception] | None = None,
        planner_error: Exception | None = None,
    ) -> None:
        self.queries = queries
        self.records = records or {}
        self.planner_error = planner_error
        self.extraction_queries: list[str] = []

    async def generate(self, schema, system_prompt, user_prompt, *, schema_name, timeout_seconds=None):
        if schema_name == "search_queries":
            if self.planner_error is not None:
                raise self.planner_error
            return {"queries": [{"query": q, "goal": f"goal for {q}"} for q in self.queries]}

        query = next(q for q in self.queries if f"Search query\n{q}\n" in user_prompt)
        self.extraction_queries.append(query)
        outcome = self.records.get(query, [])
        if isinstance(outcome, Exception):
            raise outcome
        return {"conferences": outcome}


# ---------------------------------------------------------------------------
# deduplicate_records / sort_by_deadline
# ---------------------------------------------------------------------------

def test_deduplicate_records_keeps_first_seen() -> None:
    first = _record("https://a.example", name="First")
    second = _record("https://b.example")
    duplicate = _record("https://a.example", name="Duplicate")

    result = deduplicate_records([first, second, duplicate])

    assert result == [first, second]
    assert result[0].name == "First"


def test_sort_by_deadline_puts_unknown_deadlines_last_in_input_order() -> None:
    no_deadline_a = _record("https://a.example")
    late = _record("https://b.example", deadline="2026-12-01")
    no_deadline_c = _record("https://c.example")
    early = _record("https://d.example", deadline="2026-03-15")

    result = sort_by_deadline([no_deadline_a, late, no_deadline_c, early])

    assert [r.link for r in result] == [
        "https://d.example",
        "https://b.example",
        "https://a.example",
        "https://c.example",
    ]


def test_sort_by_deadline_treats_unparseable_deadline_as_unknown() -> None:
    garbage = _record("https://a.example", deadline="sometime in spring")
    known = _record("https://b.example", deadline="2026-05-01")

    result = sort_by_deadline([garbage, known])

    assert [r.link for r in result] == ["https://b.example", "https://a.example"]


def test_deadline_sort_key_accepts_full_timestamps() -> None:
    key = deadline_sort_key(_record("https://a.example", deadline="2026-05-01T23:59:00Z"))
    assert key[0] is False
    assert key[1].isoformat() == "2026-05-01"


# ---------------------------------------------------------------------------
# ConferenceSearch
# ---------------------------------------------------------------------------

def test_constructor_rejects_zero_concurrency() -> None:
    with pytest.raises(ValueError, match="concurrency"):
        ConferenceSearch(FakeSearch(), FakeLLM([]), concurrency=0)


@pytest.mark.asyncio
async def test_search_conferences_concrete_scenario() -> None:
    """Timeout in one query, a cross-query duplicate, and deadline ordering."""
    llm = FakeLLM(
        ["query one", "query two", "query three"],
        records={
            "query one": [
                _record_dict("https://conf-a.example", deadline="2025-06-01"),
                _record_dict("https://conf-b.example", deadline="2025-05-01"),
            ],
            "query three": [_record_dict("https://conf-a.example", deadline="")],
        },
    )
    search = FakeSearch(
        errors={"query two": ProviderError("search timed out", ProviderErrorKind.TIMEOUT)}
    )

    result = await ConferenceSearch(search, llm).search_conferences(max_queries=3)

    assert [r.link for r in result] == ["https://conf-b.example", "https://conf-a.example"]
    assert [r.deadline for r in result] == ["2025-05-01", "2025-06-01"]


@pytest.mark.asyncio
async def test_search_conferences_isolates_extraction_failure() -> None:
    llm = FakeLLM(
        ["query one", "query two", "query three"],
        records={
            "query one": [_record_dict("https://one.example", deadline="2026-01-10")],
            "query two": RuntimeError("malformed response"),
            "query three": [_record_dict("https://three.example", deadline="2026-01-05")],
        },
    )

    result = await ConferenceSearch(FakeSearch(), llm).search_conferences()

    assert [r.link for r in result] == ["https://three.example", "https://one.example"]


@pytest.mark.asyncio
async def test_search_conferences_isolates_schema_validation_failure() -> None:
    broken = _record_dict("https://broken.example")
    del broken["institution"]
    llm = FakeLLM(
        ["query one", "query two"],
        records={
            "query one": [broken],
            "query two": [_record_dict("https://ok.example")],
        },
    )

    result = await ConferenceSearch(FakeSearch(), llm).search_conferences()

    assert [r.link for r in result] == ["https://ok.example"]


@pytest.mark.asyncio
async def test_search_conferences_planning_failure_propagates_without_fetching() -> None:
    search = FakeSearch()
    llm = FakeLLM([], planner_error=ProviderError("planner down"))

    with pytest.raises(ProviderError, match="planner down"):
        await ConferenceSearch(search, llm).search_conferences()

    assert search.calls == []
    assert llm.extraction_queries == []


@pytest.mark.asyncio
async def test_search_conferences_skips_extraction_for_empty_content() -> None:
    llm = FakeLLM(
        ["query one", "query two"],
        records={
            "query one": [_record_dict("https://one.example")],
            "query two": [_record_dict("https://two.example")],
        },
    )
    search = FakeSearch(empty={"query two"})

    result = await ConferenceSearch(search, llm).search_conferences()

    assert llm.extraction_queries == ["query one"]
    assert [r.link for r in result] == ["https://one.example"]


@pytest.mark.asyncio
async def test_search_conferences_respects_concurrency_limit() -> None:
    queries = [f"query {name}" for name in ("alpha", "bravo", "charlie", "delta", "echo")]
    search = FakeSearch(delay=0.01)
    llm = FakeLLM(queries)

    await ConferenceSearch(search, llm, concurrency=2).search_conferences(max_queries=5)

    assert len(search.calls) == 5
    assert search.max_in_flight == 2


@pytest.mark.asyncio
async def test_search_conferences_merges_in_plan_order_not_completion_order() -> None:
    """A slow first query still wins the dedup over a fast later one."""

    class SlowFirstSearch(FakeSearch):
        async def search(self, query, *, timeout_seconds, limit, formats=("markdown",)):
            self.delay = 0.05 if query == "query one" else 0.0
            return await super().search(
                query, timeout_seconds=timeout_seconds, limit=limit, formats=formats
            )

    llm = FakeLLM(
        ["query one", "query two"],
        records={
            "query one": [_record_dict("https://same.example", name="From query one")],
            "query two": [_record_dict("https://same.example", name="From query two")],
        },
    )

    result = await ConferenceSearch(SlowFirstSearch(), llm, concurrency=2).search_conferences()

    assert len(result) == 1
    assert result[0].name == "From query one"


@pytest.mark.asyncio
async def test_search_conferences_logs_failure_category(caplog: pytest.LogCaptureFixture) -> None:
    llm = FakeLLM(["query one", "query two"])
    search = FakeSearch(
        errors={
            "query one": ProviderError("HTTP 429", ProviderErrorKind.RATE_LIMIT),
            "query two": asyncio.TimeoutError(),
        }
    )

    with caplog.at_level(logging.WARNING, logger="conference_search"):
        result = await ConferenceSearch(search, llm).search_conferences()

    assert result == []
    assert "Rate limited while processing query='query one'" in caplog.text
    assert "Timeout while processing query='query two'" in caplog.text


@pytest.mark.asyncio
async def test_search_conferences_returns_fewer_than_min_results_without_error() -> None:
    llm = FakeLLM(["query one"], records={"query one": [_record_dict("https://one.example")]})

    result = await ConferenceSearch(FakeSearch(), llm).search_conferences(min_results=10)

    assert len(result) == 1
