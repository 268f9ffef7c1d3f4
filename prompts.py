"""Prompt text for query planning and record extraction."""

from __future__ import annotations

from datetime import UTC, datetime

from models import SearchDocument

_TRUNCATION_MARKER = "\n[...truncated]"


def trim_prompt(text: str, max_chars: int) -> str:
    """Clip text to max_chars characters, marking the cut when one happens."""
    if max_chars <= 0:
        return ""
    if len(text) <= max_chars:
        return text
    if max_chars <= len(_TRUNCATION_MARKER):
        return text[:max_chars]
    return text[: max_chars - len(_TRUNCATION_MARKER)] + _TRUNCATION_MARKER


def conference_system_prompt(topic: str, now: datetime | None = None) -> str:
    """System prompt shared by the planner and extractor calls."""
    current = (now or datetime.now(UTC)).isoformat()
    return f"""You are an assistant that searches for and extracts conference and event listings.
Current time: {current}
Target: {topic}

Follow these instructions strictly:

Sources
- Use information from official conference websites only.
- Ignore aggregator sites (call-for-papers indexes, event listing portals).

Fields to extract for every event
1. link: official website URL
2. name: official name of the conference
3. type: event type (international conference, domestic meeting, workshop, lecture, symposium, ...)
4. scope: who may participate (anyone, undergraduates year 3+, graduate students only, members only, ...)
5. deadline: submission or registration deadline (YYYY-MM-DD)
6. term: description of the event duration (e.g. "3 days", "March 10-12, 2026")
7. conference_start_date: first day of the event (YYYY-MM-DD)
8. conference_end_date: last day of the event (YYYY-MM-DD)
9. icon: icon image URL (empty string if not found)
10. conference_organizer: organizer name
11. institution: organizing institution
12. text: basic overview of the conference (about 200 characters)
13. date: capture time (current time in ISO 8601)

Data format
- Always return dates in ISO 8601 (YYYY-MM-DD).
- Convert Japanese era dates (e.g. Reiwa 7) and other calendars to the Gregorian calendar.
- Use an empty string ("") for any missing information.
- read_status is always "".
- labels and tags are always [].

Quality
- Do not use information from non-official sources.
- Do not include ambiguous information.
- Exclude past events; only include events that take place after the current time."""


def query_planner_prompt(topic: str, num_queries: int) -> str:
    return f"""Generate {num_queries} web search queries for finding listings of: {topic}.

Requirements
- Each query must use a different search strategy.
- Prefer queries that surface official conference websites.
- Prioritise events held from {datetime.now(UTC).year} onwards.
- For every query, state the research goal: what kind of conference it is meant to find.

Example queries
- "conference 2026 submission deadline Japan"
- "call for papers Japan 2026"
- "research presentation call society meeting 2027"
- "international conference held in Japan registration"
"""


def extraction_prompt(
    query: str,
    goal: str,
    documents: list[SearchDocument],
    max_records: int,
) -> str:
    rendered = "\n".join(
        f'<content index="{index}" url="{document.url}">\n{document.content}\n</content>'
        for index, document in enumerate(documents)
    )
    goal_line = f"\nResearch goal\n{goal}\n" if goal else ""
    return f"""Extract conference and event listings from the search results below.

Search query
{query}
{goal_line}
Search result contents
{rendered}

Extraction requirements
1. Extract information from official website content only.
2. Produce one conference object per distinct conference or event.
3. Extract at most {max_records} conferences (fewer is fine if fewer are found).
4. Exclude past events (only events dated after the current time).
5. Use an empty string for any field without enough information.

Important: when several distinct conferences are found, return each of them as a separate array item."""
