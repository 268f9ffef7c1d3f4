"""LLM-driven generation of diverse search queries for one topic."""

from __future__ import annotations

import logging
from typing import Any

from models import QueryPlan
from prompts import conference_system_prompt, query_planner_prompt
from providers import StructuredLLM

DEFAULT_NUM_QUERIES = 5

LOGGER = logging.getLogger(__name__)


def query_plans_schema(num_queries: int) -> dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "queries": {
                "type": "array",
                "maxItems": num_queries,
                "description": f"Search queries to run (at most {num_queries})",
                "items": {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "Search query string"},
                        "goal": {
                            "type": "string",
                            "description": "What kind of conference this query is meant to find",
                        },
                    },
                    "required": ["query", "goal"],
                    "additionalProperties": False,
                },
            }
        },
        "required": ["queries"],
        "additionalProperties": False,
    }


async def generate_query_plans(
    llm: StructuredLLM,
    *,
    topic: str,
    num_queries: int = DEFAULT_NUM_QUERIES,
) -> list[QueryPlan]:
    """Ask the LLM once for up to num_queries (query, goal) pairs.

    Errors from the LLM call are not caught: without queries there is nothing
    to run, so the failure belongs to the caller.
    """
    if num_queries < 1:
        raise ValueError(f"num_queries must be at least 1, got {num_queries}")

    result = await llm.generate(
        query_plans_schema(num_queries),
        conference_system_prompt(topic),
        query_planner_prompt(topic, num_queries),
        schema_name="search_queries",
    )

    raw_queries = result.get("queries")
    if not isinstance(raw_queries, list):
        raise ValueError("Query planner response is missing the 'queries' array")

    plans: list[QueryPlan] = []
    for item in raw_queries[:num_queries]:
        plan = QueryPlan.from_dict(item)
        if plan is None:
            LOGGER.warning("Skipping query plan with an empty query or goal: %r", item)
            continue
        plans.append(plan)

    LOGGER.info("Generated %s search queries: %s", len(plans), [plan.query for plan in plans])
    return plans
