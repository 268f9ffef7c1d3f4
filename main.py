"""CLI entrypoint for the conference search pipeline."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

from dotenv import load_dotenv

from config import PipelineConfig
from conference_search import DEFAULT_MIN_RESULTS, build_conference_search
from query_planner import DEFAULT_NUM_QUERIES


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Search the web for upcoming conferences and rank them by deadline")
    parser.add_argument("--topic", default=None, help="What to search for (overrides CONFERENCE_TOPIC)")
    parser.add_argument(
        "--max-queries",
        type=int,
        default=DEFAULT_NUM_QUERIES,
        help="Maximum number of search queries to generate",
    )
    parser.add_argument(
        "--min-results",
        type=int,
        default=DEFAULT_MIN_RESULTS,
        help="Advisory target number of conferences; fewer may be returned",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=None,
        help="Maximum concurrent search+extract tasks (overrides FIRECRAWL_CONCURRENCY)",
    )
    parser.add_argument(
        "--provider",
        choices=["openai", "anthropic"],
        default=None,
        help="LLM provider (overrides LLM_PROVIDER)",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation for the output")
    parser.add_argument("--log-level", default="INFO", help="Logging level written to stderr")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Environment configuration with CLI overrides applied."""
    config = PipelineConfig.from_env()
    overrides = {
        "topic": args.topic,
        "concurrency": args.concurrency,
        "llm_provider": args.provider,
    }
    return dataclasses.replace(config, **{k: v for k, v in overrides.items() if v is not None})


def run(args: argparse.Namespace) -> dict:
    """Run one search and return the response payload."""
    pipeline = build_conference_search(build_config(args))
    conferences = asyncio.run(
        pipeline.search_conferences(min_results=args.min_results, max_queries=args.max_queries)
    )
    return {
        "conferences": [record.to_dict() for record in conferences],
        "count": len(conferences),
    }


def main(argv: list[str] | None = None) -> int:
    """Initialize config and execute the pipeline."""
    load_dotenv()
    args = parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stderr,
    )

    try:
        payload = run(args)
    except Exception as exc:
        logging.exception("Conference search failed: %s", exc)
        return 1

    json.dump(payload, sys.stdout, ensure_ascii=False, indent=args.indent)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
