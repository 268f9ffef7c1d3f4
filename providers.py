"""Provider interfaces and factories for the search and LLM backends."""

from __future__ import annotations

from typing import Any, Protocol

from anthropic_client import AnthropicStructuredLLM
from config import PipelineConfig
from firecrawl_client import FirecrawlSearch
from llm_client import OpenAIStructuredLLM
from models import SearchDocument


class SearchProvider(Protocol):
    async def search(
        self,
        query: str,
        *,
        timeout_seconds: float,
        limit: int,
        formats: tuple[str, ...] = ("markdown",),
    ) -> list[SearchDocument]: ...


class StructuredLLM(Protocol):
    async def generate(
        self,
        schema: dict[str, Any],
        system_prompt: str,
        user_prompt: str,
        *,
        schema_name: str,
        timeout_seconds: float | None = None,
    ) -> dict[str, Any]: ...


def build_search(config: PipelineConfig) -> SearchProvider:
    return FirecrawlSearch(api_key=config.firecrawl_api_key, base_url=config.firecrawl_base_url)


def build_llm(config: PipelineConfig) -> StructuredLLM:
    """Instantiate the LLM client selected by ``config.llm_provider``."""
    if config.llm_provider == "anthropic":
        return AnthropicStructuredLLM(
            api_key=config.anthropic_api_key,
            model=config.claude_model,
            temperature=config.temperature,
        )
    return OpenAIStructuredLLM(
        api_key=config.openai_api_key,
        model=config.openai_model,
        temperature=config.temperature,
        base_url=config.openai_base_url,
    )
