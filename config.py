"""Environment-driven configuration for the conference search pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_TOPIC = "academic conferences and scientific meetings held in Japan"
DEFAULT_CONCURRENCY = 2
DEFAULT_FIRECRAWL_BASE_URL = "https://api.firecrawl.dev"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5"
DEFAULT_CONTEXT_CHAR_BUDGET = 150_000

LLM_PROVIDERS: frozenset[str] = frozenset({"openai", "anthropic"})


@dataclass(frozen=True, slots=True)
class PipelineConfig:
    """Settings for one ConferenceSearch instance.

    Credentials are optional here; the provider clients raise when the key
    they need is missing so that a dry construction never touches the network.
    """

    topic: str = DEFAULT_TOPIC
    concurrency: int = DEFAULT_CONCURRENCY
    firecrawl_api_key: str = ""
    firecrawl_base_url: str = DEFAULT_FIRECRAWL_BASE_URL
    llm_provider: str = "openai"
    openai_api_key: str = ""
    openai_model: str = DEFAULT_OPENAI_MODEL
    openai_base_url: str | None = None
    anthropic_api_key: str = ""
    claude_model: str = DEFAULT_CLAUDE_MODEL
    temperature: float = 0.1
    context_char_budget: int = DEFAULT_CONTEXT_CHAR_BUDGET

    def __post_init__(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be at least 1, got {self.concurrency}")
        if self.context_char_budget <= 0:
            raise ValueError(
                f"context_char_budget must be positive, got {self.context_char_budget}"
            )
        if self.llm_provider not in LLM_PROVIDERS:
            raise ValueError(
                f"Unsupported LLM provider {self.llm_provider!r}; "
                f"expected one of {sorted(LLM_PROVIDERS)}"
            )
        if not self.topic.strip():
            raise ValueError("topic must not be empty")

    @classmethod
    def from_env(cls) -> PipelineConfig:
        """Read configuration from environment variables (call load_dotenv first)."""
        return cls(
            topic=os.getenv("CONFERENCE_TOPIC") or DEFAULT_TOPIC,
            concurrency=int(os.getenv("FIRECRAWL_CONCURRENCY") or DEFAULT_CONCURRENCY),
            firecrawl_api_key=os.getenv("FIRECRAWL_KEY", ""),
            firecrawl_base_url=os.getenv("FIRECRAWL_BASE_URL") or DEFAULT_FIRECRAWL_BASE_URL,
            llm_provider=os.getenv("LLM_PROVIDER", "openai").strip().lower(),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_model=os.getenv("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
            openai_base_url=os.getenv("OPENAI_BASE_URL") or None,
            anthropic_api_key=os.getenv("ANTHROPIC_API_KEY", ""),
            claude_model=os.getenv("CLAUDE_MODEL") or DEFAULT_CLAUDE_MODEL,
            temperature=float(os.getenv("LLM_TEMPERATURE", "0.1")),
            context_char_budget=int(
                os.getenv("CONTEXT_CHAR_BUDGET") or DEFAULT_CONTEXT_CHAR_BUDGET
            ),
        )
