"""Anthropic Messages API client producing schema-constrained JSON via forced tool use."""

from __future__ import annotations

import logging
from typing import Any

import anthropic

from errors import ProviderError, ProviderErrorKind

LOGGER = logging.getLogger(__name__)


class AnthropicStructuredLLM:
    """Generate JSON objects by forcing Claude to call a single tool.

    The tool's ``input_schema`` is the requested JSON schema, so the tool
    call's input is the structured result.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        max_tokens: int = 4096,
        temperature: float = 0.1,
        client: anthropic.AsyncAnthropic | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise RuntimeError("ANTHROPIC_API_KEY environment variable is required")
            client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        self.client = client
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature

    async def generate(
        self,
        schema: dict[str, Any],
        system_prompt: str,
        user_prompt: str,
        *,
        schema_name: str,
        timeout_seconds: float | None = None,
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
            "tools": [
                {
                    "name": schema_name,
                    "description": f"Return the {schema_name} result as structured data.",
                    "input_schema": schema,
                }
            ],
            "tool_choice": {"type": "tool", "name": schema_name},
        }
        if timeout_seconds is not None:
            kwargs["timeout"] = timeout_seconds

        LOGGER.debug("Calling Claude model=%s schema=%s", self.model, schema_name)
        try:
            response = await self.client.messages.create(**kwargs)
        except anthropic.APITimeoutError as exc:
            raise ProviderError(f"Claude request timed out: {exc}", ProviderErrorKind.TIMEOUT) from exc
        except anthropic.RateLimitError as exc:
            raise ProviderError(f"Claude rate limit reached: {exc}", ProviderErrorKind.RATE_LIMIT) from exc
        except anthropic.AnthropicError as exc:
            raise ProviderError(f"Claude request failed: {exc}") from exc

        for block in response.content:
            if getattr(block, "type", None) == "tool_use" and block.name == schema_name:
                if not isinstance(block.input, dict):
                    raise ProviderError("Claude tool input was not a JSON object")
                return block.input

        raise ProviderError(f"Claude response did not include a {schema_name} tool call")
