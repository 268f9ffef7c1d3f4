"""OpenAI structured-output client used for planning and extraction."""

from __future__ import annotations

import json
import logging
from json import JSONDecodeError
from typing import Any

import openai
from openai import AsyncOpenAI

from errors import ProviderError, ProviderErrorKind

LOGGER = logging.getLogger(__name__)


class OpenAIStructuredLLM:
    """Generate JSON objects constrained by a strict JSON schema.

    The SDK's own retries are disabled: a failed call surfaces immediately and
    the caller decides whether it is fatal.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        temperature: float = 0.1,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
    ) -> None:
        if client is None:
            if not api_key:
                raise RuntimeError("OPENAI_API_KEY environment variable is required")
            client = AsyncOpenAI(api_key=api_key, base_url=base_url, max_retries=0)
        self.client = client
        self.model = model
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
        LOGGER.debug("Calling OpenAI model=%s schema=%s", self.model, schema_name)
        kwargs: dict[str, Any] = {
            "model": self.model,
            "temperature": self.temperature,
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "strict": True, "schema": schema},
            },
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if timeout_seconds is not None:
            kwargs["timeout"] = timeout_seconds

        try:
            response = await self.client.chat.completions.create(**kwargs)
        except openai.APITimeoutError as exc:
            raise ProviderError(f"OpenAI request timed out: {exc}", ProviderErrorKind.TIMEOUT) from exc
        except openai.RateLimitError as exc:
            raise ProviderError(f"OpenAI rate limit reached: {exc}", ProviderErrorKind.RATE_LIMIT) from exc
        except openai.OpenAIError as exc:
            raise ProviderError(f"OpenAI request failed: {exc}") from exc

        message = response.choices[0].message
        if getattr(message, "refusal", None):
            raise ProviderError(f"OpenAI refused the request: {message.refusal}")
        if not message.content:
            raise ProviderError("OpenAI returned an empty response")

        return _parse_json_object(message.content)


def _parse_json_object(content: str) -> dict[str, Any]:
    """Parse possibly noisy model output into a strict JSON object."""
    try:
        parsed = json.loads(content)
    except JSONDecodeError:
        parsed = _extract_first_json_object(content)

    if not isinstance(parsed, dict):
        raise ProviderError("Expected JSON object from OpenAI response")
    return parsed


def _extract_first_json_object(content: str) -> dict[str, Any]:
    """Extract the first decodable JSON object from an arbitrary string."""
    decoder = json.JSONDecoder()
    for index, char in enumerate(content):
        if char != "{":
            continue
        try:
            candidate, _ = decoder.raw_decode(content[index:])
        except JSONDecodeError:
            continue
        if isinstance(candidate, dict):
            return candidate
    raise ProviderError("Could not extract valid JSON object from OpenAI output")
