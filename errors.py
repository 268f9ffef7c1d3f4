"""Provider error taxonomy shared by the search and LLM clients."""

from __future__ import annotations

import asyncio
from enum import Enum


class ProviderErrorKind(str, Enum):
    TIMEOUT = "timeout"
    RATE_LIMIT = "rate_limit"
    OTHER = "other"


class ProviderError(RuntimeError):
    """Raised by provider clients with a structured failure kind."""

    def __init__(self, message: str, kind: ProviderErrorKind = ProviderErrorKind.OTHER) -> None:
        super().__init__(message)
        self.kind = kind


def classify_error(exc: BaseException) -> ProviderErrorKind:
    """Return the failure kind for any exception raised during a query task."""
    if isinstance(exc, ProviderError):
        return exc.kind
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ProviderErrorKind.TIMEOUT
    return ProviderErrorKind.OTHER


def kind_for_status(status_code: int | None) -> ProviderErrorKind:
    """Map an HTTP status code onto a failure kind."""
    if status_code == 429:
        return ProviderErrorKind.RATE_LIMIT
    if status_code in (408, 504):
        return ProviderErrorKind.TIMEOUT
    return ProviderErrorKind.OTHER
