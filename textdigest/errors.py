"""
Error taxonomy for the summarization service.

Every failure carries an ``ErrorKind`` so the HTTP layer (or any other caller)
can branch on ``exc.kind`` instead of on the class hierarchy.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional


class ErrorKind(str, Enum):
    """Failure kinds surfaced by the summarization service."""

    VALIDATION = "validation"
    PROVIDER = "provider"
    TIMEOUT = "timeout"
    MALFORMED_REPLY = "malformed_reply"


class SummarizationError(Exception):
    """Base exception for all summarization failures."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(SummarizationError):
    """Raised when a caller-supplied request is out of bounds.

    Never retried and never reaches the network.
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        detail = "; ".join(
            f"{field}: {', '.join(messages)}" for field, messages in errors.items()
        )
        super().__init__(f"Invalid summary request ({detail})")


class ProviderError(SummarizationError):
    """Raised when the completion provider answers with a non-success status
    or cannot be reached at all.

    ``body`` holds the raw response body for diagnostics only; it must never
    be echoed to end callers.
    """

    kind = ErrorKind.PROVIDER

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.retry_after = retry_after

    @property
    def retriable(self) -> bool:
        """Transport failures, rate limiting and 5xx are worth another try."""
        if self.status_code is None:
            return True
        return self.status_code == 429 or self.status_code >= 500


class ProviderTimeoutError(SummarizationError):
    """Raised when the provider does not respond within the configured window."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, *, timeout_seconds: Optional[float] = None):
        super().__init__(message)
        self.timeout_seconds = timeout_seconds

    @property
    def retriable(self) -> bool:
        return True


class MalformedReplyError(SummarizationError):
    """Raised when the provider succeeds but returns no usable message content."""

    kind = ErrorKind.MALFORMED_REPLY

    @property
    def retriable(self) -> bool:
        return False
