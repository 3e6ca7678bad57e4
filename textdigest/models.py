"""
Pydantic models for the textdigest service.

These models define the public request/response shapes and the payloads
exchanged with the chat-completion provider.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

TEXT_MIN_LENGTH = 10
TEXT_MAX_LENGTH = 10000
SUMMARY_LENGTH_MIN = 50
SUMMARY_LENGTH_MAX = 1000
SUMMARY_LENGTH_DEFAULT = 200


class CamelModel(BaseModel):
    """Base model exposing camelCase names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== API Request/Response Models ====================

class SummaryRequest(CamelModel):
    """Request to summarize a block of text."""

    text: str = Field(default="", validate_default=True)
    max_summary_length: int = Field(
        default=SUMMARY_LENGTH_DEFAULT,
        description="Upper bound for the summary, in characters",
    )

    @field_validator("text")
    @classmethod
    def _validate_text(cls, value: str) -> str:
        if not value or not value.strip():
            raise PydanticCustomError("text_required", "Text is required")
        if not TEXT_MIN_LENGTH <= len(value) <= TEXT_MAX_LENGTH:
            raise PydanticCustomError(
                "text_length",
                "Text must be between {min} and {max} characters",
                {"min": TEXT_MIN_LENGTH, "max": TEXT_MAX_LENGTH},
            )
        return value

    @field_validator("max_summary_length")
    @classmethod
    def _validate_max_summary_length(cls, value: int) -> int:
        if value < SUMMARY_LENGTH_MIN:
            raise PydanticCustomError(
                "summary_length_min",
                "MaxSummaryLength must be at least {min}",
                {"min": SUMMARY_LENGTH_MIN},
            )
        if value > SUMMARY_LENGTH_MAX:
            raise PydanticCustomError(
                "summary_length_max",
                "MaxSummaryLength must not exceed {max}",
                {"max": SUMMARY_LENGTH_MAX},
            )
        return value


class SummaryResult(CamelModel):
    """Structured summary returned to callers."""

    summary: str
    bullet_points: List[str] = Field(default_factory=list)
    processed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tokens_used: Optional[int] = None


class ProviderHealthStatus(CamelModel):
    """Health of a single dependency as reported by /health."""

    healthy: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class HealthResponse(CamelModel):
    """Aggregated health check response."""

    status: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str
    services: Dict[str, ProviderHealthStatus] = Field(default_factory=dict)


def field_errors(errors: Iterable[Mapping[str, Any]]) -> Dict[str, List[str]]:
    """Group pydantic error entries by wire field name.

    Works for both ``ValidationError.errors()`` and FastAPI's
    ``RequestValidationError.errors()`` (whose locations start with "body").
    """
    grouped: Dict[str, List[str]] = {}
    for error in errors:
        loc = [part for part in error.get("loc", ()) if part != "body"]
        name = str(loc[-1]) if loc else "body"
        if "_" in name:
            name = to_camel(name)
        if error.get("type") == "missing":
            message = f"{name[:1].upper()}{name[1:]} is required"
        else:
            message = error.get("msg", "Invalid value")
        grouped.setdefault(name, []).append(message)
    return grouped


# ==================== Provider Models ====================

class ChatMessage(BaseModel):
    """One role-tagged message sent to the provider."""

    role: str
    content: str


class ProviderRequest(BaseModel):
    """Chat-completion request payload."""

    model: str
    messages: List[ChatMessage]
    max_tokens: int
    temperature: Optional[float] = None

    def to_payload(self) -> Dict[str, Any]:
        """Serialize for the wire, leaving out unset optional knobs."""
        return self.model_dump(exclude_none=True)


class ReplyMessage(BaseModel):
    content: Optional[str] = None


class Choice(BaseModel):
    message: Optional[ReplyMessage] = None


class Usage(BaseModel):
    total_tokens: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("total_tokens", "totalTokens"),
    )


class ProviderReply(BaseModel):
    """Chat-completion response payload (only the fields we use)."""

    choices: List[Choice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    @property
    def first_content(self) -> Optional[str]:
        """Message body of the first choice, if any."""
        if not self.choices or self.choices[0].message is None:
            return None
        return self.choices[0].message.content

    @property
    def total_tokens(self) -> Optional[int]:
        return self.usage.total_tokens if self.usage else None


@dataclass
class ParsedSummary:
    """Summary and bullet points extracted from a provider reply."""

    summary: str
    bullet_points: List[str] = field(default_factory=list)
