"""SummarizationService - Orchestrator for summary generation."""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..config import AppSettings, CompletionSettings, get_settings
from ..errors import MalformedReplyError, SummarizationError, ValidationError
from ..models import (
    ChatMessage,
    ProviderRequest,
    SummaryRequest,
    SummaryResult,
    field_errors,
)
from .client import CompletionClient, ProviderHealth
from .prompt_builder import PromptBuilder
from .response_parser import ResponseParser

logger = logging.getLogger(__name__)

SUMMARY_TEMPERATURE = 0.3
# Room for the bullet points on top of the summary itself
TOKENS_PER_SUMMARY_CHAR = 2


class SummarizationService:
    """Pure orchestrator for summary generation.

    Validates the request, builds the prompt, calls the completion provider
    once and parses the reply. All specialized logic is delegated to injected
    dependencies; the service holds no per-request state.
    """

    def __init__(
        self,
        client: CompletionClient,
        prompt_builder: PromptBuilder,
        response_parser: ResponseParser,
        settings: CompletionSettings,
    ):
        """Initialize summarization service.

        Args:
            client: Completion client for LLM calls
            prompt_builder: Builds prompts for generation
            response_parser: Parses LLM responses
            settings: Provider settings (model name)
        """
        self.client = client
        self.prompt_builder = prompt_builder
        self.response_parser = response_parser
        self.settings = settings

    def validate(
        self, request: Union[SummaryRequest, Mapping[str, Any]]
    ) -> SummaryRequest:
        """Check request bounds before anything touches the network.

        Raises:
            ValidationError: With per-field messages
        """
        data = (
            request.model_dump()
            if isinstance(request, SummaryRequest)
            else dict(request)
        )
        try:
            return SummaryRequest.model_validate(data)
        except PydanticValidationError as exc:
            errors = field_errors(exc.errors())
            logger.info("Rejected summary request", extra={"errors": errors})
            raise ValidationError(errors) from exc

    async def summarize(
        self, request: Union[SummaryRequest, Mapping[str, Any]]
    ) -> SummaryResult:
        """Summarize text into a synopsis plus bullet points.

        Args:
            request: Summary request (model or raw mapping)

        Returns:
            Structured summary with usage metadata

        Raises:
            ValidationError: Request out of bounds (no outbound call made)
            ProviderError: Provider answered with a non-success status
            ProviderTimeoutError: Provider did not answer in time
            MalformedReplyError: Provider answered without usable content
        """
        valid = self.validate(request)

        logger.info(
            "Starting text summarization",
            extra={
                "text_length": len(valid.text),
                "max_summary_length": valid.max_summary_length,
            },
        )

        provider_request = self._build_provider_request(valid)

        try:
            reply = await self.client.complete(provider_request)

            content = reply.first_content
            if content is None or not content.strip():
                raise MalformedReplyError("Completion provider returned no message content")

            parsed = self.response_parser.parse(content)
        except SummarizationError as exc:
            logger.error(
                f"Text summarization failed: {exc}",
                extra={"error_kind": exc.kind.value},
            )
            raise

        result = SummaryResult(
            summary=parsed.summary,
            bullet_points=parsed.bullet_points,
            processed_at=datetime.now(timezone.utc),
            tokens_used=reply.total_tokens,
        )

        logger.info(
            "Text summarization completed",
            extra={
                "tokens_used": result.tokens_used,
                "bullet_count": len(result.bullet_points),
            },
        )
        return result

    async def probe(self) -> bool:
        """Liveness signal for the health-check aggregator."""
        return await self.client.probe()

    async def check_health(self) -> ProviderHealth:
        """Probe the provider and report latency."""
        return await self.client.check_health()

    async def aclose(self) -> None:
        await self.client.aclose()

    def _build_provider_request(self, request: SummaryRequest) -> ProviderRequest:
        prompt = self.prompt_builder.build(request.text, request.max_summary_length)
        return ProviderRequest(
            model=self.settings.model,
            messages=[
                ChatMessage(role="system", content=self.prompt_builder.system_message),
                ChatMessage(role="user", content=prompt),
            ],
            max_tokens=request.max_summary_length * TOKENS_PER_SUMMARY_CHAR,
            temperature=SUMMARY_TEMPERATURE,
        )


def create_summarization_service(
    settings: Optional[AppSettings] = None,
    *,
    client: Optional[CompletionClient] = None,
) -> SummarizationService:
    """Factory function to create a configured SummarizationService.

    Args:
        settings: Application settings, uses cached settings if not provided
        client: Optional pre-built completion client

    Returns:
        Configured SummarizationService
    """
    if settings is None:
        settings = get_settings()

    completion = settings.completion
    if not completion.is_configured():
        logger.warning("No completion API key configured; provider calls will be rejected")

    return SummarizationService(
        client=client or CompletionClient(completion),
        prompt_builder=PromptBuilder(),
        response_parser=ResponseParser(),
        settings=completion,
    )
