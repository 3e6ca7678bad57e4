from __future__ import annotations

import logging

import pytest

from textdigest.config import AppSettings, CompletionSettings
from textdigest.summarization import (
    CompletionClient,
    PromptBuilder,
    ResponseParser,
    SummarizationService,
)
from tests.fakes import FakeCompletionProvider


@pytest.fixture()
def completion_settings() -> CompletionSettings:
    """Provider settings with instant retries and a short timeout."""
    return CompletionSettings(
        api_key="test-key",
        base_url="https://llm.test/v1",
        model="test-model",
        timeout_seconds=5,
        max_retries=2,
        retry_delay_seconds=0,
        retry_jitter_seconds=0,
        retry_max_delay_seconds=0,
        user_agent="textdigest-tests/1.0",
    )


@pytest.fixture()
def app_settings(completion_settings: CompletionSettings) -> AppSettings:
    return AppSettings(
        environment="test",
        log_format="text",
        completion=completion_settings,
    )


@pytest.fixture()
def make_service(completion_settings: CompletionSettings):
    """Build a SummarizationService wired to a fake provider."""

    def _make(provider: FakeCompletionProvider, **overrides) -> SummarizationService:
        settings = completion_settings.model_copy(update=overrides)
        return SummarizationService(
            client=CompletionClient(settings, transport=provider.transport),
            prompt_builder=PromptBuilder(),
            response_parser=ResponseParser(),
            settings=settings,
        )

    return _make


@pytest.fixture(autouse=True)
def restore_root_logger():
    """configure_logging() replaces root handlers; put pytest's back afterwards."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
