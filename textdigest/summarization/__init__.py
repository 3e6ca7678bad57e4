"""
Summarization module for textdigest.

Provides prompt building, the chat-completion client, response parsing,
and the orchestrator that ties them together.
"""

from .client import CompletionClient, ProviderHealth
from .prompt_builder import PromptBuilder
from .response_parser import ResponseParser
from .service import SummarizationService, create_summarization_service

__all__ = [
    "CompletionClient",
    "ProviderHealth",
    "PromptBuilder",
    "ResponseParser",
    "SummarizationService",
    "create_summarization_service",
]
