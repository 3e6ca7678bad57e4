"""Prompt building for summary generation."""
from __future__ import annotations

import logging
from textwrap import dedent
from typing import Optional

logger = logging.getLogger(__name__)

# Section headers the provider is asked to reproduce; ResponseParser keys on them.
SUMMARY_HEADER = "SUMMARY:"
BULLET_POINTS_HEADER = "BULLET POINTS:"
BULLET_GLYPH = "•"

DEFAULT_SYSTEM_MESSAGE = (
    "You are a helpful assistant that creates concise summaries and bullet "
    "points from text."
)


class PromptBuilder:
    """Builds the system instruction and user prompt for a summary request."""

    def __init__(self, system_message: Optional[str] = None):
        """Initialize prompt builder.

        Args:
            system_message: System instruction for the LLM. If None, uses default.
        """
        self._system_message = system_message or DEFAULT_SYSTEM_MESSAGE

    @property
    def system_message(self) -> str:
        return self._system_message

    def build(self, text: str, max_summary_length: int) -> str:
        """Render the user prompt for ``text``.

        Inputs are expected to be validated already; this never fails.

        Args:
            text: Text to summarize, embedded verbatim
            max_summary_length: Character ceiling stated for the summary

        Returns:
            Complete user prompt
        """
        logger.debug(
            "Building summary prompt",
            extra={"text_length": len(text), "max_summary_length": max_summary_length},
        )

        template = dedent(
            f"""
            Please summarize the following text and provide bullet points of the key information.
            Keep the summary under {max_summary_length} characters.

            Format your response exactly as follows:
            {SUMMARY_HEADER} [Your summary here, max {max_summary_length} characters]

            {BULLET_POINTS_HEADER}
            {BULLET_GLYPH} [First key point]
            {BULLET_GLYPH} [Second key point]
            {BULLET_GLYPH} [Third key point]
            [Continue with more bullet points as needed]

            Text to summarize:
            """
        ).strip()

        # Appended after dedent so indentation in the input survives untouched
        return f"{template}\n{text}"
