"""Response parsing for summary generation."""
from __future__ import annotations

import logging
from typing import List

from ..models import ParsedSummary
from .prompt_builder import BULLET_POINTS_HEADER, SUMMARY_HEADER

logger = logging.getLogger(__name__)

BULLET_GLYPHS = ("•", "-", "*")
FALLBACK_SUMMARY_LIMIT = 500
TRUNCATION_MARKER = "..."


class ResponseParser:
    """Parses freeform LLM replies into a summary and bullet points.

    The provider is asked to answer with a ``SUMMARY:`` line followed by a
    ``BULLET POINTS:`` section, but nothing guarantees it complies. Parsing
    therefore never raises: missing structure degrades to a fallback summary
    built from the raw reply, and bullet points are only ever taken from the
    reply itself.
    """

    def parse(self, raw: str) -> ParsedSummary:
        """Parse raw LLM reply into structured output.

        Args:
            raw: Raw message content from the provider

        Returns:
            Parsed summary (bullet points may be empty)
        """
        summary = ""
        bullet_points: List[str] = []
        in_bullets = False

        for line in self._lines(raw):
            if line[: len(SUMMARY_HEADER)].upper() == SUMMARY_HEADER:
                # Captured even inside the bullet section; the last one wins
                summary = line[len(SUMMARY_HEADER):].strip()
            elif line.upper() == BULLET_POINTS_HEADER:
                in_bullets = True
            elif in_bullets and line.startswith(BULLET_GLYPHS):
                bullet_points.append(line[1:].strip())

        if not summary:
            logger.warning(
                "Model output had no summary section; using raw reply",
                extra={"output_length": len(raw), "bullet_count": len(bullet_points)},
            )
            summary = self._fallback_summary(raw)

        return ParsedSummary(summary=summary, bullet_points=bullet_points)

    def _lines(self, raw: str) -> List[str]:
        """Split into trimmed, non-empty lines."""
        return [line.strip() for line in raw.split("\n") if line.strip()]

    def _fallback_summary(self, raw: str) -> str:
        """Raw reply, truncated with a marker when it is too long."""
        if len(raw) > FALLBACK_SUMMARY_LIMIT:
            return raw[:FALLBACK_SUMMARY_LIMIT] + TRUNCATION_MARKER
        return raw
