"""
Fake implementations for testing.

Fakes are simplified working implementations that behave like the real
collaborators but avoid external dependencies, so the production code under
test runs unchanged.

Key fakes:
- FakeCompletionProvider: scripted chat-completion endpoint behind an
  httpx.MockTransport (no network)
"""

from tests.fakes.completion import (
    FakeCompletionProvider,
    WELL_FORMED_REPLY,
    completion_body,
    completion_response,
    hang,
)

__all__ = [
    "FakeCompletionProvider",
    "WELL_FORMED_REPLY",
    "completion_body",
    "completion_response",
    "hang",
]
