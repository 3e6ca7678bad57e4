"""HTTP client for an OpenAI-compatible chat-completion API."""
from __future__ import annotations

import asyncio
import logging
import random
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import httpx

from ..config import CompletionSettings
from ..errors import MalformedReplyError, ProviderError, ProviderTimeoutError
from ..models import ChatMessage, ProviderReply, ProviderRequest

logger = logging.getLogger(__name__)

COMPLETIONS_PATH = "/chat/completions"
PROBE_MESSAGE = "Hello"
PROBE_MAX_TOKENS = 5

RetriableError = Union[ProviderError, ProviderTimeoutError]


@dataclass
class ProviderHealth:
    """Health status of the completion provider."""

    healthy: bool
    latency_ms: Optional[float] = None
    error: Optional[str] = None


class CompletionClient:
    """Wraps outbound calls to the provider's chat-completion endpoint.

    One ``httpx.AsyncClient`` (and so one connection pool) is created per
    client and shared by all concurrent requests. Base URL, authorization,
    user agent and timeout are fixed at construction time.
    """

    def __init__(
        self,
        settings: CompletionSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize completion client.

        Args:
            settings: Provider endpoint, credentials, timeout and retry policy
            transport: Optional httpx transport (used by tests)
        """
        self.settings = settings
        self._client = httpx.AsyncClient(
            base_url=settings.base_url,
            headers={
                "Authorization": f"Bearer {settings.api_key.get_secret_value()}",
                "User-Agent": settings.user_agent,
            },
            timeout=httpx.Timeout(settings.timeout_seconds),
            transport=transport,
        )

    async def __aenter__(self) -> "CompletionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()

    async def complete(self, request: ProviderRequest) -> ProviderReply:
        """Send a chat-completion request, retrying transient failures.

        Timeouts, transport errors, HTTP 429 and 5xx are retried up to
        ``max_retries`` more times; other failures are raised immediately.

        Args:
            request: Completion request payload

        Returns:
            Decoded provider reply

        Raises:
            ProviderTimeoutError: Provider did not answer within the timeout
            ProviderError: Non-success status or transport failure
            MalformedReplyError: Success status with an undecodable body
        """
        attempts = self.settings.max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._send(request)
            except (ProviderError, ProviderTimeoutError) as exc:
                if not exc.retriable or attempt == attempts:
                    raise
                delay = self._retry_delay(exc)
                logger.warning(
                    f"Completion attempt {attempt} failed: {exc}",
                    extra={
                        "attempt": attempt,
                        "max_attempts": attempts,
                        "error_kind": exc.kind.value,
                        "retry_in_seconds": round(delay, 3),
                    },
                )
                await asyncio.sleep(delay)

        raise AssertionError("unreachable")  # pragma: no cover

    async def probe(self) -> bool:
        """Issue the smallest possible completion call.

        Success means "the call completed with a 2xx status"; the content is
        never inspected and no retries are made.
        """
        request = ProviderRequest(
            model=self.settings.model,
            messages=[ChatMessage(role="user", content=PROBE_MESSAGE)],
            max_tokens=PROBE_MAX_TOKENS,
        )
        try:
            response = await self._post(request.to_payload())
        except (ProviderError, ProviderTimeoutError) as exc:
            logger.warning(
                "Completion provider probe failed", extra={"error": str(exc)}
            )
            return False

        if not response.is_success:
            logger.warning(
                "Completion provider probe returned non-success status",
                extra={"status_code": response.status_code},
            )
            return False
        return True

    async def check_health(self) -> ProviderHealth:
        """Run the probe and report latency alongside the outcome."""
        start = time.monotonic()
        healthy = await self.probe()
        latency = (time.monotonic() - start) * 1000
        return ProviderHealth(
            healthy=healthy,
            latency_ms=latency,
            error=None if healthy else "Completion provider is not responding",
        )

    async def _send(self, request: ProviderRequest) -> ProviderReply:
        """Single attempt: POST, check status, decode."""
        response = await self._post(request.to_payload())

        if not response.is_success:
            body = response.text
            logger.error(
                "Completion request failed",
                extra={"status_code": response.status_code, "response_body": body},
            )
            raise ProviderError(
                f"Completion provider returned HTTP {response.status_code}",
                status_code=response.status_code,
                body=body,
                retry_after=self._parse_retry_after(response),
            )

        try:
            return ProviderReply.model_validate(response.json())
        except ValueError as exc:
            raise MalformedReplyError(
                "Completion provider returned an unreadable reply"
            ) from exc

    async def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        """POST to the completions endpoint, translating httpx failures."""
        timeout = self.settings.timeout_seconds
        try:
            # httpx timeouts are per network operation; wait_for bounds the whole call
            return await asyncio.wait_for(
                self._client.post(COMPLETIONS_PATH, json=payload),
                timeout=timeout,
            )
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            raise ProviderTimeoutError(
                f"Completion provider did not respond within {timeout:g}s",
                timeout_seconds=timeout,
            ) from exc
        except httpx.HTTPError as exc:
            raise ProviderError(
                f"Could not reach completion provider: {exc.__class__.__name__}"
            ) from exc

    def _retry_delay(self, exc: RetriableError) -> float:
        """Fixed delay plus jitter, unless the server said how long to wait."""
        retry_after = getattr(exc, "retry_after", None)
        if retry_after is not None:
            return min(retry_after, self.settings.retry_max_delay_seconds)
        jitter = random.uniform(0, self.settings.retry_jitter_seconds)
        return self.settings.retry_delay_seconds + jitter

    @staticmethod
    def _parse_retry_after(response: httpx.Response) -> Optional[float]:
        """Numeric Retry-After header in seconds; HTTP-date values are ignored."""
        value = response.headers.get("Retry-After")
        if value is None:
            return None
        try:
            seconds = float(value)
        except ValueError:
            return None
        return max(seconds, 0.0)
