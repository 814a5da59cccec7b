"""Remote predictor client with rate limiting and circuit breaker."""

import asyncio
import logging
import time
from collections import deque
from typing import Any, Optional

import httpx

from cmdsuggest.config import Settings

logger = logging.getLogger(__name__)

EMPTY_ID = "00000000-0000-0000-0000-000000000000"


class PredictorUnavailable(RuntimeError):
    """The predictor could not supply a usable candidate list."""


class CircuitBreaker:
    """Trips after ``threshold`` consecutive failures.

    Once ``timeout_seconds`` have passed the breaker half-opens: the next
    call goes through, and a single further failure trips it again.
    """

    def __init__(self, threshold: int, timeout_seconds: float) -> None:
        self.threshold = threshold
        self.timeout_seconds = timeout_seconds
        self.failure_count = 0
        self.opened_at: Optional[float] = None
        self._lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self.opened_at is not None

    async def can_execute(self) -> bool:
        async with self._lock:
            if self.opened_at is None:
                return True
            if time.monotonic() - self.opened_at < self.timeout_seconds:
                return False
            self.opened_at = None
            self.failure_count = self.threshold - 1
            return True

    async def record_success(self) -> None:
        async with self._lock:
            self.failure_count = 0
            self.opened_at = None

    async def record_failure(self) -> None:
        async with self._lock:
            self.failure_count += 1
            if self.failure_count >= self.threshold and self.opened_at is None:
                self.opened_at = time.monotonic()


class RateLimiter:
    """Sliding window of at most ``rps`` calls per ``window_seconds``."""

    def __init__(self, rps: int, window_seconds: float) -> None:
        self.rps = rps
        self.window_seconds = window_seconds
        self._calls: deque[float] = deque()
        self._lock = asyncio.Lock()

    async def allow(self) -> tuple[bool, float]:
        """Admit one call, or return ``(False, seconds_until_a_slot_frees)``."""
        async with self._lock:
            now = time.monotonic()
            while self._calls and self._calls[0] <= now - self.window_seconds:
                self._calls.popleft()

            if len(self._calls) < self.rps:
                self._calls.append(now)
                return True, 0.0
            return False, max(self._calls[0] + self.window_seconds - now, 0.0)


class PredictorClient:
    """Fetches known commands and history-conditioned predictions."""

    def __init__(self, settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> None:
        self.settings = settings
        self._client = http_client or httpx.AsyncClient(
            base_url=settings.predictor_url,
            timeout=settings.predictor_timeout_seconds,
        )
        self.circuit_breaker = CircuitBreaker(
            threshold=settings.circuit_breaker_threshold,
            timeout_seconds=settings.circuit_breaker_timeout_seconds,
        )
        self.rate_limiter = RateLimiter(
            rps=settings.rate_limit_rps,
            window_seconds=settings.rate_limit_window_seconds,
        )

    async def fetch_commands(self) -> list[str]:
        return await self._request("GET", "/commands")

    async def fetch_predictions(self, history_snippet: str) -> list[str]:
        return await self._request(
            "POST", "/predictions", json=self.build_request_body(history_snippet)
        )

    def build_request_body(self, history_snippet: str) -> dict[str, Any]:
        return {
            "history": history_snippet,
            "clientType": self.settings.client_type,
            "context": {
                "CorrelationId": EMPTY_ID,
                "SessionId": EMPTY_ID,
                "SubscriptionId": EMPTY_ID,
                "VersionNumber": self.settings.client_version,
            },
        }

    async def _request(self, method: str, path: str, **kwargs: Any) -> list[str]:
        start = time.monotonic()

        allowed, retry_after = await self.rate_limiter.allow()
        if not allowed:
            logger.warning(
                "Predictor request rate limited",
                extra={"path": path, "retry_after": round(retry_after, 3)},
            )
            raise PredictorUnavailable(f"rate limited: {retry_after:.2f}s")

        if not await self.circuit_breaker.can_execute():
            logger.warning("Predictor request blocked: circuit breaker open", extra={"path": path})
            raise PredictorUnavailable("circuit breaker open")

        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            await self.circuit_breaker.record_failure()
            logger.exception("Predictor request failed", extra={"path": path})
            raise PredictorUnavailable(f"{method} {path} failed: {exc}") from exc

        if not isinstance(payload, list) or not all(isinstance(item, str) for item in payload):
            await self.circuit_breaker.record_failure()
            logger.error("Predictor returned malformed payload", extra={"path": path})
            raise PredictorUnavailable(f"{method} {path} returned a non-string list")

        await self.circuit_breaker.record_success()
        logger.info(
            "Predictor request completed",
            extra={
                "path": path,
                "items": len(payload),
                "duration_ms": int((time.monotonic() - start) * 1000),
            },
        )
        return payload

    async def aclose(self) -> None:
        await self._client.aclose()
