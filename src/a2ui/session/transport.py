"""HTTP transport to the model-serving backend."""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncContextManager, Mapping, Protocol

import httpx
import pybreaker

from ..core.json import encode_bytes
from ..core.logging_config import get_logger
from .cancellation import CancellationToken

logger = get_logger(__name__)

JSON_HEADERS = {"Content-Type": "application/json", "Accept": "application/x-ndjson"}


class ConnectionFailedError(Exception):
    """The backend could not be reached or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResponseBody(Protocol):
    """An open streaming response."""

    @property
    def is_ndjson(self) -> bool: ...

    def chunks(self, token: CancellationToken | None = None) -> AsyncIterator[bytes]: ...


class Transport(Protocol):
    """What the session orchestrator needs from the network layer."""

    def open(self, body: Mapping[str, Any]) -> AsyncContextManager[ResponseBody]: ...

    async def post(self, body: Mapping[str, Any]) -> None: ...

    async def aclose(self) -> None: ...


@dataclass
class ResponseStream:
    """Streaming body of an accepted response."""

    response: httpx.Response

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def is_ndjson(self) -> bool:
        return "ndjson" in self.response.headers.get("content-type", "")

    async def chunks(self, token: CancellationToken | None = None) -> AsyncIterator[bytes]:
        """
        Yield raw body chunks until the body ends or ``token`` is cancelled.

        Args:
            token: Checked between reads
        """
        if self.response.status_code == 204:
            return
        async for chunk in self.response.aiter_bytes():
            if token is not None and token.cancelled:
                break
            yield chunk


class HttpTransport:
    """
    Streams NDJSON from the backend with circuit breaker protection.
    Every network fault surfaces as a single ConnectionFailedError.
    """

    def __init__(
        self,
        endpoint: str = "http://localhost:8000/api/a2ui",
        timeout: float = 30.0,
        connect_timeout: float = 5.0,
        headers: Mapping[str, str] | None = None,
        fail_max: int = 5,
        reset_timeout: int = 30,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize transport with circuit breaker.

        Args:
            endpoint: Streaming endpoint URL
            timeout: Read timeout in seconds
            connect_timeout: Connect timeout in seconds
            headers: Extra request headers (e.g. auth)
            fail_max: Consecutive failures before the breaker opens
            reset_timeout: Seconds the breaker stays open
            client: Preconfigured client (ownership stays with the caller)
        """
        self.endpoint = endpoint
        self.headers = {**JSON_HEADERS, **(headers or {})}
        self.reset_timeout = reset_timeout
        self._opened_at: float | None = None
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=connect_timeout)
        )

        transport = self

        class BreakerListener(pybreaker.CircuitBreakerListener):
            """Listener for circuit breaker state changes."""

            def state_change(self, cb, old_state, new_state):
                """Called when circuit breaker state changes."""
                logger.warning(
                    "breaker_state_change",
                    breaker=cb.name,
                    from_state=getattr(old_state, "name", str(old_state)),
                    to_state=getattr(new_state, "name", str(new_state)),
                )
                if getattr(new_state, "name", new_state) == pybreaker.STATE_OPEN:
                    transport._opened_at = time.monotonic()

        self._breaker = pybreaker.CircuitBreaker(
            fail_max=fail_max,
            reset_timeout=reset_timeout,
            name="a2ui-http",
            listeners=[BreakerListener()],
        )

        logger.info("transport_init", endpoint=self.endpoint)

    @property
    def breaker_state(self) -> str:
        return self._breaker.current_state

    def _guard(self) -> None:
        """Reject without sending while the breaker is open and cooling down."""
        if self._breaker.current_state != pybreaker.STATE_OPEN:
            return
        if self._opened_at is not None and time.monotonic() - self._opened_at >= self.reset_timeout:
            # The next outcome is the half-open trial
            return
        logger.error("request_rejected", error="Circuit breaker open - backend unavailable")
        raise ConnectionFailedError("Circuit breaker open - backend unavailable")

    def _admit(self, outcome: httpx.Response | Exception) -> httpx.Response:
        """Pass a request outcome through the breaker; raise on failure."""

        def _check() -> httpx.Response:
            if isinstance(outcome, Exception):
                raise ConnectionFailedError(f"Connection failed: {outcome}") from outcome
            if outcome.is_error:
                raise ConnectionFailedError(f"HTTP {outcome.status_code}", outcome.status_code)
            return outcome

        try:
            return self._breaker.call(_check)
        except pybreaker.CircuitBreakerError as e:
            logger.error("request_rejected", error="Circuit breaker open - backend unavailable")
            raise ConnectionFailedError("Circuit breaker open - backend unavailable") from e

    @asynccontextmanager
    async def open(self, body: Mapping[str, Any]) -> AsyncIterator[ResponseStream]:
        """
        Open a streaming POST request.

        Yields:
            The accepted response stream

        Raises:
            ConnectionFailedError: Non-2xx status, connection reset, open breaker
        """
        self._guard()
        try:
            async with self._client.stream(
                "POST", self.endpoint, content=encode_bytes(dict(body)), headers=self.headers
            ) as response:
                self._admit(response)
                yield ResponseStream(response)
        except httpx.HTTPError as e:
            logger.warning("http_error", error=str(e))
            self._admit(e)

    async def post(self, body: Mapping[str, Any]) -> None:
        """
        Fire-and-forget POST; the response body is ignored.

        Raises:
            ConnectionFailedError: If the request fails
        """
        self._guard()
        outcome: httpx.Response | Exception
        try:
            outcome = await self._client.post(
                self.endpoint, content=encode_bytes(dict(body)), headers=self.headers
            )
        except httpx.HTTPError as e:
            logger.warning("http_error", error=str(e))
            outcome = e
        self._admit(outcome)

    async def aclose(self) -> None:
        """Close HTTP client"""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
