"""Pytest configuration and fixtures."""

import asyncio
import os
from collections import deque
from contextlib import asynccontextmanager
from typing import Any, Callable

import pytest

from a2ui.core.config import get_settings
from a2ui.core.container import create_container
from a2ui.core.json import encode_bytes
from a2ui.parser.stream_parser import StreamParser
from a2ui.protocol.limits import ResourceLimits
from a2ui.registry.defaults import register_default_components
from a2ui.registry.registry import ComponentRegistry
from a2ui.renderer.dispatcher import TreeRenderer
from a2ui.session.cancellation import CancellationToken


# ============================================================================
# Pytest Hooks
# ============================================================================

def pytest_configure(config):
    """Configure pytest with environment variables."""
    os.environ["A2UI_LOG_LEVEL"] = "DEBUG"
    os.environ["A2UI_ENDPOINT"] = "http://testserver/api/a2ui"


# ============================================================================
# Helpers
# ============================================================================

def ndjson(*records: dict[str, Any]) -> bytes:
    """Encode records as newline-terminated JSON lines."""
    return b"".join(encode_bytes(record) + b"\n" for record in records)


def component(node_id: str, type_: str = "Text", props: dict[str, Any] | None = None, **extra: Any) -> dict[str, Any]:
    """A ``component`` message record."""
    data: dict[str, Any] = {"id": node_id, "type": type_, "props": props if props is not None else {"text": node_id}}
    complete = extra.pop("complete", None)
    data.update(extra)
    record: dict[str, Any] = {"type": "component", "data": data}
    if complete is not None:
        record["complete"] = complete
    return record


async def wait_for(predicate: Callable[[], bool], attempts: int = 200) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


class FakeResponse:
    """Scripted response body; ``asyncio.Event`` items pause the stream until set, exceptions are raised."""

    def __init__(self, *items: Any, content_type: str = "application/x-ndjson") -> None:
        self.items = items
        self.content_type = content_type

    @property
    def is_ndjson(self) -> bool:
        return "ndjson" in self.content_type

    async def chunks(self, token: CancellationToken | None = None):
        for item in self.items:
            if isinstance(item, asyncio.Event):
                await item.wait()
                continue
            if isinstance(item, Exception):
                raise item
            await asyncio.sleep(0)
            if token is not None and token.cancelled:
                break
            yield item


class FakeTransport:
    """In-memory transport recording every request."""

    def __init__(self) -> None:
        self.responses: deque[FakeResponse | Exception] = deque()
        self.requests: list[dict[str, Any]] = []
        self.posts: list[dict[str, Any]] = []
        self.post_error: Exception | None = None
        self.closed = False

    def queue(self, *items: Any, content_type: str = "application/x-ndjson") -> FakeResponse:
        response = FakeResponse(*items, content_type=content_type)
        self.responses.append(response)
        return response

    def fail(self, error: Exception) -> None:
        self.responses.append(error)

    @asynccontextmanager
    async def open(self, body):
        self.requests.append(dict(body))
        response = self.responses.popleft()
        if isinstance(response, Exception):
            raise response
        yield response

    async def post(self, body) -> None:
        self.posts.append(dict(body))
        if self.post_error is not None:
            raise self.post_error

    async def aclose(self) -> None:
        self.closed = True


# ============================================================================
# Core Fixtures
# ============================================================================

@pytest.fixture
def settings():
    """Test settings."""
    get_settings.cache_clear()
    return get_settings()


@pytest.fixture
def di_container(settings):
    """Dependency injection container for testing."""
    return create_container(settings)


@pytest.fixture
def limits():
    """Default resource limits."""
    return ResourceLimits()


# ============================================================================
# Engine Fixtures
# ============================================================================

@pytest.fixture
def registry():
    """Registry with the default vocabulary."""
    return register_default_components(ComponentRegistry())


@pytest.fixture
def warnings():
    """Collected parser warnings."""
    return []


@pytest.fixture
def errors():
    """Collected (error, payload) pairs."""
    return []


@pytest.fixture
def parser(limits, warnings, errors):
    """Stream parser wired to the warning and error collectors."""
    return StreamParser(
        limits=limits,
        on_warning=warnings.append,
        on_error=lambda error, payload: errors.append((error, payload)),
    )


@pytest.fixture
def actions():
    """Collected actions."""
    return []


@pytest.fixture
def renderer(registry, actions):
    """Renderer with a fixed clock."""
    return TreeRenderer(registry, on_action=actions.append, clock=lambda: 1_700_000_000.0)


@pytest.fixture
def transport():
    """In-memory transport."""
    return FakeTransport()
