"""
Session Orchestrator
Lifecycle of one streaming exchange: connect, stream, cancel, and actions.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping

from ..core.ids import SessionID, new_session_id
from ..core.logging_config import LogContext, get_logger
from ..monitoring.metrics import metrics_collector
from ..parser.errors import BackendError, ParseWarning
from ..parser.stream_parser import StreamParser
from ..protocol.limits import DEFAULT_LIMITS, ResourceLimits
from ..protocol.models import Action, ComponentNode
from ..registry.registry import ComponentRegistry
from ..renderer.dispatcher import ActionClock, TreeRenderer
from .cancellation import CancellationToken
from .transport import ConnectionFailedError, Transport

logger = get_logger(__name__)


class SessionStatus(str, Enum):
    """Session lifecycle states."""

    IDLE = "idle"
    CONNECTING = "connecting"
    STREAMING = "streaming"
    CONNECTED = "connected"
    ERROR = "error"


@dataclass(frozen=True)
class SessionSnapshot:
    """What a host needs to render and to watch a session."""

    status: SessionStatus
    generation: int
    version: int
    root_components: list[ComponentNode]
    complete: bool
    last_error: Exception | None

    @property
    def is_streaming(self) -> bool:
        return self.status in (SessionStatus.CONNECTING, SessionStatus.STREAMING)

    @property
    def is_connected(self) -> bool:
        return self.status in (SessionStatus.STREAMING, SessionStatus.CONNECTED)


class SessionOrchestrator:
    """
    Drives one streaming session at a time.

    Each ``connect`` bumps the session generation and supersedes the previous
    session; every asynchronous completion checks its generation and token
    before touching the tree, so late bytes from a superseded request are
    discarded. All tree mutation happens on the event loop that owns this
    object.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        transport: Transport,
        limits: ResourceLimits | None = None,
        *,
        on_update: Callable[[SessionSnapshot], None] | None = None,
        on_error: Callable[[Exception], None] | None = None,
        on_warning: Callable[[ParseWarning], None] | None = None,
        stream_actions: bool = True,
        log_actions: bool = True,
    ) -> None:
        self.registry = registry
        self.transport = transport
        self.limits = limits or DEFAULT_LIMITS
        self.on_update = on_update
        self.on_error = on_error
        self.on_warning = on_warning
        self.stream_actions = stream_actions
        self.log_actions = log_actions

        self._parser: StreamParser | None = None
        self._status = SessionStatus.IDLE
        self._generation = 0
        self._token = CancellationToken()
        self._task: asyncio.Task | None = None
        self._action_tasks: set[asyncio.Task] = set()
        self._root_components: list[ComponentNode] = []
        self._version = 0
        self._last_error: Exception | None = None
        self._terminal = False
        self._session_id: SessionID | None = None
        self._action_clock = ActionClock()

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def version(self) -> int:
        return self._version

    @property
    def root_components(self) -> list[ComponentNode]:
        return list(self._root_components)

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def is_streaming(self) -> bool:
        return self._status in (SessionStatus.CONNECTING, SessionStatus.STREAMING)

    @property
    def is_connected(self) -> bool:
        return self._status in (SessionStatus.STREAMING, SessionStatus.CONNECTED)

    @property
    def parser(self) -> StreamParser:
        return self._ensure_parser()

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            status=self._status,
            generation=self._generation,
            version=self._version,
            root_components=list(self._root_components),
            complete=self._parser.complete if self._parser else False,
            last_error=self._last_error,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(
        self, message: str | None = None, *, extra_body: Mapping[str, Any] | None = None
    ) -> asyncio.Task:
        """
        Start a new session, superseding any session in flight.

        Args:
            message: Optional seed message for the model
            extra_body: Extra request fields supplied by the host

        Returns:
            The task reading the response; awaiting it is optional
        """
        self.disconnect()

        parser = self._ensure_parser()
        parser.reset()
        self._last_error = None
        self._terminal = False
        self._generation += 1
        self._session_id = new_session_id()

        generation = self._generation
        token = self._token
        body = self.build_request_body(message=message, extra_body=extra_body)

        self._publish()
        self._set_status(SessionStatus.CONNECTING)
        logger.info("session_connect", session_id=self._session_id, generation=generation)

        self._task = asyncio.get_running_loop().create_task(
            self._run_session(generation, token, body), name=f"a2ui-session-{generation}"
        )
        return self._task

    def disconnect(self) -> None:
        """Abort the current session and any action streams; returns to idle."""
        self._token.cancel()
        self._token = CancellationToken()

        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

        for task in list(self._action_tasks):
            task.cancel()

        if self._status is not SessionStatus.IDLE:
            logger.info("session_disconnect", generation=self._generation)
            self._set_status(SessionStatus.IDLE)

    cancel = disconnect

    def reset(self) -> None:
        """Clear the tree without touching the connection."""
        if self._parser is not None:
            self._parser.reset()
        self._publish()

    async def aclose(self) -> None:
        """Disconnect and close the transport."""
        pending = [task for task in (self._task, *self._action_tasks) if task is not None]
        self.disconnect()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        await self.transport.aclose()

    async def __aenter__(self) -> "SessionOrchestrator":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def send_action(
        self,
        action: Action | Mapping[str, Any],
        *,
        stream: bool | None = None,
        extra_body: Mapping[str, Any] | None = None,
    ) -> asyncio.Task:
        """
        Send a user action to the backend.

        Args:
            action: Action (or its wire mapping)
            stream: True to apply the backend's NDJSON reply to the tree,
                False for fire-and-forget; defaults to ``stream_actions``
            extra_body: Extra request fields supplied by the host

        Returns:
            The task performing the request
        """
        if not isinstance(action, Action):
            action = Action.model_validate(action)
        should_stream = self.stream_actions if stream is None else stream
        mode = "stream" if should_stream else "fire_and_forget"

        if self.log_actions:
            logger.info(
                "action_sent",
                type=action.type,
                component=action.component_id,
                timestamp=action.timestamp,
                mode=mode,
            )

        if should_stream:
            body = self.build_request_body(action=action, extra_body=extra_body)
            coro = self._stream_action(self._generation, self._token, body)
        else:
            body = self.build_request_body(action=action, extra_body=extra_body, components=False)
            coro = self._post_action(body)

        task = asyncio.get_running_loop().create_task(coro, name=f"a2ui-action-{mode}")
        self._action_tasks.add(task)
        task.add_done_callback(self._action_tasks.discard)
        return task

    def create_renderer(self) -> TreeRenderer:
        """A renderer whose user actions are sent through this session."""
        return TreeRenderer(self.registry, on_action=self.send_action, timestamps=self._action_clock)

    def build_request_body(
        self,
        *,
        message: str | None = None,
        action: Action | None = None,
        extra_body: Mapping[str, Any] | None = None,
        components: bool = True,
    ) -> dict[str, Any]:
        """Request body: host fields, seed message or action, and the component vocabulary."""
        body: dict[str, Any] = dict(extra_body or {})
        if message is not None:
            body["message"] = message
        if action is not None:
            body["action"] = action.to_wire()
        if components:
            body["components"] = self.registry.describe()
        return body

    # ------------------------------------------------------------------
    # Stream consumption
    # ------------------------------------------------------------------

    def _is_current(self, generation: int, token: CancellationToken) -> bool:
        return generation == self._generation and not token.cancelled

    async def _run_session(
        self, generation: int, token: CancellationToken, body: dict[str, Any]
    ) -> None:
        outcome = "completed"

        def record(duration: float) -> None:
            metrics_collector.record_session(outcome, duration)

        with LogContext(session_id=self._session_id, generation=generation), metrics_collector.track_session(record):
            try:
                async with self.transport.open(body) as response:
                    if not self._is_current(generation, token):
                        outcome = "superseded"
                        return
                    self._set_status(SessionStatus.STREAMING)

                    async for chunk in response.chunks(token):
                        if not self._is_current(generation, token):
                            outcome = "superseded"
                            return
                        self._feed(self._parser, chunk)
                        if self._terminal:
                            break

                if not self._is_current(generation, token):
                    outcome = "superseded"
                    return

                if self._terminal:
                    outcome = "backend_error"
                    self._set_status(SessionStatus.ERROR)
                    return

                self._finish(self._parser)
                self._set_status(SessionStatus.CONNECTED)
                logger.info("session_complete", version=self._version)

            except ConnectionFailedError as e:
                if not self._is_current(generation, token):
                    outcome = "superseded"
                    return
                outcome = "connection_failed"
                logger.error("connection_failed", error=str(e))
                self._report(e)
                self._set_status(SessionStatus.ERROR)

            except asyncio.CancelledError:
                if token.cancelled:
                    # Caller-initiated: an expected outcome, not an error
                    outcome = "cancelled"
                    logger.info("session_cancelled")
                    return
                raise

            except Exception as e:
                if not self._is_current(generation, token):
                    outcome = "superseded"
                    return
                outcome = "failed"
                logger.error("session_failed", error=str(e), exc_info=True)
                self._last_error = e
                self._set_status(SessionStatus.ERROR)
                self._report(e)

    async def _stream_action(
        self, generation: int, token: CancellationToken, body: dict[str, Any]
    ) -> None:
        # Own record buffer, shared tree
        parser = self._ensure_parser().fork()
        try:
            async with self.transport.open(body) as response:
                if not response.is_ndjson:
                    metrics_collector.record_action("stream", "no_content")
                    return
                async for chunk in response.chunks(token):
                    if not self._is_current(generation, token):
                        return
                    self._feed(parser, chunk)

            if not self._is_current(generation, token):
                return
            self._finish(parser)
            metrics_collector.record_action("stream", "applied")
            if self._terminal:
                self._set_status(SessionStatus.ERROR)

        except ConnectionFailedError as e:
            metrics_collector.record_action("stream", "failed")
            if self._is_current(generation, token):
                logger.warning("action_failed", error=str(e))
                self._report(e)

        except asyncio.CancelledError:
            if token.cancelled:
                return
            raise

        except Exception as e:
            metrics_collector.record_action("stream", "failed")
            if self._is_current(generation, token):
                logger.error("action_stream_failed", error=str(e), exc_info=True)
                self._last_error = e
                self._set_status(SessionStatus.ERROR)
                self._report(e)

    async def _post_action(self, body: dict[str, Any]) -> None:
        try:
            await self.transport.post(body)
        except ConnectionFailedError as e:
            metrics_collector.record_action("fire_and_forget", "failed")
            logger.warning("action_failed", error=str(e))
            self._report(ConnectionFailedError(f"Failed to send action: {e}", e.status_code))
            return
        metrics_collector.record_action("fire_and_forget", "sent")

    def _feed(self, parser: StreamParser, chunk: bytes | str) -> None:
        if isinstance(chunk, bytes):
            metrics_collector.record_bytes(len(chunk))
        if parser.process_chunk(chunk):
            self._publish()

    def _finish(self, parser: StreamParser) -> None:
        """Natural end of a stream: apply a final unterminated record."""
        if parser.flush():
            self._publish()

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def _ensure_parser(self) -> StreamParser:
        if self._parser is None:
            self._parser = StreamParser(
                limits=self.limits,
                on_warning=self._handle_warning,
                on_error=self._handle_error,
            )
        return self._parser

    def _handle_warning(self, warning: ParseWarning) -> None:
        if self.on_warning:
            self.on_warning(warning)

    def _handle_error(self, error: Exception, payload: Any) -> None:
        if isinstance(error, BackendError) and not error.recoverable:
            self._terminal = True
        self._report(error)

    def _report(self, error: Exception) -> None:
        self._last_error = error
        if self.on_error:
            self.on_error(error)

    def _publish(self) -> None:
        parser = self._ensure_parser()
        self._root_components = parser.root_components()
        self._version = parser.version
        self._notify()

    def _set_status(self, status: SessionStatus) -> None:
        if status is self._status:
            return
        logger.debug("session_status", status=status.value)
        self._status = status
        self._notify()

    def _notify(self) -> None:
        if self.on_update:
            self.on_update(self.snapshot())
