"""
Stream Parser
Turns arbitrary NDJSON chunks into a consistent component tree.
"""

from collections.abc import AsyncGenerator, AsyncIterable
from typing import Any, Callable

from returns.pipeline import is_successful

from ..core.json import JSONParseError, decode_line
from ..core.logging_config import get_logger
from ..monitoring.metrics import metrics_collector
from ..protocol.limits import DEFAULT_LIMITS, ResourceLimits
from ..protocol.models import (
    ActionMessage,
    ComponentMessage,
    ComponentNode,
    ErrorMessage,
    RemoveMessage,
    StreamMessage,
    UpdateMessage,
)
from ..protocol.schema import check_message
from .errors import BackendError, FaultKind, ParseWarning, TreeInvariantError
from .state import TreeState

logger = get_logger(__name__)

WarningCallback = Callable[[ParseWarning], None]
ErrorCallback = Callable[[Exception, Any], None]


class StreamParser:
    """
    Incremental NDJSON parser bound to one component tree.

    Not thread-safe: drive it from a single reader. Malformed, invalid, or
    over-limit records are reported through ``on_warning`` and dropped;
    backend ``error`` messages and tree invariant violations go to
    ``on_error``. Nothing raised by bad input escapes ``process_chunk``.
    """

    def __init__(
        self,
        limits: ResourceLimits | None = None,
        on_warning: WarningCallback | None = None,
        on_error: ErrorCallback | None = None,
        state: TreeState | None = None,
    ) -> None:
        self.limits = limits or DEFAULT_LIMITS
        self.on_warning = on_warning
        self.on_error = on_error
        self._buffer = b""
        self._state = state if state is not None else TreeState()

    def fork(self) -> "StreamParser":
        """
        A parser with its own record buffer that mutates this parser's tree.

        Used when a second byte stream (an action round-trip) feeds the same
        tree concurrently with the main stream.
        """
        return StreamParser(self.limits, self.on_warning, self.on_error, state=self._state)

    # ------------------------------------------------------------------
    # Chunk reassembly
    # ------------------------------------------------------------------

    def process_chunk(self, chunk: str | bytes) -> list[StreamMessage]:
        """
        Process a chunk of the response stream.

        Complete newline-terminated records are parsed and applied in arrival
        order; a trailing partial record stays buffered for the next chunk.
        Records are split on the raw newline byte, which never occurs inside
        a multi-byte UTF-8 sequence, and decoded one at a time.

        Args:
            chunk: Text, or raw bytes (a split UTF-8 sequence is reassembled)

        Returns:
            Messages accepted from this chunk, in order
        """
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8", errors="surrogatepass")

        self._buffer += chunk
        if b"\n" not in self._buffer:
            return []

        *records, self._buffer = self._buffer.split(b"\n")
        messages: list[StreamMessage] = []
        for record in records:
            message = self._process_record(record)
            if message is not None:
                messages.append(message)
        return messages

    def flush(self) -> list[StreamMessage]:
        """
        Process a final record left without a terminating newline.

        Call only at the natural end of a stream, never after cancellation.
        """
        record, self._buffer = self._buffer, b""
        message = self._process_record(record)
        return [message] if message is not None else []

    @property
    def pending(self) -> str:
        """Buffered text of an incomplete record."""
        return self._buffer.decode("utf-8", errors="replace")

    # ------------------------------------------------------------------
    # Record validation & dispatch
    # ------------------------------------------------------------------

    def _process_record(self, record: bytes) -> StreamMessage | None:
        record = record.strip()
        if not record:
            return None
        try:
            line = record.decode("utf-8")
        except UnicodeDecodeError as e:
            self._warn(
                ParseWarning(
                    FaultKind.DECODE,
                    f"Invalid UTF-8 at byte {e.start}",
                    line=record.decode("utf-8", errors="replace"),
                )
            )
            return None
        return self._process_line(line)

    def _process_line(self, line: str) -> StreamMessage | None:
        try:
            raw = decode_line(line)
        except JSONParseError as e:
            self._warn(ParseWarning(FaultKind.DECODE, f"Parse error: {e}", line=line))
            return None

        result = check_message(raw, self.limits)
        if not is_successful(result):
            issues = result.failure()
            errors = tuple(str(issue) for issue in issues)
            limit = next((issue.limit for issue in issues if issue.limit), None)
            if limit is not None:
                self._warn(
                    ParseWarning(
                        FaultKind.LIMIT,
                        f"Limit exceeded ({limit}): {', '.join(errors)}",
                        line=line,
                        errors=errors,
                        limit=limit,
                    )
                )
            else:
                self._warn(
                    ParseWarning(
                        FaultKind.SCHEMA,
                        f"Invalid message: {', '.join(errors)}",
                        line=line,
                        errors=errors,
                    )
                )
            return None

        message = result.unwrap()
        return message if self.apply_message(message) else None

    # ------------------------------------------------------------------
    # Tree mutation
    # ------------------------------------------------------------------

    def apply_message(self, message: StreamMessage) -> bool:
        """
        Apply a validated message to the tree.

        Returns:
            False if the message was dropped with a warning or error
        """
        if isinstance(message, ComponentMessage):
            accepted = self._add_component(message.data)
            if accepted and message.complete:
                self._state.complete = True
        elif isinstance(message, UpdateMessage):
            accepted = self._update_component(message.id, message.props)
        elif isinstance(message, RemoveMessage):
            accepted = True
            self._remove_component(message.id)
        elif isinstance(message, ActionMessage):
            # Actions are forwarded by the caller, never stored
            accepted = True
            logger.debug("action_message", action=message.data.type, component=message.data.component_id)
        elif isinstance(message, ErrorMessage):
            accepted = True
            recoverable = bool(message.recoverable)
            logger.warning("backend_error", message=message.message, recoverable=recoverable)
            self._fail(FaultKind.BACKEND, BackendError(message.message, recoverable), message)
        else:
            raise TypeError(f"Unsupported message: {type(message).__name__}")

        if accepted:
            metrics_collector.record_stream_message(message.type)
        return accepted

    def _add_component(self, node: ComponentNode) -> bool:
        size = len(self._state)
        maximum = self.limits.max_components
        if size >= maximum or size + self._state.new_ids(node) > maximum:
            self._warn(
                ParseWarning(
                    FaultKind.LIMIT,
                    f"Max components limit reached ({maximum})",
                    limit="max_components",
                )
            )
            return False

        try:
            depth = self._state.placement_depth(node)
            if depth > self.limits.max_depth:
                self._warn(
                    ParseWarning(
                        FaultKind.LIMIT,
                        f"Component '{node.id}' would sit at depth {depth}, maximum is {self.limits.max_depth}",
                        limit="max_depth",
                    )
                )
                return False
            self._state.insert(node)
        except TreeInvariantError as e:
            self._fail(FaultKind.INVARIANT, e, node)
            return False

        self._bump()
        return True

    def _update_component(self, node_id: str, props: dict[str, Any]) -> bool:
        if not self._state.merge_props(node_id, props):
            self._warn(
                ParseWarning(FaultKind.MISSING_TARGET, f"Update for unknown component '{node_id}'")
            )
            return False
        self._bump()
        return True

    def _remove_component(self, node_id: str) -> None:
        if self._state.remove(node_id):
            self._bump()
        else:
            logger.debug("remove_unknown", id=node_id)

    def _bump(self) -> None:
        self._state.version += 1

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def _warn(self, warning: ParseWarning) -> None:
        logger.warning(
            "parse_warning", kind=warning.kind.value, detail=warning.message, limit=warning.limit
        )
        metrics_collector.record_parser_warning(warning.kind.value)
        if self.on_warning:
            self.on_warning(warning)

    def _fail(self, kind: FaultKind, error: Exception, payload: Any) -> None:
        if kind is FaultKind.INVARIANT:
            logger.error("tree_invariant_violation", error=str(error))
        metrics_collector.record_parser_warning(kind.value)
        if self.on_error:
            self.on_error(error, payload)

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> TreeState:
        """Snapshot of the current tree."""
        return self._state.copy()

    @property
    def version(self) -> int:
        return self._state.version

    @property
    def complete(self) -> bool:
        return self._state.complete

    def get_component(self, node_id: str) -> ComponentNode | None:
        """A component with its current children resolved."""
        return self._state.materialize(node_id)

    def root_components(self) -> list[ComponentNode]:
        return self._state.roots()

    def reset(self) -> None:
        """Clear buffered input and the tree."""
        self._buffer = b""
        self._state.clear()


async def parse_stream(
    stream: AsyncIterable[str | bytes], **options: Any
) -> AsyncGenerator[StreamMessage, None]:
    """
    Yield accepted messages from an async chunk stream.

    Args:
        stream: Async iterable of text or byte chunks
        **options: StreamParser keyword arguments

    Yields:
        Messages in arrival order
    """
    parser = StreamParser(**options)

    async for chunk in stream:
        for message in parser.process_chunk(chunk):
            yield message

    for message in parser.flush():
        yield message


def parse_document(text: str, **options: Any) -> TreeState:
    """Parse a complete NDJSON document (non-streaming)."""
    parser = StreamParser(**options)
    parser.process_chunk(text + "\n")
    return parser.state
