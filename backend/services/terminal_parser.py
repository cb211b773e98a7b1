"""Terminal execution parser.

Turns one completed command execution into the nodes and edges it adds to the
flow graph::

    $ pwd ──solid──▶ /home/user ┄┄dashed┄┄▶ $ ls ──solid──▶ README.md ...

Each session keeps the id of its most recent result node so the next command
can be chained from it. All validation happens before any id is generated or
session state is touched, so a failed call leaves nothing behind.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from backend.config import settings
from backend.mappings import COMMAND_PROMPT
from backend.models.execution import ExecutionContext, ExecutionResult
from backend.models.graph import FlowEdge, FlowNode, GraphDelta, NodeMetadata

logger = logging.getLogger(__name__)


class FlowParseError(Exception):
    """Base class for executions the parser refuses to turn into nodes."""


class InvalidCommand(FlowParseError):
    pass


class OutOfOrderIndex(FlowParseError):
    def __init__(self, session_id: str, expected: int, received: int):
        self.session_id = session_id
        self.expected = expected
        self.received = received
        super().__init__(
            f"Session '{session_id}' expected command index {expected}, got {received}"
        )


@dataclass
class SessionState:
    last_output_id: str | None = None
    next_index: int = 0


_id_counter = itertools.count(1)


def next_node_id() -> str:
    """Process-wide node id, never reused even across parser instances."""
    return f"{settings.NODE_ID_PREFIX}-{next(_id_counter)}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def truncate_output(text: str, max_lines: int) -> tuple[str, str | None]:
    """Shorten ``text`` to ``max_lines`` lines plus an omitted-lines indicator.

    Returns ``(display, full)`` where ``full`` is the original text when it was
    truncated and ``None`` otherwise.
    """
    lines = text.splitlines()
    if len(lines) <= max_lines:
        return text, None

    omitted = len(lines) - max_lines
    noun = "line" if omitted == 1 else "lines"
    display = "\n".join(lines[:max_lines] + [f"... ({omitted} more {noun})"])
    return display, text


def is_failure(result: ExecutionResult) -> bool:
    return not result.success or result.exit_code != 0


def _edge(source: str, target: str, style: str, error: bool = False) -> FlowEdge:
    return FlowEdge(
        id=f"{source}--{target}--{style}",
        from_=source,
        to=target,
        style=style,
        error=error,
    )


class TerminalParser:
    def __init__(
        self,
        max_lines: int | None = None,
        id_factory: Callable[[], str] = next_node_id,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.max_lines = settings.OUTPUT_PREVIEW_LINES if max_lines is None else max_lines
        self._id_factory = id_factory
        self._clock = clock
        self._sessions: dict[str, SessionState] = {}

    def session_state(self, session_id: str) -> SessionState | None:
        state = self._sessions.get(session_id)
        if state is None:
            return None
        return SessionState(last_output_id=state.last_output_id, next_index=state.next_index)

    def restart_chaining(self, session_id: str) -> None:
        """Drop the chaining anchor but keep the session's command numbering."""
        state = self._sessions.get(session_id)
        if state is not None:
            state.last_output_id = None

    def reset_session(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def reset(self) -> None:
        self._sessions.clear()

    def parse_execution(
        self,
        command_text: str,
        result: ExecutionResult,
        context: ExecutionContext,
        sink: Callable[[GraphDelta], None] | None = None,
    ) -> GraphDelta:
        """Build the delta for one execution.

        When ``sink`` is given it receives the delta before session state is
        updated; if it raises, the session is left untouched.
        """
        if not command_text or not command_text.strip():
            logger.warning("Rejected empty command for session %s", context.session_id)
            raise InvalidCommand("Command text must not be empty")

        state = self._sessions.get(context.session_id)
        expected = state.next_index if state else 0
        if context.command_index != expected:
            logger.warning(
                "Rejected out-of-order command for session %s: expected %d, got %d",
                context.session_id,
                expected,
                context.command_index,
            )
            raise OutOfOrderIndex(context.session_id, expected, context.command_index)

        if state is None:
            logger.info("Starting chaining state for session %s", context.session_id)
            state = SessionState()

        input_node = FlowNode(
            id=self._id_factory(),
            type="input",
            content=f"{COMMAND_PROMPT}{command_text}",
            timestamp=self._clock(),
            metadata=NodeMetadata(
                session_id=context.session_id,
                command_index=context.command_index,
            ),
        )

        failed = is_failure(result)
        raw_text = result.error if result.error else result.output
        display, full = truncate_output(raw_text, self.max_lines)

        result_node = FlowNode(
            id=self._id_factory(),
            type="error" if failed else "output",
            content=display,
            timestamp=self._clock(),
            metadata=NodeMetadata(
                session_id=context.session_id,
                command_index=context.command_index,
                exit_code=result.exit_code,
                duration_ms=result.duration_ms,
                full_output=full,
            ),
        )

        edges = [_edge(input_node.id, result_node.id, "solid", error=failed)]
        if state.last_output_id is not None:
            edges.append(_edge(state.last_output_id, input_node.id, "dashed"))

        delta = GraphDelta(
            nodes=[input_node, result_node],
            edges=edges,
            last_output_id=result_node.id,
        )
        if sink is not None:
            sink(delta)

        state.last_output_id = result_node.id
        state.next_index = context.command_index + 1
        self._sessions[context.session_id] = state
        return delta


_parser: TerminalParser | None = None


def get_parser() -> TerminalParser:
    global _parser
    if _parser is None:
        _parser = TerminalParser()
    return _parser
