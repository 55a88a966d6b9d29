"""ProgressSink implementations — queue, structlog, Rich console, and fan-out."""

import asyncio
import sys

import structlog
from rich.console import Console
from rich.text import Text

from agent_loop.loop.domain.progress import ProgressEvent, ProgressSink

# Rich style per event type.
_EVENT_STYLES: dict[str, str] = {
    "iteration_start": "bold blue",
    "thinking": "dim italic",
    "tool_start": "cyan",
    "tool_end": "green",
    "response": "default",
    "step_complete": "dim",
}


class QueueProgressSink:
    """Puts events on an asyncio.Queue for a streaming transport to drain.

    A full queue drops the event rather than blocking the loop; `dropped`
    counts how many were lost.
    """

    def __init__(self, queue: asyncio.Queue[ProgressEvent]) -> None:
        self._queue = queue
        self.dropped = 0

    def emit(self, event: ProgressEvent) -> None:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.dropped += 1


class StructlogProgressSink:
    """Logs every progress event at debug level."""

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def emit(self, event: ProgressEvent) -> None:
        self._log.debug(
            "loop.progress",
            type=event.type,
            iteration=event.iteration,
            tool_name=event.tool_name,
            content=event.content,
        )


class RichProgressSink:
    """Renders progress lines to stderr with Rich.

    Thought fragments are truncated to `max_thought_chars` so that long
    reasoning does not drown the tool activity.
    """

    def __init__(
        self, console: Console | None = None, max_thought_chars: int = 160
    ) -> None:
        self._console = (
            console if console is not None else Console(file=sys.stderr)
        )
        self._max_thought_chars = max_thought_chars

    def emit(self, event: ProgressEvent) -> None:
        if event.type == "response":
            return
        content = event.content
        if event.type == "thinking":
            content = _truncate(" ".join(content.split()), self._max_thought_chars)
        line = Text.assemble(
            (f"[{event.iteration}] ", "bold"),
            (content, _EVENT_STYLES.get(event.type, "default")),
        )
        self._console.print(line)


class CompositeProgressSink:
    """Delivers every event to each sink in order.

    Does NOT inherit from ProgressSink (structural typing via Protocol).
    """

    def __init__(self, sinks: list[ProgressSink]) -> None:
        self._sinks = sinks

    def emit(self, event: ProgressEvent) -> None:
        for sink in self._sinks:
            sink.emit(event)


def _truncate(text: str, max_len: int) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 1] + "…"
