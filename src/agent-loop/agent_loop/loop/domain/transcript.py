"""TranscriptSink port — caller-owned persistence of a finished loop run."""

from typing import Protocol

from agent_loop.loop.domain.result import AgenticResult


class TranscriptSink(Protocol):
    """Stores one audit row per iteration's thoughts, one per tool call, and the answer."""

    def record(self, result: AgenticResult) -> None: ...
