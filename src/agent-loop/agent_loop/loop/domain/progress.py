"""Progress events and the sink port that receives them."""

from typing import Literal, Protocol

from pydantic import BaseModel

type ProgressType = Literal[
    "iteration_start",
    "thinking",
    "tool_start",
    "tool_end",
    "response",
    "step_complete",
]


class ProgressEvent(BaseModel, frozen=True):
    type: ProgressType
    iteration: int
    content: str
    tool_name: str | None = None


class ProgressSink(Protocol):
    """Receives progress events synchronously from the loop.

    emit() must return promptly: anything slow (network writes, rendering)
    belongs behind a queue owned by the sink.
    """

    def emit(self, event: ProgressEvent) -> None: ...
