"""LoopState — the states of the iteration engine."""

from enum import StrEnum


class LoopState(StrEnum):
    RUNNING = "running"
    AWAITING_TOOLS = "awaiting_tools"
    DONE = "done"
    FAILED = "failed"
