"""Base exception class for all agent-loop-specific errors."""


class AgentLoopError(Exception):
    """Base class for all agent-loop errors."""

    def __init__(self, message: str, retriable: bool = False) -> None:
        super().__init__(message)
        self.retriable = retriable
