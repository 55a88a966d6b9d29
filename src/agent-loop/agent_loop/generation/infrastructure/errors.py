"""Error types raised by generation infrastructure."""

from agent_loop.core.errors import AgentLoopError


class GenerationError(AgentLoopError):
    """Raised when the streaming completion call fails."""

    def __init__(self, reason: str, retriable: bool = False) -> None:
        self.reason = reason
        super().__init__(f"Failed to generate completion: {reason}", retriable=retriable)
