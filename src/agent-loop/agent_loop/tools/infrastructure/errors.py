"""Error types raised by tool provider infrastructure."""

from agent_loop.core.errors import AgentLoopError


class MalformedConfigError(AgentLoopError):
    """Raised when a provider's transport descriptor cannot be parsed."""

    def __init__(self, provider_id: str, reason: str) -> None:
        self.provider_id = provider_id
        super().__init__(
            f"Failed to parse transport for provider '{provider_id}': {reason}"
        )


class ProviderConnectionError(AgentLoopError):
    """Raised when a provider process cannot be launched or initialized."""

    def __init__(self, provider_id: str, reason: str) -> None:
        self.provider_id = provider_id
        super().__init__(
            f"Failed to connect to provider '{provider_id}': {reason}", retriable=True
        )


class ToolExecutionError(AgentLoopError):
    """Raised when a tool call fails, times out, or targets an unknown tool."""

    def __init__(self, tool_name: str, reason: str) -> None:
        self.tool_name = tool_name
        self.reason = reason
        super().__init__(f"Failed to execute tool '{tool_name}': {reason}")
