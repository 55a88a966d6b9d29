"""ProviderConnection and ConnectionPool ports — structural interfaces for tool providers."""

from typing import Protocol

from agent_loop.config.domain.provider import ProviderConfig
from agent_loop.tools.domain.tool import (
    ResourceContent,
    ResourceDescriptor,
    ToolDescriptor,
    ToolResult,
)


class ProviderConnection(Protocol):
    """A live connection to one tool provider.

    Every method may raise; callers are expected to turn failures into data.
    """

    @property
    def provider_id(self) -> str: ...

    @property
    def provider_name(self) -> str: ...

    async def list_tools(self) -> list[ToolDescriptor]: ...

    async def call_tool(self, name: str, args: dict[str, object]) -> ToolResult: ...

    async def list_resources(self) -> list[ResourceDescriptor]: ...

    async def read_resource(self, uri: str) -> list[ResourceContent]: ...


class ConnectionPool(Protocol):
    """Lazily opens and caches provider connections, keyed by provider id."""

    async def connect(self, config: ProviderConfig) -> ProviderConnection | None: ...

    async def disconnect(self, provider_id: str) -> None: ...

    async def aclose(self) -> None: ...
