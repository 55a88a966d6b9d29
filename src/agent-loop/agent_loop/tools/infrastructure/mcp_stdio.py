"""MCP stdio connections and the connection pool that caches them."""

import asyncio
import json
from contextlib import AsyncExitStack
from typing import Any, Literal

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from pydantic import AnyUrl, ValidationError

from agent_loop.config.domain.provider import ProviderConfig, StdioTransport
from agent_loop.tools.domain.observer import ConnectorObserver
from agent_loop.tools.domain.tool import (
    ResourceContent,
    ResourceDescriptor,
    ToolDescriptor,
    ToolResult,
)
from agent_loop.tools.infrastructure.errors import (
    MalformedConfigError,
    ProviderConnectionError,
)


def parse_transport(config: ProviderConfig) -> StdioTransport:
    """Parse a provider's raw transport descriptor into a StdioTransport.

    Raises:
        MalformedConfigError: if the descriptor is empty, not JSON, or has no
            launch command.
    """
    raw: Any = config.transport
    if isinstance(raw, str):
        if not raw.strip():
            raise MalformedConfigError(provider_id=config.id, reason="empty transport")
        try:
            raw = json.loads(raw.strip())
        except json.JSONDecodeError as exc:
            raise MalformedConfigError(
                provider_id=config.id, reason=f"invalid JSON: {exc}"
            ) from exc

    if not isinstance(raw, dict) or not raw.get("command"):
        raise MalformedConfigError(
            provider_id=config.id, reason="missing 'command' field"
        )

    try:
        return StdioTransport.model_validate(raw)
    except ValidationError as exc:
        raise MalformedConfigError(provider_id=config.id, reason=str(exc)) from exc


class McpStdioConnection:
    """A live MCP client session to one provider subprocess.

    Calls on one connection are serialized with an asyncio.Lock: the stdio
    transport is a single request stream shared by every caller of the pool.
    """

    def __init__(
        self,
        config: ProviderConfig,
        transport: StdioTransport,
        session: ClientSession,
        stack: AsyncExitStack,
    ) -> None:
        self._config = config
        self._transport = transport
        self._session = session
        self._stack = stack
        self._lock = asyncio.Lock()
        self.state: Literal["connected", "closed"] = "connected"

    @property
    def provider_id(self) -> str:
        return self._config.id

    @property
    def provider_name(self) -> str:
        return self._config.name

    @property
    def transport(self) -> StdioTransport:
        return self._transport

    async def list_tools(self) -> list[ToolDescriptor]:
        async with self._lock:
            result = await self._session.list_tools()
        return [
            ToolDescriptor(
                name=tool.name,
                description=tool.description,
                input_schema=dict(tool.inputSchema or {}),
                provider_id=self._config.id,
            )
            for tool in result.tools
        ]

    async def call_tool(self, name: str, args: dict[str, object]) -> ToolResult:
        async with self._lock:
            result = await self._session.call_tool(name, args)
        return ToolResult(
            text=_flatten_content(result.content),
            is_error=bool(result.isError),
        )

    async def list_resources(self) -> list[ResourceDescriptor]:
        async with self._lock:
            result = await self._session.list_resources()
        return [
            ResourceDescriptor(
                uri=str(resource.uri),
                name=resource.name,
                description=resource.description,
                mime_type=resource.mimeType,
            )
            for resource in result.resources
        ]

    async def read_resource(self, uri: str) -> list[ResourceContent]:
        async with self._lock:
            result = await self._session.read_resource(AnyUrl(uri))
        contents: list[ResourceContent] = []
        for item in result.contents:
            text = getattr(item, "text", None)
            if isinstance(text, str):
                contents.append(ResourceContent(type="text", text=text))
            else:
                contents.append(
                    ResourceContent(type="resource", text=item.model_dump_json())
                )
        return contents

    async def aclose(self) -> None:
        self.state = "closed"
        await self._stack.aclose()


def _flatten_content(content: list[Any]) -> str:
    """Join text blocks with newlines; non-text blocks are serialized as JSON."""
    parts: list[str] = []
    for block in content or []:
        text = getattr(block, "text", None)
        if isinstance(text, str):
            parts.append(text)
        else:
            parts.append(block.model_dump_json())
    return "\n".join(parts)


class McpConnectionPool:
    """Opens MCP stdio connections on first use and caches them by provider id.

    The pool is owned by whoever constructs it (a service or a single CLI
    run) and must be closed explicitly, or used as an async context manager.
    """

    def __init__(
        self,
        observer: ConnectorObserver,
        connect_timeout_seconds: float = 30.0,
        client_name: str = "agent-loop",
    ) -> None:
        self._observer = observer
        self._connect_timeout = connect_timeout_seconds
        self._client_name = client_name
        self._connections: dict[str, McpStdioConnection] = {}
        self._connect_lock = asyncio.Lock()

    async def __aenter__(self) -> "McpConnectionPool":
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    async def connect(self, config: ProviderConfig) -> McpStdioConnection | None:
        """Return the cached connection for `config.id`, opening it if needed.

        Returns None when the transport is malformed or the provider cannot be
        started; the failure is reported to the observer, never raised.
        """
        async with self._connect_lock:
            cached = self._connections.get(config.id)
            if cached is not None:
                return cached

            try:
                transport = parse_transport(config)
            except MalformedConfigError as exc:
                self._observer.provider_config_malformed(
                    provider_id=config.id, reason=str(exc)
                )
                return None

            try:
                connection = await self._open(config=config, transport=transport)
            except ProviderConnectionError as exc:
                self._observer.provider_connection_failed(
                    provider_id=config.id, reason=str(exc)
                )
                return None

            self._connections[config.id] = connection
            self._observer.provider_connected(
                provider_id=config.id, provider_name=config.name
            )
            return connection

    async def _open(
        self, config: ProviderConfig, transport: StdioTransport
    ) -> McpStdioConnection:
        """Launch the provider process and complete the MCP handshake.

        Raises:
            ProviderConnectionError: if launch or initialization fails or times out.
        """
        params = StdioServerParameters(
            command=transport.command,
            args=list(transport.args),
            env=dict(transport.env) if transport.env is not None else None,
        )
        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(
                stdio_client(params)
            )
            session = await stack.enter_async_context(
                ClientSession(read_stream, write_stream)
            )
            await asyncio.wait_for(session.initialize(), timeout=self._connect_timeout)
        except Exception as exc:
            await _close_quietly(stack)
            raise ProviderConnectionError(
                provider_id=config.id, reason=str(exc) or type(exc).__name__
            ) from exc

        return McpStdioConnection(
            config=config, transport=transport, session=session, stack=stack
        )

    def cached(self, provider_id: str) -> McpStdioConnection | None:
        return self._connections.get(provider_id)

    async def disconnect(self, provider_id: str) -> None:
        """Close and evict one cached connection. Unknown ids are ignored."""
        connection = self._connections.pop(provider_id, None)
        if connection is None:
            return
        try:
            await connection.aclose()
        except Exception as exc:
            self._observer.provider_disconnect_failed(
                provider_id=provider_id, reason=str(exc)
            )
            return
        self._observer.provider_disconnected(provider_id=provider_id)

    async def aclose(self) -> None:
        for provider_id in list(self._connections):
            await self.disconnect(provider_id)


async def _close_quietly(stack: AsyncExitStack) -> None:
    try:
        await stack.aclose()
    except Exception:
        # The original launch error is the one worth reporting.
        pass
