"""Toolbox — the combined tool surface offered to the model for one loop run."""

import asyncio
import json
from collections.abc import Awaitable
from typing import TypeVar

from agent_loop.config.domain.provider import ProviderConfig
from agent_loop.tools.domain.connection import ConnectionPool, ProviderConnection
from agent_loop.tools.domain.observer import ConnectorObserver
from agent_loop.tools.domain.schema import (
    FunctionDeclaration,
    FunctionParameters,
    StringParameter,
)
from agent_loop.tools.domain.tool import ToolResult
from agent_loop.tools.domain.translator import to_function_declaration
from agent_loop.tools.infrastructure.errors import ToolExecutionError

LIST_RESOURCES_TOOL = "list_mcp_resources"
READ_RESOURCE_TOOL = "read_mcp_resource"

_LIST_RESOURCES_DECLARATION = FunctionDeclaration(
    name=LIST_RESOURCES_TOOL,
    description=(
        "List all available resources from connected MCP servers. "
        "Use this to discover what data/context is available."
    ),
)

_READ_RESOURCE_DECLARATION = FunctionDeclaration(
    name=READ_RESOURCE_TOOL,
    description=(
        "Read the content of a specific MCP resource by its URI. "
        "First use list_mcp_resources to find available resources."
    ),
    parameters=FunctionParameters(
        properties={
            "uri": StringParameter(
                description=(
                    "The URI of the resource to read "
                    '(e.g., "resource://database-schema")'
                )
            )
        },
        required=["uri"],
    ),
)

_T = TypeVar("_T")


class Toolbox:
    """Provider tools plus the built-in resource tools, with call routing.

    Build one per loop run with `Toolbox.assemble`; the connections it holds
    belong to the pool and are not closed by the toolbox.
    """

    def __init__(
        self,
        connections: list[ProviderConnection],
        declarations: list[FunctionDeclaration],
        owners: dict[str, ProviderConnection],
        call_timeout_seconds: float,
    ) -> None:
        self._connections = connections
        self._declarations = declarations
        self._owners = owners
        self._call_timeout = call_timeout_seconds

    @classmethod
    async def assemble(
        cls,
        pool: ConnectionPool,
        provider_configs: list[ProviderConfig],
        observer: ConnectorObserver,
        call_timeout_seconds: float = 60.0,
    ) -> "Toolbox":
        """Connect every enabled provider and collect its translated tools.

        Providers that cannot be connected or listed contribute no tools;
        nothing here raises for a single provider's failure.
        """
        connections: list[ProviderConnection] = []
        declarations: list[FunctionDeclaration] = []
        owners: dict[str, ProviderConnection] = {}

        for config in provider_configs:
            if not config.enabled:
                continue
            try:
                connection = await pool.connect(config)
            except Exception as exc:
                observer.provider_connection_failed(
                    provider_id=config.id, reason=str(exc) or type(exc).__name__
                )
                continue
            if connection is None:
                continue
            connections.append(connection)

            try:
                tools = await asyncio.wait_for(
                    connection.list_tools(), timeout=call_timeout_seconds
                )
            except Exception as exc:
                observer.tool_discovery_failed(
                    provider_id=config.id, reason=str(exc) or type(exc).__name__
                )
                continue

            registered: list[str] = []
            for tool in tools:
                owner = owners.get(tool.name)
                if owner is not None:
                    observer.tool_name_conflict(
                        tool_name=tool.name,
                        provider_id=config.id,
                        owner_provider_id=owner.provider_id,
                    )
                    continue
                owners[tool.name] = connection
                declarations.append(to_function_declaration(tool))
                registered.append(tool.name)
            observer.tools_discovered(provider_id=config.id, tool_names=registered)

        if connections:
            declarations.append(_LIST_RESOURCES_DECLARATION)
            declarations.append(_READ_RESOURCE_DECLARATION)

        return cls(
            connections=connections,
            declarations=declarations,
            owners=owners,
            call_timeout_seconds=call_timeout_seconds,
        )

    @property
    def declarations(self) -> list[FunctionDeclaration]:
        return list(self._declarations)

    @property
    def num_connections(self) -> int:
        return len(self._connections)

    def tool_payload(self) -> list[dict[str, object]]:
        return [declaration.to_tool() for declaration in self._declarations]

    async def execute(self, name: str, args: dict[str, object]) -> ToolResult:
        """Run one tool call and return its flattened result.

        A provider-reported error comes back as `ToolResult(is_error=True)`.

        Raises:
            ToolExecutionError: if the tool is unknown, raises, or times out.
        """
        if name == LIST_RESOURCES_TOOL:
            return await self._list_resources()
        if name == READ_RESOURCE_TOOL:
            return await self._read_resource(args)

        owner = self._owners.get(name)
        if owner is None:
            raise ToolExecutionError(
                tool_name=name, reason="Tool not found or execution failed"
            )
        return await self._bounded(name, owner.call_tool(name, args))

    async def _list_resources(self) -> ToolResult:
        resources: list[dict[str, object]] = []
        for connection in self._connections:
            listed = await self._bounded(
                LIST_RESOURCES_TOOL,
                connection.list_resources(),
                reason_prefix="Failed to list resources",
            )
            resources.extend(resource.model_dump() for resource in listed)
        return ToolResult(text=json.dumps({"resources": resources}))

    async def _read_resource(self, args: dict[str, object]) -> ToolResult:
        uri = args.get("uri")
        if not isinstance(uri, str) or not uri:
            raise ToolExecutionError(
                tool_name=READ_RESOURCE_TOOL, reason="missing required argument 'uri'"
            )

        for connection in self._connections:
            try:
                contents = await asyncio.wait_for(
                    connection.read_resource(uri), timeout=self._call_timeout
                )
            except Exception:
                # Not this provider's resource; try the next one.
                continue
            return ToolResult(
                text=json.dumps(
                    {
                        "uri": uri,
                        "contents": [content.model_dump() for content in contents],
                    }
                )
            )

        raise ToolExecutionError(
            tool_name=READ_RESOURCE_TOOL, reason=f"Resource not found: {uri}"
        )

    async def _bounded(
        self, name: str, call: Awaitable[_T], reason_prefix: str | None = None
    ) -> _T:
        """Await `call` under the per-call timeout, wrapping any failure."""
        try:
            return await asyncio.wait_for(call, timeout=self._call_timeout)
        except TimeoutError as exc:
            reason = f"timed out after {self._call_timeout:g}s"
            raise ToolExecutionError(
                tool_name=name, reason=_prefixed(reason_prefix, reason)
            ) from exc
        except ToolExecutionError:
            raise
        except Exception as exc:
            reason = str(exc) or type(exc).__name__
            raise ToolExecutionError(
                tool_name=name, reason=_prefixed(reason_prefix, reason)
            ) from exc


def _prefixed(prefix: str | None, reason: str) -> str:
    return f"{prefix}: {reason}" if prefix else reason
