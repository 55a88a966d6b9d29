"""Tests for Toolbox assembly, routing, and the built-in resource tools."""

import json

import pytest

from agent_loop.config.domain.provider import ProviderConfig
from agent_loop.tools.application.toolbox import (
    LIST_RESOURCES_TOOL,
    READ_RESOURCE_TOOL,
    Toolbox,
)
from agent_loop.tools.domain.tool import ResourceContent, ToolResult
from agent_loop.tools.infrastructure.errors import ToolExecutionError
from tests.tools.fake_connection import FakeConnection, FakeConnectionPool
from tests.tools.fake_observer import FakeConnectorObserver


def _provider(provider_id: str, enabled: bool = True) -> ProviderConfig:
    return ProviderConfig(
        id=provider_id,
        name=provider_id.title(),
        transport={"command": provider_id},
        enabled=enabled,
    )


async def _assemble(
    connections: dict[str, FakeConnection | Exception],
    providers: list[ProviderConfig],
    observer: FakeConnectorObserver | None = None,
    call_timeout_seconds: float = 5.0,
) -> Toolbox:
    return await Toolbox.assemble(
        pool=FakeConnectionPool(connections=connections),
        provider_configs=providers,
        observer=observer if observer is not None else FakeConnectorObserver(),
        call_timeout_seconds=call_timeout_seconds,
    )


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


class TestAssemble:
    async def test_collects_tools_from_every_enabled_provider(self) -> None:
        toolbox = await _assemble(
            connections={
                "docs": FakeConnection("docs", tools={"search": ToolResult(text="")}),
                "db": FakeConnection("db", tools={"query": ToolResult(text="")}),
            },
            providers=[_provider("docs"), _provider("db")],
        )

        names = [d.name for d in toolbox.declarations]
        assert names == ["search", "query", LIST_RESOURCES_TOOL, READ_RESOURCE_TOOL]
        assert toolbox.num_connections == 2

    async def test_disabled_provider_is_skipped(self) -> None:
        docs = FakeConnection("docs", tools={"search": ToolResult(text="")})
        pool = FakeConnectionPool(connections={"docs": docs})

        toolbox = await Toolbox.assemble(
            pool=pool,
            provider_configs=[_provider("docs", enabled=False)],
            observer=FakeConnectorObserver(),
        )

        assert toolbox.declarations == []
        assert pool.connect_requests == []

    async def test_no_connections_means_no_builtins(self) -> None:
        toolbox = await _assemble(connections={}, providers=[_provider("missing")])

        assert toolbox.declarations == []
        assert toolbox.tool_payload() == []

    async def test_connect_exception_is_reported_not_raised(self) -> None:
        observer = FakeConnectorObserver()

        toolbox = await _assemble(
            connections={"docs": OSError("spawn failed")},
            providers=[_provider("docs")],
            observer=observer,
        )

        assert toolbox.num_connections == 0
        assert observer.connection_failed[0].provider_id == "docs"
        assert observer.connection_failed[0].reason == "spawn failed"

    async def test_listing_failure_keeps_connection_for_resources(self) -> None:
        observer = FakeConnectorObserver()

        toolbox = await _assemble(
            connections={
                "docs": FakeConnection("docs", list_tools_error=RuntimeError("boom"))
            },
            providers=[_provider("docs")],
            observer=observer,
        )

        assert [d.name for d in toolbox.declarations] == [
            LIST_RESOURCES_TOOL,
            READ_RESOURCE_TOOL,
        ]
        assert observer.discovery_failed[0].reason == "boom"

    async def test_first_provider_wins_a_name_conflict(self) -> None:
        observer = FakeConnectorObserver()
        first = FakeConnection("first", tools={"search": ToolResult(text="from first")})
        second = FakeConnection(
            "second", tools={"search": ToolResult(text="from second")}
        )

        toolbox = await _assemble(
            connections={"first": first, "second": second},
            providers=[_provider("first"), _provider("second")],
            observer=observer,
        )

        assert [d.name for d in toolbox.declarations].count("search") == 1
        assert observer.conflicts[0].tool_name == "search"
        assert observer.conflicts[0].provider_id == "second"
        assert observer.conflicts[0].owner_provider_id == "first"
        result = await toolbox.execute("search", {})
        assert result.text == "from first"

    async def test_discovered_tools_are_reported(self) -> None:
        observer = FakeConnectorObserver()

        await _assemble(
            connections={
                "docs": FakeConnection(
                    "docs",
                    tools={"a": ToolResult(text=""), "b": ToolResult(text="")},
                )
            },
            providers=[_provider("docs")],
            observer=observer,
        )

        assert observer.discovered[0].provider_id == "docs"
        assert observer.discovered[0].tool_names == ["a", "b"]

    async def test_payload_is_rendered_declarations(self) -> None:
        toolbox = await _assemble(
            connections={
                "docs": FakeConnection(
                    "docs",
                    tools={"search": ToolResult(text="")},
                    descriptions={"search": "Search the docs"},
                    input_schemas={
                        "search": {
                            "properties": {"query": {"type": "string"}},
                            "required": ["query"],
                        }
                    },
                )
            },
            providers=[_provider("docs")],
        )

        payload = toolbox.tool_payload()

        assert payload[0] == {
            "type": "function",
            "function": {
                "name": "search",
                "description": "Search the docs",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "query"}
                    },
                    "required": ["query"],
                },
            },
        }


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class TestExecute:
    async def test_routes_to_owning_provider(self) -> None:
        docs = FakeConnection("docs", tools={"search": ToolResult(text="docs hit")})
        db = FakeConnection("db", tools={"query": ToolResult(text="db row")})
        toolbox = await _assemble(
            connections={"docs": docs, "db": db},
            providers=[_provider("docs"), _provider("db")],
        )

        result = await toolbox.execute("query", {"sql": "select 1"})

        assert result.text == "db row"
        assert db.calls == [("query", {"sql": "select 1"})]
        assert docs.calls == []

    async def test_unknown_tool_raises(self) -> None:
        toolbox = await _assemble(connections={}, providers=[])

        with pytest.raises(ToolExecutionError) as exc_info:
            await toolbox.execute("missing", {})

        assert exc_info.value.reason == "Tool not found or execution failed"
        assert exc_info.value.tool_name == "missing"

    async def test_provider_exception_is_wrapped(self) -> None:
        toolbox = await _assemble(
            connections={
                "docs": FakeConnection("docs", tools={"search": ValueError("bad arg")})
            },
            providers=[_provider("docs")],
        )

        with pytest.raises(ToolExecutionError) as exc_info:
            await toolbox.execute("search", {})

        assert exc_info.value.reason == "bad arg"

    async def test_slow_call_times_out(self) -> None:
        toolbox = await _assemble(
            connections={
                "docs": FakeConnection(
                    "docs", tools={"search": ToolResult(text="late")}, delay_seconds=1.0
                )
            },
            providers=[_provider("docs")],
            call_timeout_seconds=0.01,
        )

        with pytest.raises(ToolExecutionError) as exc_info:
            await toolbox.execute("search", {})

        assert exc_info.value.reason == "timed out after 0.01s"


class TestResourceBuiltins:
    async def test_list_resources_spans_connections(self) -> None:
        toolbox = await _assemble(
            connections={
                "docs": FakeConnection(
                    "docs", resources={"resource://docs/readme": []}
                ),
                "db": FakeConnection("db", resources={"resource://db/schema": []}),
            },
            providers=[_provider("docs"), _provider("db")],
        )

        result = await toolbox.execute(LIST_RESOURCES_TOOL, {})

        uris = [r["uri"] for r in json.loads(result.text)["resources"]]
        assert uris == ["resource://docs/readme", "resource://db/schema"]

    async def test_read_resource_falls_through_to_the_provider_that_has_it(
        self,
    ) -> None:
        docs = FakeConnection("docs")
        db = FakeConnection(
            "db",
            resources={
                "resource://db/schema": [
                    ResourceContent(type="text", text="CREATE TABLE t (id int)")
                ]
            },
        )
        toolbox = await _assemble(
            connections={"docs": docs, "db": db},
            providers=[_provider("docs"), _provider("db")],
        )

        result = await toolbox.execute(
            READ_RESOURCE_TOOL, {"uri": "resource://db/schema"}
        )

        assert json.loads(result.text) == {
            "uri": "resource://db/schema",
            "contents": [{"type": "text", "text": "CREATE TABLE t (id int)"}],
        }
        assert docs.read_uris == ["resource://db/schema"]

    async def test_read_unknown_resource_raises(self) -> None:
        toolbox = await _assemble(
            connections={"docs": FakeConnection("docs")},
            providers=[_provider("docs")],
        )

        with pytest.raises(ToolExecutionError) as exc_info:
            await toolbox.execute(READ_RESOURCE_TOOL, {"uri": "resource://nope"})

        assert exc_info.value.reason == "Resource not found: resource://nope"

    async def test_read_without_uri_raises(self) -> None:
        toolbox = await _assemble(
            connections={"docs": FakeConnection("docs")},
            providers=[_provider("docs")],
        )

        with pytest.raises(ToolExecutionError):
            await toolbox.execute(READ_RESOURCE_TOOL, {})
