"""ConnectorObserver port — domain events emitted while talking to tool providers."""

from typing import Protocol


class ConnectorObserver(Protocol):
    """Observer port for tool provider events.

    Implementations may log to structlog, record for tests, or emit metrics.
    """

    def provider_config_malformed(self, provider_id: str, reason: str) -> None: ...

    def provider_connected(self, provider_id: str, provider_name: str) -> None: ...

    def provider_connection_failed(self, provider_id: str, reason: str) -> None: ...

    def provider_disconnected(self, provider_id: str) -> None: ...

    def provider_disconnect_failed(self, provider_id: str, reason: str) -> None: ...

    def tools_discovered(self, provider_id: str, tool_names: list[str]) -> None: ...

    def tool_discovery_failed(self, provider_id: str, reason: str) -> None: ...

    def tool_name_conflict(
        self, tool_name: str, provider_id: str, owner_provider_id: str
    ) -> None: ...
