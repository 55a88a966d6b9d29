"""Structlog implementation of the ConnectorObserver port."""

import structlog


class StructlogConnectorObserver:
    """Delegates tool provider events to structlog.

    Satisfies the ConnectorObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def provider_config_malformed(self, provider_id: str, reason: str) -> None:
        self._log.warning(
            "provider.config_malformed", provider_id=provider_id, reason=reason
        )

    def provider_connected(self, provider_id: str, provider_name: str) -> None:
        self._log.info(
            "provider.connected",
            provider_id=provider_id,
            provider_name=provider_name,
        )

    def provider_connection_failed(self, provider_id: str, reason: str) -> None:
        self._log.error(
            "provider.connection_failed", provider_id=provider_id, reason=reason
        )

    def provider_disconnected(self, provider_id: str) -> None:
        self._log.info("provider.disconnected", provider_id=provider_id)

    def provider_disconnect_failed(self, provider_id: str, reason: str) -> None:
        self._log.warning(
            "provider.disconnect_failed", provider_id=provider_id, reason=reason
        )

    def tools_discovered(self, provider_id: str, tool_names: list[str]) -> None:
        self._log.info(
            "provider.tools_discovered",
            provider_id=provider_id,
            num_tools=len(tool_names),
            tool_names=tool_names,
        )

    def tool_discovery_failed(self, provider_id: str, reason: str) -> None:
        self._log.error(
            "provider.tool_discovery_failed", provider_id=provider_id, reason=reason
        )

    def tool_name_conflict(
        self, tool_name: str, provider_id: str, owner_provider_id: str
    ) -> None:
        self._log.warning(
            "provider.tool_name_conflict",
            tool_name=tool_name,
            provider_id=provider_id,
            owner_provider_id=owner_provider_id,
        )
