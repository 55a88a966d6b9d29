"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, name: str, num_providers: int) -> None:
        self._log.info("config.loaded", name=name, num_providers=num_providers)

    def config_no_enabled_providers(self, name: str) -> None:
        self._log.warning(
            "config.no_enabled_providers",
            name=name,
            message="No tool providers enabled; the model will answer without tools",
        )
