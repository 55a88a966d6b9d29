"""Observer port for the config domain — defines events in domain language."""

from typing import Protocol


class ConfigObserver(Protocol):
    def config_loaded(self, name: str, num_providers: int) -> None: ...

    def config_no_enabled_providers(self, name: str) -> None: ...
