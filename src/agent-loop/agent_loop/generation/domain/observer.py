"""GenerationObserver port — domain events emitted by generation backends."""

from typing import Protocol


class GenerationObserver(Protocol):
    """Observer port for generation backend events.

    Implementations may log to structlog, record for tests, or emit metrics.
    """

    def generation_search_unsupported(
        self, model: str, store_name: str, reason: str
    ) -> None: ...
