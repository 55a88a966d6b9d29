"""Structlog implementation of the GenerationObserver port."""

import structlog


class StructlogGenerationObserver:
    """Delegates generation backend events to structlog.

    Satisfies the GenerationObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def generation_search_unsupported(
        self, model: str, store_name: str, reason: str
    ) -> None:
        self._log.warning(
            "generation.search_unsupported",
            model=model,
            store_name=store_name,
            reason=reason,
        )
