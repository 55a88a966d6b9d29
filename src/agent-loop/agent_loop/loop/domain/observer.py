"""LoopObserver port — domain events emitted while the iteration engine runs."""

from typing import Protocol


class LoopObserver(Protocol):
    """Observer port for iteration engine events.

    Implementations may log to structlog, record for tests, or emit metrics.
    """

    def loop_started(
        self,
        model: str,
        max_iterations: int,
        num_tools: int,
        num_connections: int,
        num_messages: int,
    ) -> None: ...

    def loop_iteration_started(self, iteration: int) -> None: ...

    def loop_tool_completed(
        self, iteration: int, tool_name: str, status: str, duration_ms: int
    ) -> None: ...

    def loop_completed(
        self, state: str, total_iterations: int, num_tool_calls: int
    ) -> None: ...

    def loop_generation_failed(self, iteration: int, reason: str) -> None: ...

    def loop_budget_exhausted(self, max_iterations: int) -> None: ...

    def loop_progress_sink_failed(self, event_type: str, reason: str) -> None: ...
