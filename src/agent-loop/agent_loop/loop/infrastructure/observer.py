"""Structlog implementation of the LoopObserver port."""

import structlog


class StructlogLoopObserver:
    """Delegates iteration engine events to structlog.

    Satisfies the LoopObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def loop_started(
        self,
        model: str,
        max_iterations: int,
        num_tools: int,
        num_connections: int,
        num_messages: int,
    ) -> None:
        self._log.info(
            "loop.started",
            model=model,
            max_iterations=max_iterations,
            num_tools=num_tools,
            num_connections=num_connections,
            num_messages=num_messages,
        )

    def loop_iteration_started(self, iteration: int) -> None:
        self._log.debug("loop.iteration_started", iteration=iteration)

    def loop_tool_completed(
        self, iteration: int, tool_name: str, status: str, duration_ms: int
    ) -> None:
        log = self._log.warning if status == "error" else self._log.info
        log(
            "loop.tool_completed",
            iteration=iteration,
            tool_name=tool_name,
            status=status,
            duration_ms=duration_ms,
        )

    def loop_completed(
        self, state: str, total_iterations: int, num_tool_calls: int
    ) -> None:
        self._log.info(
            "loop.completed",
            state=state,
            total_iterations=total_iterations,
            num_tool_calls=num_tool_calls,
        )

    def loop_generation_failed(self, iteration: int, reason: str) -> None:
        self._log.error("loop.generation_failed", iteration=iteration, reason=reason)

    def loop_budget_exhausted(self, max_iterations: int) -> None:
        self._log.warning("loop.budget_exhausted", max_iterations=max_iterations)

    def loop_progress_sink_failed(self, event_type: str, reason: str) -> None:
        self._log.warning(
            "loop.progress_sink_failed", event_type=event_type, reason=reason
        )
