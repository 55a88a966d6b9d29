"""Result aggregation — flattens per-iteration output into an AgenticResult."""

from dataclasses import dataclass, field

from agent_loop.loop.domain.result import AgenticResult
from agent_loop.loop.domain.step import IterationStep


@dataclass(frozen=True)
class StepOutcome:
    """A finished IterationStep together with its individual thought fragments."""

    step: IterationStep
    thought_fragments: list[str] = field(default_factory=list)


def aggregate(
    outcomes: list[StepOutcome], final_response: str, total_iterations: int
) -> AgenticResult:
    """Build the AgenticResult, flattening thoughts and tool calls across iterations."""
    return AgenticResult(
        final_response=final_response,
        steps=[outcome.step for outcome in outcomes],
        total_iterations=total_iterations,
        all_thoughts=[
            fragment
            for outcome in outcomes
            for fragment in outcome.thought_fragments
        ],
        all_tool_calls=[
            record for outcome in outcomes for record in outcome.step.tool_calls
        ],
    )
