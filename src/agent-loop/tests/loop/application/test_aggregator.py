"""Tests for flattening step outcomes into an AgenticResult."""

from agent_loop.loop.application.aggregator import StepOutcome, aggregate
from agent_loop.loop.domain.step import IterationStep, ToolCallRecord


def _record(name: str) -> ToolCallRecord:
    return ToolCallRecord(
        tool_name=name,
        tool_input="{}",
        tool_output="{}",
        execution_time_ms=0,
        status="success",
    )


class TestAggregate:
    def test_flattens_in_iteration_order(self) -> None:
        outcomes = [
            StepOutcome(
                step=IterationStep(
                    iteration=1,
                    thoughts="a\n\nb",
                    tool_calls=[_record("one"), _record("two")],
                ),
                thought_fragments=["a", "b"],
            ),
            StepOutcome(
                step=IterationStep(iteration=2, response="done"),
                thought_fragments=[],
            ),
            StepOutcome(
                step=IterationStep(iteration=3, thoughts="c", tool_calls=[_record("three")]),
                thought_fragments=["c"],
            ),
        ]

        result = aggregate(outcomes=outcomes, final_response="done", total_iterations=3)

        assert [r.tool_name for r in result.all_tool_calls] == ["one", "two", "three"]
        assert result.all_thoughts == ["a", "b", "c"]
        assert [s.iteration for s in result.steps] == [1, 2, 3]
        assert result.final_response == "done"
        assert result.total_iterations == 3

    def test_empty(self) -> None:
        result = aggregate(outcomes=[], final_response="none", total_iterations=0)

        assert result.steps == []
        assert result.all_thoughts == []
        assert result.all_tool_calls == []
        assert result.joined_thoughts() is None
