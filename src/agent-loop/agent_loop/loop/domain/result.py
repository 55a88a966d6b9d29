"""AgenticResult value object — the outcome of one loop invocation."""

from pydantic import BaseModel

from agent_loop.loop.domain.step import IterationStep, ToolCallRecord

THOUGHT_SEPARATOR = "\n\n---\n\n"


class AgenticResult(BaseModel, frozen=True):
    """Immutable value object capturing everything one loop invocation produced."""

    final_response: str
    steps: list[IterationStep]
    total_iterations: int
    all_thoughts: list[str]
    all_tool_calls: list[ToolCallRecord]

    def joined_thoughts(self) -> str | None:
        if not self.all_thoughts:
            return None
        return THOUGHT_SEPARATOR.join(self.all_thoughts)
