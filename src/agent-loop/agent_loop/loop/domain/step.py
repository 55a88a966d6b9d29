"""ToolCallRecord and IterationStep — what one iteration of the loop produced."""

from typing import Literal, Self

from pydantic import BaseModel, Field, model_validator


class ToolCallRecord(BaseModel, frozen=True):
    """One executed tool call.

    tool_output is never empty: on failure it holds a serialized error payload,
    because the same text is fed back to the model.
    """

    tool_name: str
    tool_input: str
    tool_output: str = Field(min_length=1)
    execution_time_ms: int = Field(ge=0)
    status: Literal["success", "error"]


class IterationStep(BaseModel, frozen=True):
    """One iteration: either a batch of tool calls, or a single text response."""

    iteration: int = Field(ge=1)
    thoughts: str | None = None
    response: str | None = None
    tool_calls: list[ToolCallRecord] = Field(default_factory=list)

    @model_validator(mode="after")
    def _tool_calls_xor_response(self) -> Self:
        if self.tool_calls and self.response is not None:
            raise ValueError("a step cannot carry both tool calls and a response")
        if not self.tool_calls and self.response is None:
            raise ValueError("a step must carry tool calls or a response")
        return self
