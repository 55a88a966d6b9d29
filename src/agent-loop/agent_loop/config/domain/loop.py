"""Loop configuration model."""

from pydantic import BaseModel, Field


class LoopConfig(BaseModel, frozen=True):
    """Limits and model settings for one agentic loop invocation."""

    model_id: str = Field(min_length=1)
    credential: str | None = Field(default=None, repr=False)
    system_prompt: str | None = None
    temperature: float = Field(default=0.7, ge=0.0)
    max_output_tokens: int = Field(default=4096, ge=1)
    max_iterations: int = Field(default=10, ge=1)
    thinking_budget: int = Field(default=8192, ge=0)
    tool_call_timeout_seconds: float = Field(default=60.0, gt=0.0)
    connect_timeout_seconds: float = Field(default=30.0, gt=0.0)
    require_completion_sentinel: bool = False
