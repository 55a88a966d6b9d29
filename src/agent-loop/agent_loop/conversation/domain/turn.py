"""ConversationTurn and its parts — the turn sequence fed to the generation model."""

from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ChatMessage(BaseModel, frozen=True):
    """One caller-supplied history message."""

    role: Literal["user", "assistant"]
    content: str


class TextPart(BaseModel, frozen=True):
    kind: Literal["text"] = "text"
    text: str


class ThoughtPart(BaseModel, frozen=True):
    """Model reasoning text, kept apart from the user-facing answer.

    `block` is set when the provider signed the reasoning and expects it back
    verbatim alongside the tool invocations it led to.
    """

    kind: Literal["thought"] = "thought"
    text: str
    block: dict[str, object] | None = None


class ToolInvocationPart(BaseModel, frozen=True):
    kind: Literal["tool_invocation"] = "tool_invocation"
    call_id: str
    name: str
    args: dict[str, object] = Field(default_factory=dict)
    provider_fields: dict[str, object] | None = None


class ToolResultPart(BaseModel, frozen=True):
    """The serialized output of one tool call, matched to its invocation by call_id."""

    kind: Literal["tool_result"] = "tool_result"
    call_id: str
    name: str
    output: str


type TurnPart = Annotated[
    TextPart | ThoughtPart | ToolInvocationPart | ToolResultPart,
    Field(discriminator="kind"),
]


class ConversationTurn(BaseModel, frozen=True):
    role: Literal["user", "model"]
    parts: list[TurnPart]

    @classmethod
    def text(cls, role: Literal["user", "model"], text: str) -> "ConversationTurn":
        return cls(role=role, parts=[TextPart(text=text)])
