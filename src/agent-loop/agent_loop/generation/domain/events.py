"""Stream events — the tagged union produced by one streamed completion."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Thought:
    """A fragment of model reasoning."""

    text: str


@dataclass(frozen=True)
class ThinkingBlock:
    """A complete, provider-signed reasoning block.

    Opaque to the loop; it is handed back unchanged with the model's tool
    invocation turn so the provider can verify its own reasoning.
    """

    block: dict[str, object]


@dataclass(frozen=True)
class Text:
    """A fragment of the user-facing answer."""

    text: str


@dataclass(frozen=True)
class FunctionCall:
    """One complete tool invocation requested by the model.

    `provider_fields` holds provider metadata attached to the call (such as a
    thought signature) that must accompany it when it is replayed.
    """

    call_id: str
    name: str
    args: dict[str, object] = field(default_factory=dict)
    provider_fields: dict[str, object] | None = None


type StreamEvent = Thought | ThinkingBlock | Text | FunctionCall
