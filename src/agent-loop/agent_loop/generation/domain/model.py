"""GenerationModel and GenerationModelFactory Protocols — streaming completion backends."""

from collections.abc import AsyncIterator
from typing import Protocol

from agent_loop.config.domain.loop import LoopConfig
from agent_loop.config.domain.search import DocumentSearchConfig
from agent_loop.conversation.domain.turn import ConversationTurn
from agent_loop.generation.domain.events import StreamEvent


class GenerationModel(Protocol):
    """Streams one completion over the given turns with the given tools attached.

    Implementations raise GenerationError for any failure of the call itself,
    either when the stream is opened or while it is being consumed.
    """

    def stream(
        self,
        turns: list[ConversationTurn],
        tools: list[dict[str, object]],
        search: DocumentSearchConfig | None = None,
    ) -> AsyncIterator[StreamEvent]: ...


class GenerationModelFactory(Protocol):
    """Constructs a GenerationModel bound to one loop invocation's settings."""

    def create(self, config: LoopConfig) -> GenerationModel: ...
