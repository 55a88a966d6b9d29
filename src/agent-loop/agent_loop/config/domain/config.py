"""Top-level AppConfig aggregate — the root configuration object."""

from pydantic import BaseModel, Field

from agent_loop.config.domain.loop import LoopConfig
from agent_loop.config.domain.provider import ProviderConfig
from agent_loop.config.domain.search import DocumentSearchConfig


class AppConfig(BaseModel, frozen=True):
    """Root configuration aggregate for an agent-loop run."""

    name: str = Field(min_length=1)
    loop: LoopConfig
    providers: list[ProviderConfig] = Field(default_factory=list)
    document_search: DocumentSearchConfig | None = None
