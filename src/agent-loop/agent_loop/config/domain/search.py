"""Document-search store configuration model."""

from pydantic import BaseModel, Field


class DocumentSearchConfig(BaseModel, frozen=True):
    """A managed document-search store offered to the model alongside its tools.

    Whether the store actually reaches the model depends on the generation
    backend; a backend that cannot forward it reports so through its observer.
    """

    store_name: str = Field(min_length=1)
    display_name: str | None = None
    enabled: bool = True
