"""Tool and resource value objects exchanged with tool providers."""

from pydantic import BaseModel, Field


class ToolDescriptor(BaseModel, frozen=True):
    """A tool as declared by its provider, before schema translation."""

    name: str = Field(min_length=1)
    description: str | None = None
    input_schema: dict[str, object] = Field(default_factory=dict)
    provider_id: str


class ToolResult(BaseModel, frozen=True):
    """Flattened outcome of one provider tool call."""

    text: str
    is_error: bool = False


class ResourceDescriptor(BaseModel, frozen=True):
    uri: str
    name: str
    description: str | None = None
    mime_type: str | None = None


class ResourceContent(BaseModel, frozen=True):
    """One content block of a read resource.

    type is "text" for inline text and "resource" for anything else (binary
    blobs are carried as their JSON serialization in `text`).
    """

    type: str
    text: str
