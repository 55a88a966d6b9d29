"""Tool provider configuration models."""

from pydantic import BaseModel, Field


class StdioTransport(BaseModel, frozen=True):
    """Launch descriptor for a tool provider spoken to over stdio."""

    command: str = Field(min_length=1)
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] | None = None


class ProviderConfig(BaseModel, frozen=True):
    """A configured tool provider.

    `transport` is kept raw (a mapping or a JSON string) and only parsed into a
    StdioTransport when the provider is first connected, so that one malformed
    entry never prevents the rest of the configuration from loading.
    """

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    transport: dict[str, object] | str
    enabled: bool = True
