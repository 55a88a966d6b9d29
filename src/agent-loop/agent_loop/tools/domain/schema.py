"""Function-declaration schema — the model-facing shape of a tool's parameters.

Parameter schemas are a discriminated union on `type`. Rendering to the wire
format lower-cases the type names, which is the JSON-schema dialect accepted
by LiteLLM's `tools=` argument for every provider it fronts.
"""

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, Field


class ParameterType(StrEnum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"
    ARRAY = "ARRAY"
    OBJECT = "OBJECT"


class StringParameter(BaseModel, frozen=True):
    type: Literal[ParameterType.STRING] = ParameterType.STRING
    description: str


class NumberParameter(BaseModel, frozen=True):
    type: Literal[ParameterType.NUMBER] = ParameterType.NUMBER
    description: str


class BooleanParameter(BaseModel, frozen=True):
    type: Literal[ParameterType.BOOLEAN] = ParameterType.BOOLEAN
    description: str


class ArrayParameter(BaseModel, frozen=True):
    type: Literal[ParameterType.ARRAY] = ParameterType.ARRAY
    description: str
    items: Literal[ParameterType.STRING, ParameterType.NUMBER, ParameterType.BOOLEAN]


class ObjectParameter(BaseModel, frozen=True):
    """Object-typed parameter. Nested properties are intentionally left empty."""

    type: Literal[ParameterType.OBJECT] = ParameterType.OBJECT
    description: str


type ParameterSchema = Annotated[
    StringParameter
    | NumberParameter
    | BooleanParameter
    | ArrayParameter
    | ObjectParameter,
    Field(discriminator="type"),
]


class FunctionParameters(BaseModel, frozen=True):
    properties: dict[str, ParameterSchema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class FunctionDeclaration(BaseModel, frozen=True):
    """A tool as presented to the generation model."""

    name: str = Field(min_length=1)
    description: str
    parameters: FunctionParameters = Field(default_factory=FunctionParameters)

    def to_tool(self) -> dict[str, object]:
        """Render as an OpenAI-style `tools` entry."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": {
                    "type": "object",
                    "properties": {
                        key: _render_parameter(param)
                        for key, param in self.parameters.properties.items()
                    },
                    "required": list(self.parameters.required),
                },
            },
        }


def _render_parameter(param: ParameterSchema) -> dict[str, object]:
    rendered: dict[str, object] = {
        "type": param.type.value.lower(),
        "description": param.description,
    }
    if isinstance(param, ArrayParameter):
        rendered["items"] = {"type": param.items.value.lower()}
    elif isinstance(param, ObjectParameter):
        rendered["properties"] = {}
    return rendered
