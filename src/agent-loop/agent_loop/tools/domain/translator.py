"""Schema translation from provider-declared JSON schema to FunctionDeclaration.

The mapping is deliberately shallow: object-typed parameters are declared with
no nested properties, and array items only distinguish number and boolean from
the string default.
"""

from typing import Any

from agent_loop.tools.domain.schema import (
    ArrayParameter,
    BooleanParameter,
    FunctionDeclaration,
    FunctionParameters,
    NumberParameter,
    ObjectParameter,
    ParameterSchema,
    ParameterType,
    StringParameter,
)
from agent_loop.tools.domain.tool import ToolDescriptor


def translate_property(name: str, raw: Any) -> ParameterSchema:
    """Translate one declared property. Anything unrecognized becomes STRING."""
    prop: dict[str, Any] = raw if isinstance(raw, dict) else {}
    description = prop.get("description") or name
    declared = prop.get("type")

    if declared == "array":
        return ArrayParameter(description=description, items=_item_type(prop))
    if declared in ("number", "integer"):
        return NumberParameter(description=description)
    if declared == "boolean":
        return BooleanParameter(description=description)
    if declared == "object":
        return ObjectParameter(description=description)
    return StringParameter(description=description)


def _item_type(prop: dict[str, Any]) -> ParameterType:
    items = prop.get("items")
    item_declared = items.get("type") if isinstance(items, dict) else None
    if item_declared == "number":
        return ParameterType.NUMBER
    if item_declared == "boolean":
        return ParameterType.BOOLEAN
    return ParameterType.STRING


def to_function_declaration(tool: ToolDescriptor) -> FunctionDeclaration:
    schema = tool.input_schema
    raw_properties = schema.get("properties")
    properties: dict[str, ParameterSchema] = {}
    if isinstance(raw_properties, dict):
        for key, value in raw_properties.items():
            properties[key] = translate_property(name=key, raw=value)

    raw_required = schema.get("required")
    required = [str(r) for r in raw_required] if isinstance(raw_required, list) else []

    return FunctionDeclaration(
        name=tool.name,
        description=tool.description or tool.name,
        parameters=FunctionParameters(properties=properties, required=required),
    )
