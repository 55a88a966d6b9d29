"""Tests for translating provider JSON schema into FunctionDeclarations."""

from agent_loop.tools.domain.schema import (
    ArrayParameter,
    BooleanParameter,
    NumberParameter,
    ObjectParameter,
    ParameterType,
    StringParameter,
)
from agent_loop.tools.domain.tool import ToolDescriptor
from agent_loop.tools.domain.translator import (
    to_function_declaration,
    translate_property,
)


def _tool(
    input_schema: dict[str, object], description: str | None = "A tool"
) -> ToolDescriptor:
    return ToolDescriptor(
        name="lookup",
        description=description,
        input_schema=input_schema,
        provider_id="docs",
    )


class TestTranslateProperty:
    def test_string(self) -> None:
        param = translate_property("q", {"type": "string", "description": "Query"})
        assert param == StringParameter(description="Query")

    def test_number_and_integer_map_to_number(self) -> None:
        assert isinstance(translate_property("n", {"type": "number"}), NumberParameter)
        assert isinstance(translate_property("n", {"type": "integer"}), NumberParameter)

    def test_boolean(self) -> None:
        assert isinstance(translate_property("b", {"type": "boolean"}), BooleanParameter)

    def test_object_has_no_nested_properties(self) -> None:
        param = translate_property(
            "filters",
            {"type": "object", "properties": {"year": {"type": "number"}}},
        )
        assert param == ObjectParameter(description="filters")

    def test_array_item_types(self) -> None:
        numbers = translate_property("ids", {"type": "array", "items": {"type": "number"}})
        flags = translate_property("f", {"type": "array", "items": {"type": "boolean"}})
        other = translate_property("o", {"type": "array", "items": {"type": "object"}})
        bare = translate_property("b", {"type": "array"})

        assert isinstance(numbers, ArrayParameter)
        assert numbers.items == ParameterType.NUMBER
        assert isinstance(flags, ArrayParameter)
        assert flags.items == ParameterType.BOOLEAN
        assert isinstance(other, ArrayParameter)
        assert other.items == ParameterType.STRING
        assert isinstance(bare, ArrayParameter)
        assert bare.items == ParameterType.STRING

    def test_unknown_type_falls_back_to_string(self) -> None:
        assert isinstance(translate_property("x", {"type": "null"}), StringParameter)
        assert isinstance(translate_property("x", {}), StringParameter)

    def test_missing_description_uses_property_name(self) -> None:
        assert translate_property("city", {"type": "string"}).description == "city"

    def test_non_mapping_property_becomes_string(self) -> None:
        assert translate_property("weird", "nonsense") == StringParameter(
            description="weird"
        )


class TestToFunctionDeclaration:
    def test_full_schema(self) -> None:
        declaration = to_function_declaration(
            _tool(
                {
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "What to find"},
                        "limit": {"type": "integer"},
                    },
                    "required": ["query"],
                }
            )
        )

        assert declaration.name == "lookup"
        assert declaration.description == "A tool"
        assert list(declaration.parameters.properties) == ["query", "limit"]
        assert declaration.parameters.required == ["query"]

    def test_empty_schema(self) -> None:
        declaration = to_function_declaration(_tool({}))

        assert declaration.parameters.properties == {}
        assert declaration.parameters.required == []

    def test_missing_description_uses_tool_name(self) -> None:
        declaration = to_function_declaration(_tool({}, description=None))

        assert declaration.description == "lookup"

    def test_non_list_required_is_ignored(self) -> None:
        declaration = to_function_declaration(
            _tool({"properties": {"a": {"type": "string"}}, "required": "a"})
        )

        assert declaration.parameters.required == []

    def test_required_names_are_stringified(self) -> None:
        declaration = to_function_declaration(_tool({"required": ["a", 1]}))

        assert declaration.parameters.required == ["a", "1"]
