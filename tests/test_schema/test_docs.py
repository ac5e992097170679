"""Tests for specnext.schema.docs."""

from __future__ import annotations

from typing import Any

from specnext.schema.docs import describe_schema_type, extract_documentation, schema_to_markdown


class TestExtractDocumentation:
    """Documentation fields and type-specific constraints."""

    def test_string(self) -> None:
        doc = extract_documentation(
            {
                "type": "string",
                "description": "Login name",
                "title": "Username",
                "minLength": 3,
                "maximum": 9,
                "example": "ada",
                "deprecated": True,
            }
        )
        assert doc.description == "Login name"
        assert doc.title == "Username"
        assert doc.example == "ada"
        assert doc.deprecated is True
        assert doc.constraints == {"minLength": 3}

    def test_number_constraints(self) -> None:
        doc = extract_documentation({"type": "integer", "minimum": 0, "multipleOf": 2, "readOnly": True})
        assert doc.constraints == {"minimum": 0, "multipleOf": 2}
        assert doc.read_only is True

    def test_not_a_mapping(self) -> None:
        assert extract_documentation(None).description == ""


class TestDescribeSchemaType:
    """Short type labels."""

    def test_labels(self) -> None:
        assert describe_schema_type({"type": "string"}) == "string"
        assert describe_schema_type({"$ref": "#/components/schemas/User"}) == "User"
        assert describe_schema_type({"type": "array", "items": {"type": "integer"}}) == "integer[]"
        assert describe_schema_type({"type": "array"}) == "array"
        assert describe_schema_type({"enum": ["a", "b"]}) == "enum(a, b)"
        assert describe_schema_type({"anyOf": [{}, {}, {}]}) == "anyOf(3 types)"
        assert describe_schema_type({}) == "any"
        assert describe_schema_type(None) == "unknown"

    def test_circular_marker(self) -> None:
        marker = {"type": "circular", "ref": "#/components/schemas/Node"}
        assert describe_schema_type(marker) == "circular(Node)"


class TestSchemaToMarkdown:
    """Markdown sections with a property table."""

    def test_pet(self, petstore_schemas: dict[str, Any]) -> None:
        lines = schema_to_markdown("Pet", petstore_schemas["Pet"]).split("\n")
        assert lines[:4] == ["## Pet", "", "A pet in the store.", ""]
        assert "| Property | Type | Required | Description |" in lines
        assert "| name | string | Yes | Display name |" in lines
        assert "| tags | Tag[] | No |  |" in lines
        assert "| category | Category | No |  |" in lines

    def test_inherited_properties(self, petstore_schemas: dict[str, Any]) -> None:
        markdown = schema_to_markdown("NewPet", petstore_schemas["NewPet"], petstore_schemas)
        assert "| ownerEmail | string | Yes |  |" in markdown
        assert "| status | enum(available, pending, sold) | No |  |" in markdown

    def test_malformed_required_is_ignored(self) -> None:
        for required in (True, [["a"]]):
            schema = {"type": "object", "required": required, "properties": {"a": {"type": "string"}}}
            assert "| a | string | No |  |" in schema_to_markdown("A", schema)

    def test_cells_are_escaped(self) -> None:
        schema = {"properties": {"a": {"type": "string", "description": "x | y\nz"}}}
        assert "| a | string | No | x \\| y z |" in schema_to_markdown("A", schema)
