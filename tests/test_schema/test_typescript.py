"""Tests for specnext.schema.typescript."""

from __future__ import annotations

import logging
from typing import Any

import pytest

from specnext.exceptions import UnresolvedReferenceError
from specnext.models import TypeOptions
from specnext.schema.nodes import parse_schema
from specnext.schema.typescript import (
    add_nullable,
    enum_to_union,
    generate_type_declarations,
    primitive_type,
    request_body_to_type,
    response_to_type,
    schema_to_declaration,
    select_media_schema,
    to_typescript_type,
)


# ---------------------------------------------------------------------------
# Primitives and formats
# ---------------------------------------------------------------------------


class TestPrimitives:
    """Bare type mapping and format overrides."""

    @pytest.mark.parametrize(
        "schema_type, expected",
        [
            ("string", "string"),
            ("number", "number"),
            ("integer", "number"),
            ("boolean", "boolean"),
            ("null", "null"),
        ],
    )
    def test_bare_types(self, schema_type: str, expected: str) -> None:
        assert to_typescript_type({"type": schema_type}) == expected

    @pytest.mark.parametrize(
        "schema_format",
        ["date", "date-time", "time", "uuid", "email", "uri", "url", "hostname", "ipv4", "ipv6", "password"],
    )
    def test_string_formats(self, schema_format: str) -> None:
        assert to_typescript_type({"type": "string", "format": schema_format}) == "string"

    @pytest.mark.parametrize("schema_format", ["binary", "byte"])
    def test_binary_formats(self, schema_format: str) -> None:
        assert to_typescript_type({"type": "string", "format": schema_format}) == "Blob"

    def test_int64(self) -> None:
        assert to_typescript_type({"type": "integer", "format": "int64"}) == "bigint"

    def test_int32_is_plain_number(self) -> None:
        assert to_typescript_type({"type": "integer", "format": "int32"}) == "number"

    def test_format_overrides_are_configurable(self) -> None:
        options = TypeOptions(int64_type="number", binary_type="File")
        assert to_typescript_type({"type": "integer", "format": "int64"}, options=options) == "number"
        assert to_typescript_type({"type": "string", "format": "binary"}, options=options) == "File"

    def test_unknown_type_is_any(self) -> None:
        assert to_typescript_type({"type": "mystery"}) == "any"

    def test_primitive_type_helper(self) -> None:
        assert primitive_type("string", "email") == "string"
        assert primitive_type("array") == "any[]"
        assert primitive_type("object") == "Record<string, any>"
        assert primitive_type(None) == "any"


# ---------------------------------------------------------------------------
# Absent / empty / references
# ---------------------------------------------------------------------------


class TestSpecialShapes:
    """Absence, emptiness, and references."""

    def test_absent_is_any(self) -> None:
        assert to_typescript_type(None) == "any"

    def test_empty_is_open_map(self) -> None:
        assert to_typescript_type({}) == "Record<string, any>"

    def test_reference_is_bare_identifier(self) -> None:
        assert to_typescript_type({"$ref": "#/components/schemas/User"}) == "User"
        assert to_typescript_type({"$ref": "#/definitions/API_Response"}) == "APIResponse"

    def test_reference_checked_against_dictionary(self, petstore_schemas: dict[str, Any]) -> None:
        assert to_typescript_type({"$ref": "#/components/schemas/Pet"}, petstore_schemas) == "Pet"

    def test_unresolved_reference_degrades_with_warning(
        self, petstore_schemas: dict[str, Any], caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING, logger="specnext.schema.typescript"):
            result = to_typescript_type({"$ref": "#/components/schemas/Missing"}, petstore_schemas)
        assert result == "any"
        assert "#/components/schemas/Missing" in caplog.text

    def test_unresolved_reference_raises_when_strict(self, petstore_schemas: dict[str, Any]) -> None:
        with pytest.raises(UnresolvedReferenceError) as exc_info:
            to_typescript_type(
                {"$ref": "#/components/schemas/Missing"},
                petstore_schemas,
                strict_references=True,
            )
        assert exc_info.value.ref == "#/components/schemas/Missing"

    def test_non_schema_reference_root_is_unresolved(self) -> None:
        assert to_typescript_type({"$ref": "#/components/responses/NotFound"}) == "any"

    def test_accepts_parsed_node(self) -> None:
        node = parse_schema({"type": "array", "items": {"type": "boolean"}})
        assert to_typescript_type(node) == "boolean[]"


# ---------------------------------------------------------------------------
# Arrays, enums, compositions
# ---------------------------------------------------------------------------


class TestArrays:
    """Array item conversion."""

    def test_array_of_strings(self) -> None:
        assert to_typescript_type({"type": "array", "items": {"type": "string"}}) == "string[]"

    def test_array_without_items(self) -> None:
        assert to_typescript_type({"type": "array"}) == "any[]"

    def test_array_of_references(self) -> None:
        schema = {"type": "array", "items": {"$ref": "#/components/schemas/Tag"}}
        assert to_typescript_type(schema) == "Tag[]"

    def test_nested_arrays(self) -> None:
        schema = {"type": "array", "items": {"type": "array", "items": {"type": "number"}}}
        assert to_typescript_type(schema) == "number[][]"

    def test_union_items_are_parenthesized(self) -> None:
        schema = {"type": "array", "items": {"oneOf": [{"type": "string"}, {"type": "number"}]}}
        assert to_typescript_type(schema) == "(string | number)[]"

    def test_enum_items_are_parenthesized(self) -> None:
        schema = {"type": "array", "items": {"enum": ["a", "b"]}}
        assert to_typescript_type(schema) == "('a' | 'b')[]"

    def test_nullable_items(self) -> None:
        schema = {"type": "array", "items": {"type": "string", "nullable": True}}
        assert to_typescript_type(schema) == "(string | null)[]"


class TestEnums:
    """Literal unions in declaration order."""

    def test_order_preserved(self) -> None:
        schema = {"type": "string", "enum": ["active", "inactive", "pending"]}
        assert to_typescript_type(schema) == "'active' | 'inactive' | 'pending'"

    def test_mixed_literals(self) -> None:
        assert enum_to_union([1, 2.5, True, False, None, "x"]) == "1 | 2.5 | true | false | null | 'x'"

    def test_empty_enum_is_any(self) -> None:
        assert to_typescript_type({"enum": []}) == "any"

    def test_quotes_are_escaped(self) -> None:
        assert to_typescript_type({"enum": ["it's"]}) == "'it\\'s'"


class TestCompositions:
    """allOf / oneOf / anyOf."""

    def test_all_of_is_intersection(self) -> None:
        schema = {"allOf": [{"$ref": "#/components/schemas/A"}, {"$ref": "#/components/schemas/B"}]}
        assert to_typescript_type(schema) == "A & B"

    def test_one_of_is_union(self) -> None:
        schema = {"oneOf": [{"$ref": "#/components/schemas/Cat"}, {"$ref": "#/components/schemas/Dog"}]}
        assert to_typescript_type(schema) == "Cat | Dog"

    def test_any_of_is_union(self) -> None:
        schema = {"anyOf": [{"type": "string"}, {"type": "integer"}]}
        assert to_typescript_type(schema) == "string | number"

    def test_union_inside_intersection_is_parenthesized(self) -> None:
        schema = {
            "allOf": [
                {"$ref": "#/components/schemas/Base"},
                {"oneOf": [{"$ref": "#/components/schemas/A"}, {"$ref": "#/components/schemas/B"}]},
            ]
        }
        assert to_typescript_type(schema) == "Base & (A | B)"

    def test_properties_next_to_all_of(self) -> None:
        schema = {
            "allOf": [{"$ref": "#/components/schemas/Base"}],
            "properties": {"extra": {"type": "string"}},
        }
        assert to_typescript_type(schema) == "Base & {\n  extra?: string;\n}"


# ---------------------------------------------------------------------------
# Objects
# ---------------------------------------------------------------------------


class TestObjects:
    """Inline structural types."""

    def test_required_and_optional(self) -> None:
        schema = {
            "type": "object",
            "properties": {"id": {"type": "string"}, "name": {"type": "string"}},
            "required": ["id"],
        }
        result = to_typescript_type(schema)
        assert "  id: string;" in result
        assert "  name?: string;" in result
        assert result == "{\n  id: string;\n  name?: string;\n}"

    def test_malformed_required_marks_nothing_required(self) -> None:
        properties = {"a": {"type": "string"}}
        expected = "{\n  a?: string;\n}"
        assert to_typescript_type({"type": "object", "required": True, "properties": properties}) == expected
        assert to_typescript_type({"type": "object", "required": [["a"]], "properties": properties}) == expected

    def test_object_without_properties(self) -> None:
        assert to_typescript_type({"type": "object"}) == "Record<string, any>"

    def test_typed_additional_properties_without_properties(self) -> None:
        schema = {"type": "object", "additionalProperties": {"type": "integer"}}
        assert to_typescript_type(schema) == "Record<string, number>"

    def test_index_signature_after_properties(self) -> None:
        schema = {
            "type": "object",
            "properties": {"a": {"type": "string"}},
            "additionalProperties": {"type": "integer"},
        }
        assert to_typescript_type(schema) == "{\n  a?: string;\n  [key: string]: number;\n}"

    def test_additional_properties_true(self) -> None:
        schema = {"type": "object", "properties": {"a": {"type": "string"}}, "additionalProperties": True}
        assert "[key: string]: any;" in to_typescript_type(schema)

    def test_nullable_property(self) -> None:
        schema = {"type": "object", "properties": {"notes": {"type": "string", "nullable": True}}}
        assert "notes?: string | null;" in to_typescript_type(schema)

    def test_nullable_parent_marks_properties(self) -> None:
        schema = {
            "type": "object",
            "nullable": True,
            "properties": {"a": {"type": "string"}},
            "required": ["a"],
        }
        assert to_typescript_type(schema) == "{\n  a: string | null;\n} | null"

    def test_nested_object_indentation(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "profile": {"type": "object", "properties": {"bio": {"type": "string"}}},
            },
        }
        assert to_typescript_type(schema) == "{\n  profile?: {\n    bio?: string;\n  };\n}"

    def test_quoted_property_names(self) -> None:
        schema = {"type": "object", "properties": {"content-type": {"type": "string"}}}
        assert "'content-type'?: string;" in to_typescript_type(schema)

    def test_readonly_and_description(self) -> None:
        schema = {
            "type": "object",
            "properties": {"id": {"type": "string", "readOnly": True, "description": "Server id"}},
        }
        assert to_typescript_type(schema) == "{\n  /** Server id */\n  readonly id?: string;\n}"

    def test_property_order_follows_declaration(self) -> None:
        schema = {"type": "object", "properties": {"z": {"type": "string"}, "a": {"type": "string"}}}
        result = to_typescript_type(schema)
        assert result.index("z?") < result.index("a?")


# ---------------------------------------------------------------------------
# Nullability
# ---------------------------------------------------------------------------


class TestNullability:
    """``| null`` applied once, at the end."""

    def test_nullable_primitive(self) -> None:
        assert to_typescript_type({"type": "string", "nullable": True}) == "string | null"

    def test_openapi_31_type_array(self) -> None:
        assert to_typescript_type({"type": ["string", "null"]}) == "string | null"

    def test_add_nullable_is_idempotent(self) -> None:
        once = add_nullable("string")
        assert once == "string | null"
        assert add_nullable(once) == once

    def test_null_type_not_doubled(self) -> None:
        assert add_nullable("null") == "null"

    def test_enum_containing_null(self) -> None:
        assert to_typescript_type({"enum": ["a", None], "nullable": True}) == "'a' | null"

    def test_nullable_reference(self) -> None:
        schema = {"$ref": "#/components/schemas/User", "nullable": True}
        assert to_typescript_type(schema) == "User | null"


class TestIdempotence:
    """Translating twice yields identical strings."""

    def test_same_output(self, petstore_schemas: dict[str, Any]) -> None:
        for schema in petstore_schemas.values():
            assert to_typescript_type(schema, petstore_schemas) == to_typescript_type(
                schema, petstore_schemas
            )


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


class TestDeclarations:
    """Exported interfaces and type aliases."""

    def test_interface_with_jsdoc(self, petstore_schemas: dict[str, Any]) -> None:
        result = schema_to_declaration("Pet", petstore_schemas["Pet"], petstore_schemas)
        assert result.startswith("/**\n * A pet in the store.\n */\nexport interface Pet {\n")
        assert "  readonly id: string;" in result
        assert "  /** Display name */\n  name: string;" in result
        assert "  status?: 'available' | 'pending' | 'sold';" in result
        assert "  category?: Category;" in result
        assert "  tags?: Tag[];" in result
        assert "  notes?: string | null;" in result
        assert result.endswith("}")

    def test_type_alias_for_primitives(self) -> None:
        assert schema_to_declaration("UserId", {"type": "string"}) == "export type UserId = string;"

    def test_type_alias_for_compositions(self, petstore_schemas: dict[str, Any]) -> None:
        result = schema_to_declaration("NewPet", petstore_schemas["NewPet"], petstore_schemas)
        assert result.startswith("export type NewPet = Pet & {")
        assert "ownerEmail: string;" in result

    def test_name_normalized(self) -> None:
        assert schema_to_declaration("api_key", {"type": "string"}) == "export type ApiKey = string;"

    def test_generate_type_declarations_in_document_order(self, petstore_schemas: dict[str, Any]) -> None:
        output = generate_type_declarations(petstore_schemas)
        positions = [output.index(f" {name} ") for name in petstore_schemas]
        assert positions == sorted(positions)
        assert "\n\n" in output


# ---------------------------------------------------------------------------
# Operation payloads
# ---------------------------------------------------------------------------


class TestPayloadTypes:
    """Response and request-body types."""

    def test_response_type(self, petstore_30_raw: dict[str, Any], petstore_schemas: dict[str, Any]) -> None:
        response = petstore_30_raw["paths"]["/pets"]["get"]["responses"]["200"]
        assert response_to_type(response, petstore_schemas) == "Pet[]"

    def test_response_without_content_is_void(self) -> None:
        assert response_to_type({"description": "Created"}) == "void"

    def test_swagger_2_response(self) -> None:
        response = {"schema": {"$ref": "#/definitions/User"}}
        assert response_to_type(response) == "User"

    def test_request_body_type(self, petstore_30_raw: dict[str, Any]) -> None:
        body = petstore_30_raw["paths"]["/pets"]["post"]["requestBody"]
        assert request_body_to_type(body) == "NewPet"

    def test_absent_request_body_is_void(self) -> None:
        assert request_body_to_type(None) == "void"

    def test_schemaless_request_body_is_any(self) -> None:
        assert request_body_to_type({"content": {"text/plain": {}}}) == "any"

    def test_media_type_preference(self) -> None:
        container = {
            "content": {
                "text/plain": {"schema": {"type": "string"}},
                "application/problem+json": {"schema": {"type": "integer"}},
                "application/json": {"schema": {"type": "boolean"}},
            }
        }
        assert select_media_schema(container) == {"type": "boolean"}
        del container["content"]["application/json"]
        assert select_media_schema(container) == {"type": "integer"}
