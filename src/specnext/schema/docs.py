"""Documentation extraction and markdown rendering for schemas."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from specnext.models import SchemaDocumentation
from specnext.schema.compose import merge_all_of
from specnext.schema.cycles import is_circular_marker
from specnext.schema.nodes import SchemaKind, parse_schema, required_names
from specnext.schema.refs import extract_schema_name

_CONSTRAINTS_BY_TYPE: dict[str, tuple[str, ...]] = {
    "string": ("minLength", "maxLength", "pattern", "enum"),
    "number": ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum", "multipleOf"),
    "integer": ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum", "multipleOf"),
    "array": ("minItems", "maxItems", "uniqueItems"),
    "object": ("minProperties", "maxProperties"),
}


def extract_documentation(schema: Any) -> SchemaDocumentation:
    """Pull documentation fields and type-specific constraints out of *schema*."""
    if not isinstance(schema, Mapping):
        return SchemaDocumentation()

    node = parse_schema(schema)
    constraints = {
        key: schema[key]
        for key in _CONSTRAINTS_BY_TYPE.get(node.type or "", ())
        if schema.get(key) is not None
    }
    examples = schema.get("examples")
    return SchemaDocumentation(
        description=schema.get("description") or "",
        title=schema.get("title") or "",
        example=schema.get("example"),
        examples=list(examples) if isinstance(examples, list) else [],
        deprecated=schema.get("deprecated") is True,
        read_only=schema.get("readOnly") is True,
        write_only=schema.get("writeOnly") is True,
        format=node.format,
        default=schema.get("default"),
        constraints=constraints,
    )


def describe_schema_type(schema: Any) -> str:
    """Short human-readable label for a schema's type.

    Example::

        >>> describe_schema_type({"type": "array", "items": {"$ref": "#/components/schemas/User"}})
        'User[]'
        >>> describe_schema_type({"oneOf": [{"type": "string"}, {"type": "integer"}]})
        'oneOf(2 types)'
    """
    if is_circular_marker(schema):
        return f"circular({extract_schema_name(schema['ref']) or schema['ref']})"

    node = parse_schema(schema)
    kind = node.kind
    if kind is SchemaKind.REFERENCE:
        name = extract_schema_name(node.ref)
        return name if name is not None else (node.ref or "").rsplit("/", 1)[-1]
    if kind is SchemaKind.ARRAY:
        if node.items is None:
            return "array"
        return f"{describe_schema_type(node.items.raw)}[]"
    if kind is SchemaKind.ENUM:
        return f"enum({', '.join(str(v) for v in node.values)})"
    if node.is_composition:
        return f"{kind.value}({len(node.members)} types)"
    if kind is SchemaKind.EMPTY:
        return "any"
    return node.type or "unknown"


def _cell(text: Any) -> str:
    return " ".join(str(text).split()).replace("|", "\\|")


def schema_to_markdown(
    name: str,
    schema: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
) -> str:
    """Render *schema* as a markdown section with a property table.

    ``allOf`` members are merged first so inherited properties are listed.
    """
    if isinstance(schema, Mapping) and isinstance(schema.get("allOf"), list):
        schema = merge_all_of(schema, dictionary)
    raw: Mapping[str, Any] = schema if isinstance(schema, Mapping) else {}

    lines = [f"## {name}", ""]
    description = raw.get("description")
    if isinstance(description, str) and description.strip():
        lines.extend([description.strip(), ""])

    lines.extend([
        "### Properties",
        "",
        "| Property | Type | Required | Description |",
        "|----------|------|----------|-------------|",
    ])
    properties = raw.get("properties")
    if isinstance(properties, Mapping):
        required = required_names(raw)
        for prop_name, prop in properties.items():
            prop_description = prop.get("description", "") if isinstance(prop, Mapping) else ""
            lines.append(
                f"| {_cell(prop_name)} | {_cell(describe_schema_type(prop))} "
                f"| {'Yes' if prop_name in required else 'No'} | {_cell(prop_description)} |"
            )
    return "\n".join(lines)
