"""Convert OpenAPI Schema Objects into TypeScript type expressions.

The public entry point is :func:`to_typescript_type`, which applies these
rules in order (first match wins):

1. absent schema -> ``any``
2. empty schema -> ``Record<string, any>``
3. reference -> the PascalCase name of the target, never inlined
4. array -> ``<item>[]`` (``any[]`` without ``items``)
5. object -> an inline structural type, or ``Record<string, any>`` without
   properties
6. enum -> a literal union in declaration order
7. ``allOf`` -> members joined with ``&``
8. ``oneOf`` / ``anyOf`` -> members joined with ``|``
9. primitive with a recognised ``format`` -> the format override
10. bare primitive -> the type mapping

Nullability is applied once at the end via :func:`add_nullable`.

Higher-level helpers build full declarations (:func:`schema_to_declaration`,
:func:`generate_type_declarations`) and pick operation payload types
(:func:`response_to_type`, :func:`request_body_to_type`).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from specnext.exceptions import UnresolvedReferenceError
from specnext.models import TypeOptions
from specnext.schema.names import quote_literal, safe_property_name, type_name
from specnext.schema.nodes import SchemaKind, SchemaNode, parse_schema
from specnext.schema.refs import extract_schema_name

logger = logging.getLogger(__name__)

ANY = "any"
OPEN_MAP = "Record<string, any>"

_BARE_TYPES: dict[str, str] = {
    "string": "string",
    "number": "number",
    "integer": "number",
    "boolean": "boolean",
    "null": "null",
    "array": "any[]",
    "object": OPEN_MAP,
}

_STRING_FORMATS = frozenset({
    "date",
    "date-time",
    "time",
    "uuid",
    "email",
    "uri",
    "url",
    "hostname",
    "ipv4",
    "ipv6",
    "password",
})
_BINARY_FORMATS = frozenset({"binary", "byte"})


@dataclass(frozen=True)
class _Context:
    dictionary: Optional[Mapping[str, Any]]
    options: TypeOptions
    strict: bool


def to_typescript_type(
    schema: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
    *,
    options: Optional[TypeOptions] = None,
    strict_references: bool = False,
) -> str:
    """Translate *schema* into a TypeScript type expression.

    Args:
        schema: A raw Schema Object (dict), a reference, ``None``, or an
            already-parsed :class:`~specnext.schema.nodes.SchemaNode`.
        dictionary: The Schema Dictionary used to check that references
            resolve. ``None`` trusts every canonical reference.
        options: Format overrides (``int64``, ``binary``).
        strict_references: Raise
            :class:`~specnext.exceptions.UnresolvedReferenceError` instead of
            degrading an unresolved reference to ``any``.

    Returns:
        The type expression string.

    Example::

        >>> to_typescript_type({"type": "array", "items": {"type": "string"}})
        'string[]'
        >>> to_typescript_type({"enum": ["active", "inactive"]})
        "'active' | 'inactive'"
    """
    node = schema if isinstance(schema, SchemaNode) else parse_schema(schema)
    ctx = _Context(dictionary, options or TypeOptions(), strict_references)
    return _render(node, ctx, 0)


def add_nullable(expression: str) -> str:
    """Append ``| null`` to *expression* unless it already admits ``null``."""
    if expression == "null" or expression.endswith("| null"):
        return expression
    return f"{expression} | null"


def enum_to_union(values: Any) -> str:
    """Render enum *values* as a literal union, preserving order.

    Strings are single-quoted; booleans, numbers and ``None`` become their
    literal tokens. An empty or missing enum yields ``any``.
    """
    if not values:
        return ANY
    return " | ".join(_literal(v) for v in values)


def _literal(value: Any) -> str:
    if isinstance(value, str):
        return quote_literal(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return json.dumps(value)


def primitive_type(
    schema_type: Optional[str],
    schema_format: Optional[str] = None,
    options: Optional[TypeOptions] = None,
) -> str:
    """Map a primitive ``type``/``format`` pair to a TypeScript type."""
    if schema_format:
        override = _format_override(schema_type, schema_format, options or TypeOptions())
        if override is not None:
            return override
    if schema_type is None:
        return ANY
    return _BARE_TYPES.get(schema_type, ANY)


def _format_override(
    schema_type: Optional[str],
    schema_format: str,
    options: TypeOptions,
) -> Optional[str]:
    if schema_type in (None, "string"):
        if schema_format in _STRING_FORMATS:
            return "string"
        if schema_format in _BINARY_FORMATS:
            return options.binary_type
    if schema_type in (None, "integer", "number") and schema_format == "int64":
        return options.int64_type
    return None


def _render(node: SchemaNode, ctx: _Context, depth: int) -> str:
    kind = node.kind
    if kind is SchemaKind.ABSENT:
        return ANY
    if kind is SchemaKind.EMPTY:
        expression = OPEN_MAP
    elif kind is SchemaKind.REFERENCE:
        expression = _reference_type(node.ref or "", ctx)
    elif kind is SchemaKind.ARRAY:
        item = _render(node.items, ctx, depth) if node.items is not None else ANY
        expression = f"{_parenthesize(item, '|&')}[]"
    elif kind is SchemaKind.OBJECT:
        expression = _object_type(node, ctx, depth)
    elif kind is SchemaKind.ENUM:
        expression = enum_to_union(node.values)
    elif kind is SchemaKind.ALL_OF:
        parts = [_parenthesize(_render(m, ctx, depth), "|") for m in node.members]
        expression = " & ".join(parts) if parts else ANY
    elif kind in (SchemaKind.ONE_OF, SchemaKind.ANY_OF):
        parts = [_render(m, ctx, depth) for m in node.members]
        expression = " | ".join(parts) if parts else ANY
    elif kind is SchemaKind.PRIMITIVE:
        expression = primitive_type(node.type, node.format, ctx.options)
    else:
        expression = ANY

    if node.nullable:
        expression = add_nullable(expression)
    return expression


def _reference_type(ref: str, ctx: _Context) -> str:
    name = extract_schema_name(ref)
    if name is None or (ctx.dictionary is not None and name not in ctx.dictionary):
        if ctx.strict:
            raise UnresolvedReferenceError(ref)
        logger.warning("Unresolved reference %s; falling back to any", ref)
        return ANY
    return type_name(name)


def _object_type(node: SchemaNode, ctx: _Context, depth: int) -> str:
    additional = node.additional
    if not node.properties:
        if isinstance(additional, SchemaNode) and additional.kind is not SchemaKind.EMPTY:
            return f"Record<string, {_render(additional, ctx, depth)}>"
        return OPEN_MAP

    pad = "  " * (depth + 1)
    lines = ["{"]
    for name, prop in node.properties:
        prop_type = _render(prop, ctx, depth + 1)
        if node.nullable:
            prop_type = add_nullable(prop_type)
        description = prop.get("description")
        if isinstance(description, str) and description.strip():
            lines.append(f"{pad}/** {_jsdoc_line(description)} */")
        readonly = "readonly " if prop.get("readOnly") is True else ""
        optional = "" if name in node.required else "?"
        lines.append(f"{pad}{readonly}{safe_property_name(name)}{optional}: {prop_type};")

    if isinstance(additional, SchemaNode):
        index_type = ANY if additional.kind is SchemaKind.EMPTY else _render(additional, ctx, depth + 1)
        lines.append(f"{pad}[key: string]: {index_type};")
    elif additional is True:
        lines.append(f"{pad}[key: string]: {ANY};")

    lines.append("  " * depth + "}")
    return "\n".join(lines)


def _jsdoc_line(text: str) -> str:
    return " ".join(text.split()).replace("*/", "*\\/")


def _parenthesize(expression: str, operators: str) -> str:
    """Wrap *expression* in parentheses if it has a top-level operator in *operators*."""
    depth = 0
    quote: Optional[str] = None
    escaped = False
    for char in expression:
        if quote:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == quote:
                quote = None
            continue
        if char in "'\"":
            quote = char
        elif char in "({[<":
            depth += 1
        elif char in ")}]>":
            depth -= 1
        elif depth == 0 and char in operators:
            return f"({expression})"
    return expression


# ---------------------------------------------------------------------------
# Declarations
# ---------------------------------------------------------------------------


def schema_to_declaration(
    name: str,
    schema: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
    *,
    options: Optional[TypeOptions] = None,
    strict_references: bool = False,
) -> str:
    """Emit an exported TypeScript declaration for the named schema.

    Non-nullable object schemas with properties become interfaces; every
    other shape becomes a type alias. The schema's ``description`` is
    rendered as a JSDoc block above the declaration.

    Example::

        >>> print(schema_to_declaration("UserId", {"type": "string"}))
        export type UserId = string;
    """
    node = parse_schema(schema)
    ctx = _Context(dictionary, options or TypeOptions(), strict_references)
    ident = type_name(name)

    if node.kind is SchemaKind.OBJECT and node.properties and not node.nullable:
        declaration = f"export interface {ident} {_object_type(node, ctx, 0)}"
    else:
        declaration = f"export type {ident} = {_render(node, ctx, 0)};"

    description = node.get("description")
    if isinstance(description, str) and description.strip():
        doc_lines = [f" * {line}".rstrip() for line in description.strip().splitlines()]
        return "\n".join(["/**", *doc_lines, " */", declaration])
    return declaration


def generate_type_declarations(
    dictionary: Mapping[str, Any],
    *,
    options: Optional[TypeOptions] = None,
    strict_references: bool = False,
) -> str:
    """Emit one declaration per named schema, in document order."""
    declarations = [
        schema_to_declaration(
            name,
            schema,
            dictionary,
            options=options,
            strict_references=strict_references,
        )
        for name, schema in dictionary.items()
    ]
    return "\n\n".join(declarations)


def select_media_schema(container: Any) -> Any:
    """Return the schema carried by a response or request body, if any.

    OpenAPI 3 ``content`` maps prefer ``application/json``, then any JSON
    media type, then the first media type that declares a schema. Swagger 2
    objects carry ``schema`` directly.
    """
    if not isinstance(container, Mapping):
        return None
    content = container.get("content")
    if isinstance(content, Mapping):
        candidates = [
            (media_type, entry)
            for media_type, entry in content.items()
            if isinstance(entry, Mapping) and "schema" in entry
        ]
        for media_type, entry in candidates:
            if media_type == "application/json":
                return entry["schema"]
        for media_type, entry in candidates:
            if "json" in media_type:
                return entry["schema"]
        return candidates[0][1]["schema"] if candidates else None
    return container.get("schema")


def response_to_type(
    response: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
    *,
    options: Optional[TypeOptions] = None,
) -> str:
    """TypeScript type of a response payload; ``void`` when there is none."""
    schema = select_media_schema(response)
    if schema is None:
        return "void"
    return to_typescript_type(schema, dictionary, options=options)


def request_body_to_type(
    body: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
    *,
    options: Optional[TypeOptions] = None,
) -> str:
    """TypeScript type of a request body; ``void`` if absent, ``any`` if schemaless."""
    if body is None:
        return "void"
    schema = select_media_schema(body)
    if schema is None:
        return ANY
    return to_typescript_type(schema, dictionary, options=options)
