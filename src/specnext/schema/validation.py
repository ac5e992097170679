"""Generate zod validation expressions from OpenAPI Schema Objects.

:func:`to_validation_expression` follows the same dispatch order as
:func:`~specnext.schema.typescript.to_typescript_type` and adds constraint
chains:

* strings: base -> format override (a recognised format wins outright) ->
  ``minLength`` -> ``maxLength`` -> ``pattern``
* numbers: base (``int`` vs float) -> ``minimum`` -> ``maximum`` ->
  ``multipleOf``
* arrays: ``z.array(item)`` -> ``minItems`` -> ``maxItems`` -> ``uniqueItems``
* objects: required properties bare, optional ones ``.optional()``;
  ``.strict()`` only in strict mode and only for
  ``additionalProperties: false``
* ``oneOf``/``anyOf`` -> ``z.union``, or ``z.discriminatedUnion`` when a
  ``discriminator`` names the tag property; ``allOf`` -> ``z.intersection``
* references -> the ``<Name>Schema`` identifier, never inlined

:func:`generate_validation_module` assembles a complete module for a
Schema Dictionary.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from specnext.exceptions import UnresolvedReferenceError
from specnext.models import ValidationOptions
from specnext.schema.cycles import detect_circular_references
from specnext.schema.names import quote_literal, safe_property_name, type_name, validator_name
from specnext.schema.nodes import SchemaKind, SchemaNode, parse_schema
from specnext.schema.refs import extract_schema_name
from specnext.schema.stats import emission_order

logger = logging.getLogger(__name__)

UNKNOWN = "z.unknown()"
OPEN_RECORD = "z.record(z.string(), z.any())"

_STRING_FORMATS: dict[str, str] = {
    "email": ".email()",
    "uri": ".url()",
    "url": ".url()",
    "uuid": ".uuid()",
    "date-time": ".datetime()",
    "date": ".date()",
    "time": ".time()",
    "ipv4": '.ip({ version: "v4" })',
    "ipv6": '.ip({ version: "v6" })',
    "byte": ".base64()",
}


@dataclass(frozen=True)
class _Context:
    dictionary: Optional[Mapping[str, Any]]
    options: ValidationOptions
    strict_references: bool


def to_validation_expression(
    schema: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
    options: Optional[ValidationOptions] = None,
    *,
    strict_references: bool = False,
) -> str:
    """Translate *schema* into a zod expression string.

    Args:
        schema: A raw Schema Object, reference, ``None``, or parsed node.
        dictionary: The Schema Dictionary used to check references.
        options: Strictness, coercion and custom format validators.
        strict_references: Raise on unresolved references instead of
            degrading to ``z.unknown()``.

    Example::

        >>> to_validation_expression({"type": "string", "minLength": 1, "maxLength": 50})
        'z.string().min(1).max(50)'
        >>> to_validation_expression({"$ref": "#/components/schemas/User"})
        'UserSchema'
    """
    node = schema if isinstance(schema, SchemaNode) else parse_schema(schema)
    ctx = _Context(dictionary, options or ValidationOptions(), strict_references)
    return _render(node, ctx, 0)


def _render(node: SchemaNode, ctx: _Context, depth: int) -> str:
    kind = node.kind
    if kind is SchemaKind.ABSENT:
        return UNKNOWN
    if kind is SchemaKind.REFERENCE:
        expression = _reference(node.ref or "", ctx)
    else:
        if kind is SchemaKind.EMPTY:
            expression = OPEN_RECORD
        elif kind is SchemaKind.ARRAY:
            expression = _array(node, ctx, depth)
        elif kind is SchemaKind.OBJECT:
            expression = _object(node, ctx, depth)
        elif kind is SchemaKind.ENUM:
            expression = _enum(node.values)
        elif kind is SchemaKind.ALL_OF:
            expression = _intersection([_render(m, ctx, depth) for m in node.members])
        elif kind in (SchemaKind.ONE_OF, SchemaKind.ANY_OF):
            expression = _discriminated_union(node, ctx, depth) or _union(
                [_render(m, ctx, depth) for m in node.members]
            )
        elif kind is SchemaKind.PRIMITIVE:
            expression = _primitive(node, ctx)
        else:
            expression = UNKNOWN

        description = node.get("description")
        if ctx.options.include_descriptions and isinstance(description, str) and description:
            expression += f".describe({json.dumps(description)})"

    if node.nullable and not expression.endswith(".nullable()"):
        expression += ".nullable()"
    return expression


def _reference(ref: str, ctx: _Context) -> str:
    name = extract_schema_name(ref)
    if name is None or (ctx.dictionary is not None and name not in ctx.dictionary):
        if ctx.strict_references:
            raise UnresolvedReferenceError(ref)
        logger.warning("Unresolved reference %s; falling back to z.unknown()", ref)
        return UNKNOWN
    return validator_name(name)


def _number_literal(value: Any, bigint: bool = False) -> str:
    if bigint:
        return f"{int(value)}n"
    return json.dumps(value)


def _primitive(node: SchemaNode, ctx: _Context) -> str:
    options = ctx.options
    schema_type = node.type
    fmt = node.format

    if schema_type is None:
        if fmt in _STRING_FORMATS or fmt == "binary" or fmt in options.custom_validators:
            schema_type = "string"
        elif fmt == "int64":
            schema_type = "integer"
        else:
            return UNKNOWN

    prefix = "z.coerce." if options.coerce else "z."
    if schema_type == "string":
        return _string(node, ctx, prefix)
    if schema_type in ("number", "integer"):
        return _number(node, ctx, prefix, integer=schema_type == "integer")
    if schema_type == "boolean":
        return f"{prefix}boolean()"
    if schema_type == "null":
        return "z.null()"
    return UNKNOWN


def _string(node: SchemaNode, ctx: _Context, prefix: str) -> str:
    fmt = node.format
    if fmt == "binary":
        return "z.instanceof(Blob)"

    expression = f"{prefix}string()"
    if fmt in _STRING_FORMATS:
        return expression + _STRING_FORMATS[fmt]
    if fmt and fmt in ctx.options.custom_validators:
        return expression + f".refine({ctx.options.custom_validators[fmt]})"

    min_length = node.get("minLength")
    if isinstance(min_length, int):
        expression += f".min({min_length})"
    max_length = node.get("maxLength")
    if isinstance(max_length, int):
        expression += f".max({max_length})"
    pattern = node.get("pattern")
    if isinstance(pattern, str):
        expression += f".regex(new RegExp({quote_literal(pattern)}))"
    return expression


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(node: SchemaNode, ctx: _Context, prefix: str, integer: bool) -> str:
    bigint = node.format == "int64" and ctx.options.int64_as_bigint
    if bigint:
        # JSON never carries bigint values, so always coerce.
        expression = "z.coerce.bigint()"
    elif integer:
        expression = f"{prefix}number().int()"
    else:
        expression = f"{prefix}number()"

    minimum = node.get("minimum")
    exclusive_min = node.get("exclusiveMinimum")
    if _is_number(minimum):
        method = "gt" if exclusive_min is True else "min"
        expression += f".{method}({_number_literal(minimum, bigint)})"
    elif _is_number(exclusive_min):
        expression += f".gt({_number_literal(exclusive_min, bigint)})"

    maximum = node.get("maximum")
    exclusive_max = node.get("exclusiveMaximum")
    if _is_number(maximum):
        method = "lt" if exclusive_max is True else "max"
        expression += f".{method}({_number_literal(maximum, bigint)})"
    elif _is_number(exclusive_max):
        expression += f".lt({_number_literal(exclusive_max, bigint)})"

    multiple_of = node.get("multipleOf")
    if _is_number(multiple_of):
        expression += f".multipleOf({_number_literal(multiple_of, bigint)})"
    return expression


def _array(node: SchemaNode, ctx: _Context, depth: int) -> str:
    item = _render(node.items, ctx, depth) if node.items is not None else UNKNOWN
    expression = f"z.array({item})"
    min_items = node.get("minItems")
    if isinstance(min_items, int):
        expression += f".min({min_items})"
    max_items = node.get("maxItems")
    if isinstance(max_items, int):
        expression += f".max({max_items})"
    if node.get("uniqueItems") is True:
        expression += (
            ".refine((items) => new Set(items).size === items.length, "
            '{ message: "Array must contain unique items" })'
        )
    return expression


def _object(node: SchemaNode, ctx: _Context, depth: int) -> str:
    additional = node.additional
    if not node.properties:
        if isinstance(additional, SchemaNode) and additional.kind is not SchemaKind.EMPTY:
            return f"z.record(z.string(), {_render(additional, ctx, depth)})"
        return OPEN_RECORD

    pad = "  " * (depth + 1)
    lines = ["z.object({"]
    for name, prop in node.properties:
        prop_expression = _render(prop, ctx, depth + 1)
        if name not in node.required:
            prop_expression += ".optional()"
        lines.append(f"{pad}{safe_property_name(name)}: {prop_expression},")
    lines.append("  " * depth + "})")
    expression = "\n".join(lines)

    if additional is False and ctx.options.strict:
        expression += ".strict()"
    elif additional is True:
        expression += ".passthrough()"
    elif isinstance(additional, SchemaNode) and additional.kind is not SchemaKind.EMPTY:
        expression += f".catchall({_render(additional, ctx, depth)})"
    return expression


def _enum(values: tuple[Any, ...]) -> str:
    if not values:
        return UNKNOWN
    if all(isinstance(v, str) for v in values):
        return f"z.enum([{', '.join(quote_literal(v) for v in values)}])"
    literals = [f"z.literal({_literal(v)})" for v in values]
    if len(literals) == 1:
        return literals[0]
    return f"z.union([{', '.join(literals)}])"


def _literal(value: Any) -> str:
    if isinstance(value, str):
        return quote_literal(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return json.dumps(value)


def _union(members: list[str]) -> str:
    if not members:
        return UNKNOWN
    if len(members) == 1:
        return members[0]
    return f"z.union([{', '.join(members)}])"


def _discriminated_union(node: SchemaNode, ctx: _Context, depth: int) -> Optional[str]:
    """``z.discriminatedUnion`` for a ``oneOf``/``anyOf`` with ``discriminator.propertyName``.

    With a ``mapping`` every mapped schema is extended with its literal
    discriminator value (bare names in the mapping count as schema names).
    Without one the members are listed as they are. Returns ``None`` when
    there is no usable discriminator or a mapped schema cannot be resolved,
    and the caller falls back to a plain ``z.union``.
    """
    discriminator = node.get("discriminator")
    if not isinstance(discriminator, Mapping):
        return None
    field = discriminator.get("propertyName")
    if not isinstance(field, str) or not field:
        return None

    mapping = discriminator.get("mapping")
    if isinstance(mapping, Mapping) and mapping:
        options = []
        for value, ref in mapping.items():
            if not isinstance(ref, str):
                return None
            if "/" not in ref and not ref.startswith("#"):
                ref = f"#/components/schemas/{ref}"
            base = _reference(ref, ctx)
            if base == UNKNOWN:
                return None
            literal = f"z.literal({_literal(value)})"
            options.append(f"{base}.extend({{ {safe_property_name(field)}: {literal} }})")
    else:
        options = [_render(m, ctx, depth + 1) for m in node.members]
    if not options:
        return None

    pad = "  " * (depth + 1)
    body = "".join(f"{pad}{option},\n" for option in options)
    return f"z.discriminatedUnion({quote_literal(field)}, [\n{body}{'  ' * depth}])"


def _intersection(members: list[str]) -> str:
    if not members:
        return UNKNOWN
    expression = members[0]
    for member in members[1:]:
        expression = f"z.intersection({expression}, {member})"
    return expression


def generate_validation_module(
    dictionary: Mapping[str, Any],
    options: Optional[ValidationOptions] = None,
    *,
    strict_references: bool = False,
) -> str:
    """Emit a zod module declaring ``<Name>Schema`` and ``<Name>`` for every schema.

    Schemas are emitted dependencies-first. Members of a reference cycle are
    wrapped in ``z.lazy`` so forward references are legal.
    """
    options = options or ValidationOptions()
    circular = detect_circular_references(dictionary)
    lines = [f"import {{ z }} from {quote_literal(options.import_path)};", ""]

    for name in emission_order(dictionary):
        expression = to_validation_expression(
            dictionary[name],
            dictionary,
            options,
            strict_references=strict_references,
        )
        ident = validator_name(name)
        if name in circular:
            lines.append(f"export const {ident}: z.ZodTypeAny = z.lazy(() => {expression});")
        else:
            lines.append(f"export const {ident} = {expression};")
        lines.append(f"export type {type_name(name)} = z.infer<typeof {ident}>;")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
