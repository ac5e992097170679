"""Closed tagged variant over the recognised OpenAPI Schema Object shapes.

Raw schemas arrive as untyped dicts. :func:`parse_schema` classifies every
node exactly once into a :class:`SchemaNode` whose :class:`SchemaKind` drives
all later dispatch, so the translators never re-sniff ``type`` strings at
each recursive call site.

Classification precedence (first match wins) mirrors the type-conversion
rules:

1. ``None`` -> ``ABSENT``
2. a mapping with no shape-bearing field -> ``EMPTY``
3. ``$ref`` -> ``REFERENCE``
4. ``type: array`` or untyped with ``items`` -> ``ARRAY``
5. ``properties`` or ``type: object`` -> ``OBJECT`` (a property-less object
   that only carries a composition keyword is classified by that keyword)
6. ``enum`` -> ``ENUM``
7. ``allOf`` / ``oneOf`` / ``anyOf`` -> ``ALL_OF`` / ``ONE_OF`` / ``ANY_OF``
8. a primitive ``type`` or a bare ``format`` -> ``PRIMITIVE``
9. anything else -> ``UNKNOWN``

OpenAPI 3.1 type arrays (``["string", "null"]``) and Swagger's
``x-nullable`` are folded into the orthogonal :attr:`SchemaNode.nullable`
flag.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = frozenset({"string", "number", "integer", "boolean", "null"})

_SHAPE_FIELDS = frozenset({
    "$ref",
    "type",
    "format",
    "properties",
    "additionalProperties",
    "items",
    "enum",
    "allOf",
    "oneOf",
    "anyOf",
})

_COMPOSITION_KINDS = (
    ("allOf", "ALL_OF"),
    ("oneOf", "ONE_OF"),
    ("anyOf", "ANY_OF"),
)


class SchemaKind(str, enum.Enum):
    """Shapes a Schema Object can take."""

    ABSENT = "absent"
    EMPTY = "empty"
    REFERENCE = "reference"
    ARRAY = "array"
    OBJECT = "object"
    ENUM = "enum"
    ALL_OF = "allOf"
    ONE_OF = "oneOf"
    ANY_OF = "anyOf"
    PRIMITIVE = "primitive"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class SchemaNode:
    """One classified schema node.

    Only the fields relevant to :attr:`kind` are populated. ``raw`` keeps the
    source mapping for constraints (``minLength``, ``maximum``, ...) and
    documentation fields, which the translators read directly.
    """

    kind: SchemaKind
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)
    type: Optional[str] = None
    format: Optional[str] = None
    ref: Optional[str] = None
    items: Optional[SchemaNode] = None
    properties: tuple[tuple[str, SchemaNode], ...] = ()
    required: frozenset[str] = frozenset()
    additional: Union[bool, SchemaNode, None] = None
    values: tuple[Any, ...] = ()
    members: tuple[SchemaNode, ...] = ()
    nullable: bool = False

    def get(self, key: str, default: Any = None) -> Any:
        """Read a raw schema keyword (constraint, description, extension)."""
        return self.raw.get(key, default)

    @property
    def is_composition(self) -> bool:
        return self.kind in (SchemaKind.ALL_OF, SchemaKind.ONE_OF, SchemaKind.ANY_OF)


def required_names(schema: Any) -> tuple[str, ...]:
    """Return the string entries of ``required``, in declared order.

    A ``required`` that is not a list (a property-level ``required: true``
    is common in hand-written documents) counts as empty, and non-string
    entries are dropped.
    """
    if not isinstance(schema, Mapping):
        return ()
    required = schema.get("required")
    if not isinstance(required, list):
        return ()
    return tuple(dict.fromkeys(name for name in required if isinstance(name, str)))


def parse_schema(schema: Any) -> SchemaNode:
    """Classify *schema* (and everything nested inline in it) into :class:`SchemaNode`.

    References are leaves: their targets are never parsed here, so parsing
    always terminates, even for self-referential documents. A mapping that
    contains itself (possible with YAML anchors) is cut at the repeat as an
    ``UNKNOWN`` node.
    """
    return _parse(schema, frozenset())


def _normalize_type(schema: Mapping[str, Any]) -> tuple[Optional[str], bool]:
    """Return ``(type, nullable)``, unpacking OpenAPI 3.1 type arrays."""
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        if not non_null:
            return ("null" if type_value else None), False
        return str(non_null[0]), "null" in type_value
    if type_value is None:
        return None, False
    return str(type_value), False


def _parse(schema: Any, active: frozenset[int]) -> SchemaNode:
    if schema is None:
        return SchemaNode(SchemaKind.ABSENT)
    if not isinstance(schema, Mapping):
        return SchemaNode(SchemaKind.UNKNOWN)
    if id(schema) in active:
        logger.debug("Schema object contains itself; cutting the cycle")
        return SchemaNode(SchemaKind.UNKNOWN, raw=schema)
    active = active | {id(schema)}

    schema_type, type_nullable = _normalize_type(schema)
    nullable = (
        type_nullable
        or schema.get("nullable") is True
        or schema.get("x-nullable") is True
    )
    base = {"raw": schema, "nullable": nullable, "type": schema_type}
    fmt = schema.get("format")
    if isinstance(fmt, str):
        base["format"] = fmt

    if not any(key in schema for key in _SHAPE_FIELDS):
        return SchemaNode(SchemaKind.EMPTY, **base)

    ref = schema.get("$ref")
    if isinstance(ref, str):
        return SchemaNode(SchemaKind.REFERENCE, ref=ref, **base)

    if schema_type == "array" or (schema_type is None and "items" in schema):
        items = schema.get("items")
        return SchemaNode(
            SchemaKind.ARRAY,
            items=_parse(items, active) if items is not None else None,
            **base,
        )

    has_properties = isinstance(schema.get("properties"), Mapping)
    composition = _composition_keyword(schema)
    is_object = has_properties or schema_type == "object" or (
        schema_type is None and "additionalProperties" in schema
    )
    if is_object and not (composition and not has_properties):
        if has_properties and isinstance(schema.get("allOf"), list):
            # Sibling properties next to allOf join the intersection.
            own = _parse_object(schema, active, {**base, "nullable": False})
            members = tuple(_parse(m, active) for m in schema["allOf"])
            return SchemaNode(SchemaKind.ALL_OF, members=members + (own,), **base)
        return _parse_object(schema, active, base)

    if isinstance(schema.get("enum"), list):
        return SchemaNode(SchemaKind.ENUM, values=tuple(schema["enum"]), **base)

    if composition:
        keyword, kind_name = composition
        members = tuple(_parse(m, active) for m in schema[keyword])
        return SchemaNode(SchemaKind[kind_name], members=members, **base)

    if schema_type in PRIMITIVE_TYPES or (schema_type is None and "format" in base):
        return SchemaNode(SchemaKind.PRIMITIVE, **base)

    return SchemaNode(SchemaKind.UNKNOWN, **base)


def _composition_keyword(schema: Mapping[str, Any]) -> Optional[tuple[str, str]]:
    for keyword, kind_name in _COMPOSITION_KINDS:
        if isinstance(schema.get(keyword), list):
            return keyword, kind_name
    return None


def _parse_object(
    schema: Mapping[str, Any],
    active: frozenset[int],
    base: dict[str, Any],
) -> SchemaNode:
    properties = schema.get("properties")
    parsed_props: tuple[tuple[str, SchemaNode], ...] = ()
    if isinstance(properties, Mapping):
        parsed_props = tuple(
            (str(name), _parse(prop, active)) for name, prop in properties.items()
        )

    additional_raw = schema.get("additionalProperties")
    additional: Union[bool, SchemaNode, None]
    if isinstance(additional_raw, bool):
        additional = additional_raw
    elif isinstance(additional_raw, Mapping):
        additional = _parse(additional_raw, active)
    else:
        additional = None

    return SchemaNode(
        SchemaKind.OBJECT,
        properties=parsed_props,
        required=frozenset(required_names(schema)),
        additional=additional,
        **{**base, "type": "object"},
    )
