"""Composition helpers: merging, simplifying, and flattening schemas.

All helpers return new dicts and never mutate their inputs.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from specnext.models import FlattenedField
from specnext.schema.nodes import required_names
from specnext.schema.refs import follow_reference, is_reference

logger = logging.getLogger(__name__)

# Keys that carry documentation only and can be dropped without changing
# what a schema accepts.
_NON_STRUCTURAL_KEYS = frozenset({"example", "examples", "xml", "externalDocs"})

_COMPOSITION_KEYS = ("allOf", "oneOf", "anyOf")


def merge_schemas(first: Mapping[str, Any], second: Mapping[str, Any]) -> dict[str, Any]:
    """Merge two schemas into a new one.

    ``properties`` are combined (a property declared in both takes the
    definition from *second*), ``required`` lists are unioned preserving
    order, and every other key keeps the value from *first*.

    Example::

        >>> merge_schemas(
        ...     {"properties": {"id": {"type": "string"}}, "required": ["id"]},
        ...     {"properties": {"name": {"type": "string"}}, "required": ["name"]},
        ... )["required"]
        ['id', 'name']
    """
    merged = dict(first)
    if "required" in merged:
        merged["required"] = list(required_names(merged))
    for key, value in second.items():
        if key == "properties" and isinstance(value, Mapping):
            existing = merged.get("properties")
            merged["properties"] = {**(existing if isinstance(existing, Mapping) else {}), **value}
        elif key == "required":
            required = list(merged.get("required", []))
            required.extend(name for name in required_names(second) if name not in required)
            merged["required"] = required
        elif key not in merged:
            merged[key] = value
    return merged


def merge_all_of(
    schema: Mapping[str, Any],
    dictionary: Optional[Mapping[str, Any]] = None,
) -> dict[str, Any]:
    """Collapse an ``allOf`` composition into a single object schema.

    Member references are followed through *dictionary* and nested
    ``allOf`` members are merged recursively. Keys declared next to
    ``allOf`` (``description``, ``nullable``, ...) override the merged
    members; sibling ``properties`` and ``required`` are merged like any
    other member. A schema without ``allOf`` is returned as a shallow copy.
    """
    return _merge_all_of(schema, dictionary, frozenset())


def _merge_all_of(
    schema: Mapping[str, Any],
    dictionary: Optional[Mapping[str, Any]],
    seen: frozenset[str],
) -> dict[str, Any]:
    members = schema.get("allOf")
    if not isinstance(members, list):
        return dict(schema)

    merged: dict[str, Any] = {}
    for member in members:
        if is_reference(member):
            ref = member["$ref"]
            if ref in seen:
                logger.warning("Skipping circular allOf member %s", ref)
                continue
            resolved = follow_reference(member, dictionary) if dictionary is not None else None
            if resolved is None:
                logger.warning("Skipping unresolved allOf member %s", ref)
                continue
            member = _merge_all_of(resolved, dictionary, seen | {ref})
        elif isinstance(member, Mapping):
            member = _merge_all_of(member, dictionary, seen)
        else:
            continue
        merged = merge_schemas(merged, member)

    rest = {key: value for key, value in schema.items() if key != "allOf"}
    result = merge_schemas(merged, rest)
    result.update({k: v for k, v in rest.items() if k not in ("properties", "required")})
    if "properties" in result and "type" not in result:
        result["type"] = "object"
    return result


def simplify_schema(schema: Any) -> Any:
    """Drop documentation-only keys (``example``, ``examples``, ``xml``, ``externalDocs``).

    Applied recursively to every nested schema position. A *property* that
    happens to be called ``example`` is kept.
    """
    if not isinstance(schema, Mapping):
        return schema

    simplified: dict[str, Any] = {}
    for key, value in schema.items():
        if key in _NON_STRUCTURAL_KEYS:
            continue
        if key == "properties" and isinstance(value, Mapping):
            simplified[key] = {name: simplify_schema(prop) for name, prop in value.items()}
        elif key in ("items", "additionalProperties", "not"):
            simplified[key] = simplify_schema(value)
        elif key in _COMPOSITION_KEYS and isinstance(value, list):
            simplified[key] = [simplify_schema(member) for member in value]
        else:
            simplified[key] = value
    return simplified


def join_path(segments: list[str]) -> str:
    """Join path segments into ``user.profile.bio`` / ``items[].name`` form."""
    path = ""
    for segment in segments:
        if segment == "[]":
            path += "[]"
        elif path:
            path += f".{segment}"
        else:
            path = segment
    return path


def flatten_schema(
    schema: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
    prefix: str = "",
) -> list[FlattenedField]:
    """Flatten nested object properties into dotted leaf paths.

    Object properties are descended into, arrays of objects contribute a
    ``[]`` segment, and everything else (primitives, arrays of primitives,
    circular or unresolvable references) is a leaf.

    Args:
        schema: The schema to flatten.
        dictionary: Schema Dictionary used to follow references.
        prefix: Optional leading path segment.

    Returns:
        Leaves in declaration order.

    Example::

        >>> [f.path for f in flatten_schema({
        ...     "type": "object",
        ...     "properties": {"user": {"type": "object", "properties": {"bio": {"type": "string"}}}},
        ... })]
        ['user.bio']
    """
    fields: list[FlattenedField] = []
    segments = [prefix] if prefix else []
    _flatten(schema, dictionary, segments, False, frozenset(), fields)
    return fields


def _expand(
    schema: Any,
    dictionary: Optional[Mapping[str, Any]],
    seen: frozenset[str],
) -> tuple[Optional[Mapping[str, Any]], frozenset[str]]:
    """Follow references and merge ``allOf``; ``None`` stops the descent."""
    if is_reference(schema):
        ref = schema["$ref"]
        if ref in seen or dictionary is None:
            return None, seen
        seen = seen | {ref}
        schema = follow_reference(schema, dictionary)
        if schema is None:
            return None, seen
    if isinstance(schema, Mapping) and isinstance(schema.get("allOf"), list):
        schema = merge_all_of(schema, dictionary)
    return (schema if isinstance(schema, Mapping) else None), seen


def _flatten(
    schema: Any,
    dictionary: Optional[Mapping[str, Any]],
    segments: list[str],
    required: bool,
    seen: frozenset[str],
    fields: list[FlattenedField],
) -> None:
    expanded, seen = _expand(schema, dictionary, seen)

    if expanded is not None and isinstance(expanded.get("properties"), Mapping):
        required_props = required_names(expanded)
        for name, prop in expanded["properties"].items():
            _flatten(prop, dictionary, segments + [str(name)], name in required_props, seen, fields)
        return

    if expanded is not None and expanded.get("type") == "array":
        items, _ = _expand(expanded.get("items"), dictionary, seen)
        if items is not None and isinstance(items.get("properties"), Mapping):
            _flatten(expanded["items"], dictionary, segments + ["[]"], required, seen, fields)
            return

    if not segments:
        return
    leaf = dict(expanded) if expanded is not None else dict(schema) if isinstance(schema, Mapping) else {}
    fields.append(
        FlattenedField(path=join_path(segments), segments=list(segments), required=required, schema=leaf)
    )
