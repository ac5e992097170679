"""Resolve ``$ref`` JSON Reference pointers in OpenAPI documents.

OpenAPI documents use ``$ref`` pointers (e.g.
``{"$ref": "#/components/schemas/Pet"}``) to link schemas by name. This module
provides the lookups the translation engine needs:

* :func:`resolve_reference` -- walk a ``#/...`` pointer through the document.
* :func:`extract_schema_name` -- recognise the two canonical schema roots.
* :func:`follow_reference` -- follow a chain of references to a concrete schema.
* :func:`iter_references` / :func:`schema_dependencies` -- enumerate the
  references a schema contains at any nesting depth.
* :func:`find_unresolved_references` -- diagnostics for broken links.
* :func:`dereference` -- deep copy with references inlined.

Only **internal** references (``#`` for the document root, or a pointer
starting with ``#/``) are supported.
Unlike a document validator, nothing here raises on a broken pointer:
resolution failures come back as ``None`` so one bad schema does not abort
translation of the rest of the document.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any

logger = logging.getLogger(__name__)

# Canonical reference roots and the document key each one lives under.
_SCHEMA_ROOTS = (
    ("#/components/schemas/", "components"),
    ("#/definitions/", "definitions"),
)

_MISSING = object()


def is_reference(schema: Any) -> bool:
    """Return ``True`` if *schema* is a ``{"$ref": "..."}`` object."""
    return isinstance(schema, Mapping) and isinstance(schema.get("$ref"), str)


def _unescape(segment: str) -> str:
    """Decode RFC 6901 escaping (``~1`` for ``/``, ``~0`` for ``~``)."""
    return segment.replace("~1", "/").replace("~0", "~")


def extract_schema_name(ref: Any) -> str | None:
    """Return ``<Name>`` from ``#/components/schemas/<Name>`` or ``#/definitions/<Name>``.

    Any other shape, including other internal roots such as
    ``#/components/responses/...``, returns ``None``.

    Example::

        >>> extract_schema_name("#/components/schemas/User")
        'User'
        >>> extract_schema_name("not-a-ref") is None
        True
    """
    if not isinstance(ref, str):
        return None
    for prefix, _ in _SCHEMA_ROOTS:
        if ref.startswith(prefix):
            name = ref[len(prefix):]
            if name and "/" not in name:
                return _unescape(name)
    return None


def _walk_pointer(ref: str, document: Any) -> Any:
    """Walk the segments of an internal pointer, returning ``_MISSING`` on failure."""
    current: Any = document
    for raw_segment in ref[2:].split("/"):
        segment = _unescape(raw_segment)
        if isinstance(current, Mapping):
            if segment not in current:
                return _MISSING
            current = current[segment]
        elif isinstance(current, list):
            if not segment.isdigit() or int(segment) >= len(current):
                return _MISSING
            current = current[int(segment)]
        else:
            return _MISSING
    return current


def resolve_reference(ref: Any, document: Any) -> Any | None:
    """Resolve a single ``#/...`` reference against *document*.

    *document* may be the whole OpenAPI document or the bare Schema
    Dictionary (name to schema); a canonical schema reference that cannot be
    walked falls back to a name lookup when the dictionary has no
    ``components``/``definitions`` root of its own.

    Args:
        ref: The ``$ref`` string (e.g. ``"#/paths/~1users/get"``).
        document: The mapping to resolve against.

    Returns:
        The referenced value (the document itself for ``"#"``), or ``None``
        when the reference is external, malformed, or any segment is missing.
    """
    if not isinstance(ref, str):
        return None
    if ref == "#":
        return document
    if ref.startswith("#"):
        if not ref.startswith("#/"):
            logger.warning("Malformed reference (expected '#/...'): %s", ref)
            return None
    else:
        logger.warning("External reference not supported: %s", ref)
        return None

    found = _walk_pointer(ref, document)
    if found is not _MISSING:
        return found

    if isinstance(document, Mapping):
        for prefix, root_key in _SCHEMA_ROOTS:
            if ref.startswith(prefix) and root_key not in document:
                name = extract_schema_name(ref)
                if name is not None and name in document:
                    return document[name]

    logger.debug("Could not resolve reference %s", ref)
    return None


def follow_reference(schema: Any, document: Any) -> Mapping[str, Any] | None:
    """Follow a chain of references (``A -> B -> C``) to a concrete schema.

    Returns *schema* itself when it is not a reference, and ``None`` when the
    chain is broken or loops back on itself.
    """
    seen: set[str] = set()
    current = schema
    while is_reference(current):
        ref = current["$ref"]
        if ref in seen:
            logger.warning("Reference chain loops back to %s", ref)
            return None
        seen.add(ref)
        current = resolve_reference(ref, document)
        if current is None:
            logger.warning("Broken reference chain at %s", ref)
            return None
    if not isinstance(current, Mapping):
        return None
    return current


def iter_references(obj: Any) -> Iterator[str]:
    """Yield every ``$ref`` string inside *obj*, depth-first in document order."""
    active: set[int] = set()

    def _walk(node: Any) -> Iterator[str]:
        if isinstance(node, Mapping):
            if id(node) in active:
                return
            active.add(id(node))
            ref = node.get("$ref")
            if isinstance(ref, str):
                yield ref
            for value in node.values():
                yield from _walk(value)
            active.discard(id(node))
        elif isinstance(node, list):
            if id(node) in active:
                return
            active.add(id(node))
            for item in node:
                yield from _walk(item)
            active.discard(id(node))

    yield from _walk(obj)


def schema_dependencies(schema: Any, dictionary: Mapping[str, Any]) -> list[str]:
    """Names of dictionary schemas that *schema* references, unique, in document order."""
    names: list[str] = []
    for ref in iter_references(schema):
        name = extract_schema_name(ref)
        if name is not None and name in dictionary and name not in names:
            names.append(name)
    return names


def find_unresolved_references(
    dictionary: Mapping[str, Any],
    document: Any | None = None,
) -> list[tuple[str, str]]:
    """List ``(schema name, ref)`` pairs whose reference does not resolve.

    Args:
        dictionary: The Schema Dictionary to scan.
        document: Optional full document to resolve against. Defaults to the
            dictionary itself.
    """
    root = dictionary if document is None else document
    unresolved: list[tuple[str, str]] = []
    for name, schema in dictionary.items():
        for ref in iter_references(schema):
            if resolve_reference(ref, root) is None:
                unresolved.append((name, ref))
    return unresolved


def dereference(obj: Any, document: Any) -> Any:
    """Return a deep copy of *obj* with every resolvable reference inlined.

    Circular references are detected via a per-branch ``seen`` set and left
    as ``$ref`` dicts at the cycle point. References that do not resolve are
    left untouched and logged. The input is never mutated.

    Example::

        resolved = dereference({"$ref": "#/components/schemas/Pet"}, document)
        # resolved is the Pet schema with its own references inlined
    """
    return _deep_resolve(obj, document, frozenset())


def _deep_resolve(obj: Any, document: Any, seen: frozenset[str]) -> Any:
    """Recursively inline references; *seen* holds the refs on the current path."""
    if isinstance(obj, Mapping):
        if is_reference(obj):
            ref = obj["$ref"]
            if ref in seen:
                return dict(obj)
            resolved = resolve_reference(ref, document)
            if resolved is None:
                logger.warning("Leaving unresolved reference in place: %s", ref)
                return dict(obj)
            # New set per branch so sibling references do not interfere.
            return _deep_resolve(resolved, document, seen | {ref})
        return {key: _deep_resolve(value, document, seen) for key, value in obj.items()}

    if isinstance(obj, list):
        return [_deep_resolve(item, document, seen) for item in obj]

    return obj
