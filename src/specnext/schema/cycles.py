"""Circular-reference detection.

Two different questions are answered here:

* :func:`detect_circular_references` works on the whole Schema Dictionary
  and reports which *named* schemas take part in a reference cycle
  (``A -> B -> A`` or ``A -> A``).
* :func:`detect_path_cycles` works on a single schema and reports every
  reference that is revisited along one root-to-node path of its own
  structure. The visited set is copied per branch, so two sibling
  properties that both point at the same schema are not a cycle.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator, Mapping
from typing import Any, Optional

from specnext.models import PathCycle
from specnext.schema.refs import is_reference, resolve_reference, schema_dependencies

logger = logging.getLogger(__name__)

CIRCULAR_TYPE = "circular"


class _State(enum.Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def detect_circular_references(dictionary: Mapping[str, Any]) -> set[str]:
    """Return the names of schemas that participate in at least one cycle.

    Depth-first search over the name -> name reference edges. A back-edge to
    a schema that is still on the DFS stack marks every schema currently on
    the stack as circular. Schemas that are already finished are never
    re-entered, so the traversal is O(V + E) and always terminates.

    Because finished schemas are not re-entered, a schema whose only route
    into a cycle runs through an already finished member would be missed
    by stack marking alone. The same pass therefore keeps Tarjan lowlinks
    and also reports every member of a strongly connected component with
    more than one schema.

    Example::

        >>> sorted(detect_circular_references({
        ...     "A": {"$ref": "#/components/schemas/B"},
        ...     "B": {"$ref": "#/components/schemas/A"},
        ... }))
        ['A', 'B']
    """
    edges = {name: schema_dependencies(schema, dictionary) for name, schema in dictionary.items()}
    state = {name: _State.UNVISITED for name in dictionary}
    circular: set[str] = set()

    index: dict[str, int] = {}
    lowlink: dict[str, int] = {}
    component: list[str] = []
    on_component: set[str] = set()
    stack: list[tuple[str, Iterator[str]]] = []

    def enter(name: str) -> None:
        state[name] = _State.IN_PROGRESS
        index[name] = lowlink[name] = len(index)
        component.append(name)
        on_component.add(name)
        stack.append((name, iter(edges[name])))

    for root in dictionary:
        if state[root] is not _State.UNVISITED:
            continue
        enter(root)
        while stack:
            name, children = stack[-1]
            for child in children:
                if state[child] is _State.IN_PROGRESS:
                    circular.update(entry for entry, _ in stack)
                if child in on_component:
                    lowlink[name] = min(lowlink[name], index[child])
                elif state[child] is _State.UNVISITED:
                    enter(child)
                    break
            else:
                state[name] = _State.DONE
                stack.pop()
                if stack:
                    parent = stack[-1][0]
                    lowlink[parent] = min(lowlink[parent], lowlink[name])
                if lowlink[name] == index[name]:
                    members = _pop_component(component, on_component, name)
                    if len(members) > 1:
                        circular.update(members)

    if circular:
        logger.debug("Circular schemas: %s", ", ".join(sorted(circular)))
    return circular


def _pop_component(component: list[str], on_component: set[str], root: str) -> list[str]:
    """Pop the strongly connected component rooted at *root* off *component*."""
    members: list[str] = []
    while True:
        member = component.pop()
        on_component.discard(member)
        members.append(member)
        if member == root:
            return members


def detect_path_cycles(
    schema: Any,
    document: Any = None,
    visited: frozenset[str] = frozenset(),
    path: tuple[str, ...] = (),
) -> list[PathCycle]:
    """Report references revisited along a single path of *schema*.

    Args:
        schema: The schema to inspect.
        document: Optional document (or Schema Dictionary) used to follow
            references into their targets. Without it, only references
            repeated literally inside *schema* are found.
        visited: References already on the path above *schema*.
        path: Path segments leading to *schema* (property names, ``[]``
            for array items, ``allOf[0]`` for composition members).

    Returns:
        One :class:`~specnext.models.PathCycle` per revisit, in traversal
        order. An empty list means the schema is acyclic along every path.
    """
    found: list[PathCycle] = []
    _walk(schema, document, visited, frozenset(), path, found)
    return found


def _children(node: Mapping[str, Any]) -> Iterator[tuple[tuple[str, ...], Any]]:
    """Yield ``(segments, child)`` for every nested value of a schema mapping."""
    for key, value in node.items():
        if key == "properties" and isinstance(value, Mapping):
            for name, prop in value.items():
                yield (str(name),), prop
        elif key == "items":
            yield ("[]",), value
        elif isinstance(value, list):
            for index, item in enumerate(value):
                yield (f"{key}[{index}]",), item
        elif isinstance(value, Mapping):
            yield (str(key),), value


def _walk(
    node: Any,
    document: Any,
    refs: frozenset[str],
    ids: frozenset[int],
    path: tuple[str, ...],
    found: list[PathCycle],
) -> None:
    if not isinstance(node, Mapping):
        return
    if id(node) in ids:
        found.append(PathCycle(ref="#", path=list(path)))
        return
    ids = ids | {id(node)}

    if is_reference(node):
        ref = node["$ref"]
        if ref in refs:
            found.append(PathCycle(ref=ref, path=list(path)))
            return
        refs = refs | {ref}
        if document is not None:
            target = resolve_reference(ref, document)
            if isinstance(target, Mapping) and id(target) in ids:
                found.append(PathCycle(ref=ref, path=list(path)))
            elif target is not None:
                _walk(target, document, refs, ids, path, found)
            return

    for segments, child in _children(node):
        _walk(child, document, refs, ids, path + segments, found)


def break_circular_references(schema: Any, document: Any = None) -> Any:
    """Return a copy of *schema* with path-circular references replaced.

    With a *document*, resolvable references are inlined and a reference
    that repeats along the current path becomes
    ``{"type": "circular", "ref": <ref>}``. Without one, references are kept
    as-is and only literal repeats inside *schema* are replaced. The input
    is never mutated.
    """
    return _break(schema, document, frozenset())


def _break(node: Any, document: Any, refs: frozenset[str]) -> Any:
    if isinstance(node, list):
        return [_break(item, document, refs) for item in node]
    if not isinstance(node, Mapping):
        return node

    if is_reference(node):
        ref = node["$ref"]
        if ref in refs:
            return {"type": CIRCULAR_TYPE, "ref": ref}
        refs = refs | {ref}
        target: Optional[Any] = resolve_reference(ref, document) if document is not None else None
        if target is not None:
            return _break(target, document, refs)

    return {key: _break(value, document, refs) for key, value in node.items()}


def is_circular_marker(schema: Any) -> bool:
    """``True`` for the placeholder left by :func:`break_circular_references`."""
    return (
        isinstance(schema, Mapping)
        and schema.get("type") == CIRCULAR_TYPE
        and isinstance(schema.get("ref"), str)
    )
