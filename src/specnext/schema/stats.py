"""Statistics and dependency-graph utilities over a Schema Dictionary.

These are diagnostics: nothing in type or validation translation depends on
them being computed, except :func:`emission_order`, which decides the order
in which a validation module declares its schemas.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterator, Mapping
from typing import Any, Optional

from specnext.models import DependencyNode, SchemaStatistics
from specnext.schema.cycles import detect_circular_references
from specnext.schema.nodes import SchemaKind, SchemaNode, parse_schema
from specnext.schema.refs import find_unresolved_references, iter_references, schema_dependencies

logger = logging.getLogger(__name__)


def iter_nodes(node: SchemaNode) -> Iterator[SchemaNode]:
    """Yield *node* and every inline node below it, pre-order."""
    yield node
    if node.items is not None:
        yield from iter_nodes(node.items)
    for _, prop in node.properties:
        yield from iter_nodes(prop)
    if isinstance(node.additional, SchemaNode):
        yield from iter_nodes(node.additional)
    for member in node.members:
        yield from iter_nodes(member)


def nesting_depth(node: SchemaNode) -> int:
    """Levels of object/array nesting; scalars and references are depth 0."""
    if node.kind is SchemaKind.OBJECT:
        children = [prop for _, prop in node.properties]
        if isinstance(node.additional, SchemaNode):
            children.append(node.additional)
        return 1 + max((nesting_depth(child) for child in children), default=0)
    if node.kind is SchemaKind.ARRAY:
        return 1 + (nesting_depth(node.items) if node.items is not None else 0)
    if node.is_composition:
        return max((nesting_depth(member) for member in node.members), default=0)
    return 0


def count_properties(node: SchemaNode) -> int:
    """Number of named properties at any nesting depth."""
    return sum(len(n.properties) for n in iter_nodes(node))


def complexity_score(schema: Any) -> int:
    """``1 + properties + reference occurrences + 2 * composition keywords + depth``."""
    node = parse_schema(schema)
    compositions = sum(1 for n in iter_nodes(node) if n.is_composition)
    references = sum(1 for _ in iter_references(schema))
    return 1 + count_properties(node) + references + 2 * compositions + nesting_depth(node)


def build_dependency_graph(dictionary: Mapping[str, Any]) -> dict[str, DependencyNode]:
    """Build the name -> :class:`~specnext.models.DependencyNode` graph.

    Dependencies are direct references to other dictionary schemas, unique,
    in the order they appear. ``dependents`` is the reverse edge list in
    document order.
    """
    circular = detect_circular_references(dictionary)
    graph = {
        name: DependencyNode(
            name=name,
            dependencies=schema_dependencies(schema, dictionary),
            complexity=complexity_score(schema),
            circular=name in circular,
        )
        for name, schema in dictionary.items()
    }
    for name, node in graph.items():
        for dependency in node.dependencies:
            graph[dependency].dependents.append(name)
    return graph


def compute_schema_statistics(
    dictionary: Mapping[str, Any],
    document: Optional[Any] = None,
) -> SchemaStatistics:
    """Aggregate counts over *dictionary*.

    Args:
        dictionary: The Schema Dictionary.
        document: Optional full document references are resolved against
            when counting unresolved references.
    """
    kinds: Counter[str] = Counter()
    total_properties = 0
    max_depth = 0
    for schema in dictionary.values():
        node = parse_schema(schema)
        kinds[node.kind.value] += 1
        total_properties += count_properties(node)
        max_depth = max(max_depth, nesting_depth(node))

    unresolved = find_unresolved_references(dictionary, document)
    if unresolved:
        logger.debug("%d unresolved reference(s)", len(unresolved))

    return SchemaStatistics(
        total_schemas=len(dictionary),
        kinds=dict(kinds),
        total_properties=total_properties,
        max_depth=max_depth,
        circular_schemas=sorted(detect_circular_references(dictionary)),
        unresolved_references=len(unresolved),
    )


def emission_order(dictionary: Mapping[str, Any]) -> list[str]:
    """Order schema names so that each one follows the schemas it references.

    Ties are broken by document order. Members of a cycle cannot all follow
    each other; within a cycle the first schema reached in document order
    comes last.
    """
    position = {name: index for index, name in enumerate(dictionary)}
    edges = {
        name: sorted(schema_dependencies(schema, dictionary), key=position.__getitem__)
        for name, schema in dictionary.items()
    }
    placed: set[str] = set()
    entered: set[str] = set()
    order: list[str] = []

    for root in dictionary:
        if root in entered:
            continue
        entered.add(root)
        stack: list[tuple[str, Iterator[str]]] = [(root, iter(edges[root]))]
        while stack:
            name, children = stack[-1]
            for child in children:
                if child not in entered:
                    entered.add(child)
                    stack.append((child, iter(edges[child])))
                    break
            else:
                stack.pop()
                if name not in placed:
                    placed.add(name)
                    order.append(name)
    return order
