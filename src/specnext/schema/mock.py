"""Mock/test data generation from Schema Objects.

Without a seed every value is canonical (first enum member, lower bounds,
fixed format samples), so the same schema always yields the same data.
With a seed, a private :class:`random.Random` picks values inside the
schema's constraints and runs are reproducible.
"""

from __future__ import annotations

import copy
import logging
import math
import random
import string
from collections.abc import Mapping
from typing import Any, Optional

from specnext.models import MockOptions
from specnext.schema.compose import merge_all_of
from specnext.schema.nodes import SchemaKind, parse_schema, required_names
from specnext.schema.refs import follow_reference, is_reference

logger = logging.getLogger(__name__)

FORMAT_SAMPLES: dict[str, str] = {
    "email": "user@example.com",
    "uri": "https://example.com",
    "url": "https://example.com",
    "hostname": "example.com",
    "uuid": "550e8400-e29b-41d4-a716-446655440000",
    "date": "2024-01-01",
    "date-time": "2024-01-01T00:00:00Z",
    "time": "00:00:00",
    "ipv4": "192.168.1.1",
    "ipv6": "2001:0db8:85a3:0000:0000:8a2e:0370:7334",
    "password": "********",
    "byte": "U3dhZ2dlciByb2Nrcw==",
    "binary": "",
    "color": "#000000",
}

_CANONICAL_STRING = "string"


def generate_mock_data(
    schema: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
    options: Optional[MockOptions] = None,
) -> Any:
    """Produce a sample value that satisfies *schema*.

    Args:
        schema: The schema (or reference) to generate data for.
        dictionary: Schema Dictionary used to follow references.
        options: Seed, example usage, depth limit, optional properties.

    Returns:
        A JSON-compatible value. ``None`` is returned for circular
        references, unresolved references and anything nested deeper than
        :attr:`~specnext.models.MockOptions.max_depth`.

    Example::

        >>> generate_mock_data({"type": "object", "required": ["id"],
        ...                     "properties": {"id": {"type": "integer", "minimum": 1}}})
        {'id': 1}
    """
    return _MockGenerator(dictionary, options or MockOptions()).generate(schema, frozenset(), 0)


class _MockGenerator:
    def __init__(self, dictionary: Optional[Mapping[str, Any]], options: MockOptions) -> None:
        self.dictionary = dictionary
        self.options = options
        self.rng: Optional[random.Random] = (
            random.Random(options.seed) if options.seed is not None else None
        )

    def generate(self, schema: Any, refs: frozenset[str], depth: int) -> Any:
        if not isinstance(schema, Mapping):
            return None
        if depth >= self.options.max_depth:
            logger.debug("Mock generation stopped at depth %d", depth)
            return None

        if is_reference(schema):
            ref = schema["$ref"]
            if ref in refs:
                return None
            target = follow_reference(schema, self.dictionary) if self.dictionary is not None else None
            if target is None:
                logger.warning("Cannot generate mock data for unresolved reference %s", ref)
                return None
            return self.generate(target, refs | {ref}, depth)

        if self.options.use_examples:
            if "example" in schema:
                return copy.deepcopy(schema["example"])
            examples = schema.get("examples")
            if isinstance(examples, list) and examples:
                return copy.deepcopy(examples[0])

        values = schema.get("enum")
        if isinstance(values, list) and values:
            return copy.deepcopy(self.rng.choice(values) if self.rng else values[0])

        if isinstance(schema.get("allOf"), list):
            merged = merge_all_of(schema, self.dictionary)
            return self.generate(merged, refs, depth)
        for keyword in ("oneOf", "anyOf"):
            members = schema.get(keyword)
            if isinstance(members, list) and members:
                return self.generate(members[0], refs, depth)

        node = parse_schema(schema)
        if node.kind is SchemaKind.ARRAY:
            return self._array(schema, refs, depth)
        if node.kind in (SchemaKind.OBJECT, SchemaKind.EMPTY):
            return self._object(schema, refs, depth)
        if node.type == "string" or (node.type is None and node.format in FORMAT_SAMPLES):
            return self._string(schema)
        if node.type in ("integer", "number"):
            return self._number(schema, integer=node.type == "integer")
        if node.type == "boolean":
            return self.rng.random() < 0.5 if self.rng else True
        return None

    # -- scalars ---------------------------------------------------------

    def _string(self, schema: Mapping[str, Any]) -> str:
        fmt = schema.get("format")
        if isinstance(fmt, str) and fmt in FORMAT_SAMPLES:
            return FORMAT_SAMPLES[fmt]

        min_length = schema.get("minLength")
        max_length = schema.get("maxLength")
        low = min_length if isinstance(min_length, int) else 0
        high = max_length if isinstance(max_length, int) else None

        if self.rng:
            upper = high if high is not None else max(low, 1) + 10
            length = self.rng.randint(max(low, min(1, upper)), max(upper, low))
            return "".join(self.rng.choice(string.ascii_lowercase) for _ in range(length))

        value = _CANONICAL_STRING
        if len(value) < low:
            value = value + "x" * (low - len(value))
        if high is not None:
            value = value[:high]
        return value

    def _number(self, schema: Mapping[str, Any], integer: bool) -> Any:
        multiple_of = schema.get("multipleOf")
        step = multiple_of if _is_number(multiple_of) and multiple_of > 0 else 1
        low, high = _bounds(schema, step)

        if self.rng:
            lo = low if low is not None else (min(0, high) if high is not None else 0)
            hi = high if high is not None else lo + 100
            if integer:
                value: Any = self.rng.randint(math.ceil(lo), max(math.ceil(lo), math.floor(hi)))
            else:
                value = round(self.rng.uniform(lo, hi), 2)
        elif low is not None:
            value = low
        elif high is not None and high < 0:
            value = high
        else:
            value = 0

        if _is_number(multiple_of) and multiple_of > 0:
            value = math.ceil(value / multiple_of) * multiple_of
            if high is not None and value > high:
                value -= multiple_of
        if integer:
            return int(value)
        return value

    # -- containers ------------------------------------------------------

    def _array(self, schema: Mapping[str, Any], refs: frozenset[str], depth: int) -> list[Any]:
        min_items = schema.get("minItems")
        max_items = schema.get("maxItems")
        low = min_items if isinstance(min_items, int) else 1
        high = max_items if isinstance(max_items, int) else None

        if self.rng:
            upper = high if high is not None else low + 3
            count = self.rng.randint(min(low, upper), max(low, upper))
        else:
            count = low if high is None else min(low, high)

        items = schema.get("items")
        return [self.generate(items, refs, depth + 1) for _ in range(count)]

    def _object(self, schema: Mapping[str, Any], refs: frozenset[str], depth: int) -> dict[str, Any]:
        result: dict[str, Any] = {}
        properties = schema.get("properties")
        required = required_names(schema)
        if isinstance(properties, Mapping):
            for name, prop in properties.items():
                if name in required or self.options.include_optional:
                    result[name] = self.generate(prop, refs, depth + 1)
            return result

        additional = schema.get("additionalProperties")
        if isinstance(additional, Mapping) and additional:
            result["key"] = self.generate(additional, refs, depth + 1)
        return result


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _bounds(schema: Mapping[str, Any], step: Any) -> tuple[Any, Any]:
    """Inclusive ``(low, high)`` bounds, folding in both exclusive-bound styles."""
    low = schema.get("minimum") if _is_number(schema.get("minimum")) else None
    high = schema.get("maximum") if _is_number(schema.get("maximum")) else None

    exclusive_min = schema.get("exclusiveMinimum")
    if exclusive_min is True and low is not None:
        low = low + step
    elif _is_number(exclusive_min):
        low = exclusive_min + step

    exclusive_max = schema.get("exclusiveMaximum")
    if exclusive_max is True and high is not None:
        high = high - step
    elif _is_number(exclusive_max):
        high = exclusive_max - step
    return low, high
