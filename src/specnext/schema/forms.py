"""Form-field and UI-hint extraction.

:func:`determine_input_kind` is a pure decision table evaluated top to
bottom; the first matching rule wins:

====  ==================================================  ============
Rule  Condition                                           Kind
====  ==================================================  ============
1     UI extension (``x-ui-component``) present           its value
2     ``format`` binary/byte                              file
3     ``format`` date / date-time / time                  date/datetime/time
4     ``format`` email                                    email
5     ``format`` uri/url                                  url
6     ``format`` password, or name contains "password"    password
7     non-empty ``enum``: <= 3 values / more              radio / select
8     ``type`` boolean                                    checkbox
9     long string or descriptive field name               textarea
10    ``format`` color, or name contains "color"          color
11    numeric with both ``minimum`` and ``maximum``       range
12    ``type`` number/integer                             number
13    anything else                                       text
====  ==================================================  ============

The ordering matters: an enum of booleans renders as radio/select, and a
bounded number renders as a slider rather than a plain numeric input.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Optional

from specnext.models import FormField, FormOptions, InputKind, UIHints
from specnext.schema.compose import merge_all_of
from specnext.schema.names import humanize
from specnext.schema.nodes import parse_schema, required_names
from specnext.schema.refs import follow_reference, is_reference

logger = logging.getLogger(__name__)

_DATE_KINDS = {
    "date": InputKind.DATE,
    "date-time": InputKind.DATETIME,
    "time": InputKind.TIME,
}

_MULTILINE_NAME_HINTS = ("description", "note", "comment", "content", "body")
_NUMERIC_TYPES = ("number", "integer")

_CONSTRAINT_KEYS = {
    "minimum": "min",
    "maximum": "max",
    "multipleOf": "step",
    "minLength": "minLength",
    "maxLength": "maxLength",
    "pattern": "pattern",
    "minItems": "minItems",
    "maxItems": "maxItems",
}


def determine_input_kind(
    schema: Any,
    field_name: str = "",
    options: Optional[FormOptions] = None,
) -> str:
    """Choose the UI input kind for a property.

    Args:
        schema: The property schema (already resolved if it was a reference).
        field_name: The property name; several rules look at it.
        options: Thresholds and the UI extension key.

    Returns:
        An :class:`~specnext.models.InputKind` value, or whatever string
        the UI extension names.

    Example::

        >>> determine_input_kind({"type": "number", "minimum": 0, "maximum": 100}, "volume")
        'range'
    """
    options = options or FormOptions()
    if not isinstance(schema, Mapping):
        return InputKind.TEXT.value

    override = schema.get(options.ui_extension)
    if isinstance(override, str) and override:
        return override

    node = parse_schema(schema)
    fmt = node.format
    schema_type = node.type
    name = field_name.lower()

    if fmt in ("binary", "byte"):
        return InputKind.FILE.value
    if fmt in _DATE_KINDS:
        return _DATE_KINDS[fmt].value
    if fmt == "email":
        return InputKind.EMAIL.value
    if fmt in ("uri", "url"):
        return InputKind.URL.value
    if fmt == "password" or "password" in name:
        return InputKind.PASSWORD.value

    values = schema.get("enum")
    if isinstance(values, list) and values:
        if len(values) <= options.radio_max_options:
            return InputKind.RADIO.value
        return InputKind.SELECT.value

    if schema_type == "boolean":
        return InputKind.CHECKBOX.value

    max_length = schema.get("maxLength")
    long_string = (
        schema_type == "string"
        and isinstance(max_length, int)
        and max_length > options.multiline_threshold
    )
    if long_string or any(hint in name for hint in _MULTILINE_NAME_HINTS):
        return InputKind.TEXTAREA.value

    if fmt == "color" or "color" in name:
        return InputKind.COLOR.value

    if schema_type in _NUMERIC_TYPES:
        if schema.get("minimum") is not None and schema.get("maximum") is not None:
            return InputKind.RANGE.value
        return InputKind.NUMBER.value

    return InputKind.TEXT.value


def _extensions(schema: Mapping[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in schema.items() if key.startswith("x-ui-")}


def extract_ui_hints(
    schema: Any,
    field_name: str = "",
    options: Optional[FormOptions] = None,
) -> UIHints:
    """Collect presentation hints for a property.

    ``x-ui-label``, ``x-ui-placeholder``, ``x-ui-help``, ``x-ui-order`` and
    ``x-ui-hidden`` override the values derived from ``title``,
    ``description`` and the field name. All ``x-ui-*`` extensions are
    returned verbatim in :attr:`~specnext.models.UIHints.extensions`.
    """
    options = options or FormOptions()
    raw: Mapping[str, Any] = schema if isinstance(schema, Mapping) else {}

    title = raw.get("title")
    label = raw.get("x-ui-label") or (title if isinstance(title, str) and title else humanize(field_name))
    description = raw.get("description")
    order = raw.get("x-ui-order")

    return UIHints(
        input_kind=determine_input_kind(raw, field_name, options),
        label=label,
        placeholder=raw.get("x-ui-placeholder") or _placeholder(raw),
        help_text=raw.get("x-ui-help") or (description if isinstance(description, str) else None),
        order=order if isinstance(order, int) and not isinstance(order, bool) else None,
        hidden=raw.get("x-ui-hidden") is True,
        read_only=raw.get("readOnly") is True,
        write_only=raw.get("writeOnly") is True,
        deprecated=raw.get("deprecated") is True,
        extensions=_extensions(raw),
    )


def _placeholder(schema: Mapping[str, Any]) -> Optional[str]:
    example = schema.get("example")
    if isinstance(example, (str, int, float)) and not isinstance(example, bool):
        return str(example)
    return None


def extract_form_fields(
    schema: Any,
    dictionary: Optional[Mapping[str, Any]] = None,
    options: Optional[FormOptions] = None,
) -> list[FormField]:
    """Build form fields for every property of an object schema.

    A top-level reference is followed and ``allOf`` members are merged
    first. Property references are followed through *dictionary*.
    ``readOnly`` properties are skipped unless
    :attr:`~specnext.models.FormOptions.include_read_only` is set, and
    hidden fields (``x-ui-hidden``) are always skipped. Fields keep
    declaration order unless ``x-ui-order`` says otherwise.

    Returns:
        The fields, or an empty list when *schema* has no properties.
    """
    options = options or FormOptions()
    resolved = follow_reference(schema, dictionary) if dictionary is not None else schema
    if not isinstance(resolved, Mapping):
        if is_reference(schema):
            logger.warning("Cannot build form for unresolved reference %s", schema["$ref"])
        return []
    resolved = merge_all_of(resolved, dictionary)

    properties = resolved.get("properties")
    if not isinstance(properties, Mapping):
        return []
    required = set(required_names(resolved))

    ordered: list[tuple[int, int, FormField]] = []
    for index, (name, prop_schema) in enumerate(properties.items()):
        prop = follow_reference(prop_schema, dictionary) if dictionary is not None else prop_schema
        if not isinstance(prop, Mapping):
            prop = {}
        if prop.get("readOnly") is True and not options.include_read_only:
            continue

        hints = extract_ui_hints(prop, name, options)
        if hints.hidden:
            continue

        node = parse_schema(prop)
        values = prop.get("enum")
        field = FormField(
            name=name,
            label=hints.label,
            input_kind=hints.input_kind,
            required=name in required,
            nullable=node.nullable,
            schema_type=node.type,
            schema_format=node.format,
            description=hints.help_text,
            placeholder=hints.placeholder,
            default=prop.get("default"),
            options=list(values) if isinstance(values, list) else [],
            constraints={
                target: prop[source] for source, target in _CONSTRAINT_KEYS.items() if source in prop
            },
        )
        sort_key = hints.order if hints.order is not None else len(properties) + index
        ordered.append((sort_key, index, field))

    ordered.sort(key=lambda entry: (entry[0], entry[1]))
    return [field for _, _, field in ordered]
