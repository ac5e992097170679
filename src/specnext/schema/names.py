"""Identifier normalisation for generated TypeScript.

Schema names in OpenAPI documents are free-form strings (``API_Response``,
``user-profile.v2``, ``200Response``). Generated code needs them as valid,
PascalCase TypeScript identifiers, and property names need quoting when they
are not valid identifiers.

PascalCase here is *acronym-preserving*: each word gets its first letter
upper-cased but the rest of the word is left alone, so ``API_Response``
becomes ``APIResponse`` rather than ``ApiResponse``.
"""

from __future__ import annotations

import re

# Prefix for names that would otherwise start with a digit.
DIGIT_PREFIX = "Schema"

_WORD_SPLIT_RE = re.compile(r"[^A-Za-z0-9]+")
_LEADING_INVALID_RE = re.compile(r"^[^A-Za-z0-9]+")
_JS_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_CAMEL_BOUNDARY_RE = re.compile(r"([a-z0-9])([A-Z])")


def to_pascal_case(name: str) -> str:
    """Convert *name* to an acronym-preserving PascalCase identifier.

    Example::

        >>> to_pascal_case("API_Response")
        'APIResponse'
        >>> to_pascal_case("user-profile.v2")
        'UserProfileV2'
        >>> to_pascal_case("200Response")
        'Schema200Response'
    """
    stripped = _LEADING_INVALID_RE.sub("", name or "")
    words = [w for w in _WORD_SPLIT_RE.split(stripped) if w]
    result = "".join(w[0].upper() + w[1:] for w in words)
    if not result:
        return "AnonymousSchema"
    if result[0].isdigit():
        result = f"{DIGIT_PREFIX}{result}"
    return result


def type_name(schema_name: str) -> str:
    """Return the TypeScript type identifier for a named schema."""
    return to_pascal_case(schema_name)


def validator_name(schema_name: str) -> str:
    """Return the validator identifier (``<Name>Schema``) for a named schema."""
    return f"{to_pascal_case(schema_name)}Schema"


def quote_literal(value: str) -> str:
    """Render *value* as a single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def safe_property_name(name: str) -> str:
    """Return *name* unchanged if it is a valid JS identifier, otherwise quote it.

    Example::

        >>> safe_property_name("createdAt")
        'createdAt'
        >>> safe_property_name("content-type")
        "'content-type'"
    """
    if _JS_IDENTIFIER_RE.match(name):
        return name
    return quote_literal(name)


def humanize(name: str) -> str:
    """Turn a property name into a display label (``firstName`` -> ``First Name``)."""
    spaced = _CAMEL_BOUNDARY_RE.sub(r"\1 \2", name)
    words = [w for w in _WORD_SPLIT_RE.split(spaced) if w]
    return " ".join(w[0].upper() + w[1:] for w in words)
