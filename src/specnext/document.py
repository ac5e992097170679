"""Parse OpenAPI/Swagger documents and build the Schema Dictionary.

This module never touches the filesystem or the network: the caller reads
the text and hands it over. It supports both JSON and YAML with automatic
format detection.

* :func:`parse_document` -- turn text into a dict.
* :func:`detect_spec_version` -- ``("openapi", "3.1.0")`` or
  ``("swagger", "2.0")``.
* :func:`extract_schema_dictionary` -- ``components.schemas`` (OpenAPI 3)
  or ``definitions`` (Swagger 2).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

import yaml

from specnext.exceptions import SpecParseError

logger = logging.getLogger(__name__)


def parse_document(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless *hint* is ``'yaml'``), then falls back to
    YAML. Valid JSON is also valid YAML, but JSON parsing is stricter and
    faster.

    Args:
        content: The raw document text.
        hint: Optional format hint (``'json'`` or ``'yaml'``).

    Returns:
        The parsed document.

    Raises:
        SpecParseError: If the content is empty, cannot be parsed as either
            format, or is not a mapping at the top level.
    """
    if not content.strip():
        raise SpecParseError("Document is empty")

    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc

    try:
        return _require_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Document must be a JSON/YAML object (got {got})")
    return result


def detect_spec_version(document: Mapping[str, Any]) -> tuple[str, str]:
    """Return ``(family, version)`` for a Swagger 2.0 or OpenAPI 3.x document.

    Raises:
        SpecParseError: If neither ``swagger`` nor ``openapi`` declares a
            supported version.
    """
    if "swagger" in document:
        version = str(document["swagger"])
        if version.startswith("2."):
            return "swagger", version
        raise SpecParseError(f"Unsupported Swagger version: {version}")

    openapi_version = document.get("openapi")
    if openapi_version is None:
        raise SpecParseError(
            "Missing 'openapi' or 'swagger' field. Is this an OpenAPI document?"
        )
    version = str(openapi_version)
    if version.startswith("3."):
        return "openapi", version
    raise SpecParseError(
        f"Unsupported OpenAPI version: {version}. Only 2.0 and 3.x are supported."
    )


def extract_schema_dictionary(document: Mapping[str, Any]) -> dict[str, Any]:
    """Build the Schema Dictionary (name to schema) from *document*.

    Uses ``components.schemas`` when present, otherwise ``definitions``.
    Declaration order is preserved. A document without either yields an
    empty dictionary.
    """
    components = document.get("components")
    if isinstance(components, Mapping) and isinstance(components.get("schemas"), Mapping):
        return dict(components["schemas"])
    definitions = document.get("definitions")
    if isinstance(definitions, Mapping):
        return dict(definitions)
    logger.debug("Document declares no named schemas")
    return {}
