"""Schema Translation Engine -- turn OpenAPI Schema Objects into generated code.

This sub-package takes a Schema Dictionary (name to Schema Object, built by
:func:`~specnext.document.extract_schema_dictionary`) and produces plain
strings and records for a file-generation orchestrator:

Typical usage::

    from specnext.schema import (
        generate_type_declarations,
        generate_validation_module,
        detect_circular_references,
    )

    types_ts = generate_type_declarations(dictionary)
    schemas_ts = generate_validation_module(dictionary)
    circular = detect_circular_references(dictionary)

Sub-modules:

* :mod:`~specnext.schema.nodes` -- classification into a closed set of
  :class:`~specnext.schema.nodes.SchemaKind` shapes.
* :mod:`~specnext.schema.names` -- identifier normalization.
* :mod:`~specnext.schema.refs` -- ``$ref`` resolution helpers.
* :mod:`~specnext.schema.typescript` -- TypeScript type expressions.
* :mod:`~specnext.schema.validation` -- zod validation expressions.
* :mod:`~specnext.schema.cycles` -- dictionary-level and path-scoped
  cycle detection.
* :mod:`~specnext.schema.forms` -- UI input-kind inference and form fields.
* :mod:`~specnext.schema.stats` -- statistics and the dependency graph.
* :mod:`~specnext.schema.compose` -- allOf merging, simplification,
  flattening.
* :mod:`~specnext.schema.mock` -- mock data generation.
* :mod:`~specnext.schema.docs` -- documentation extraction.
"""

from specnext.schema.compose import flatten_schema, merge_all_of, merge_schemas, simplify_schema
from specnext.schema.cycles import (
    break_circular_references,
    detect_circular_references,
    detect_path_cycles,
)
from specnext.schema.docs import describe_schema_type, extract_documentation, schema_to_markdown
from specnext.schema.forms import determine_input_kind, extract_form_fields, extract_ui_hints
from specnext.schema.mock import generate_mock_data
from specnext.schema.names import to_pascal_case, type_name, validator_name
from specnext.schema.nodes import SchemaKind, SchemaNode, parse_schema
from specnext.schema.refs import (
    dereference,
    extract_schema_name,
    find_unresolved_references,
    follow_reference,
    resolve_reference,
)
from specnext.schema.stats import build_dependency_graph, compute_schema_statistics, emission_order
from specnext.schema.typescript import (
    generate_type_declarations,
    request_body_to_type,
    response_to_type,
    schema_to_declaration,
    to_typescript_type,
)
from specnext.schema.validation import generate_validation_module, to_validation_expression

__all__ = [
    "SchemaKind",
    "SchemaNode",
    "break_circular_references",
    "build_dependency_graph",
    "compute_schema_statistics",
    "dereference",
    "describe_schema_type",
    "detect_circular_references",
    "detect_path_cycles",
    "determine_input_kind",
    "emission_order",
    "extract_documentation",
    "extract_form_fields",
    "extract_schema_name",
    "extract_ui_hints",
    "find_unresolved_references",
    "flatten_schema",
    "follow_reference",
    "generate_mock_data",
    "generate_type_declarations",
    "generate_validation_module",
    "merge_all_of",
    "merge_schemas",
    "parse_schema",
    "request_body_to_type",
    "resolve_reference",
    "response_to_type",
    "schema_to_declaration",
    "schema_to_markdown",
    "simplify_schema",
    "to_pascal_case",
    "to_typescript_type",
    "to_validation_expression",
    "type_name",
    "validator_name",
]
