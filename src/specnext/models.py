"""Canonical Pydantic models shared across all specnext modules.

This is the single source of truth for data shapes in the project. The models
fall into two groups:

**Configuration models** -- loaded from JSON config files and environment
variables by :mod:`specnext.config`:
    :class:`TypeOptions`, :class:`ValidationOptions`, :class:`FormOptions`,
    :class:`MockOptions`, and :class:`EngineConfig`.

**Engine output records** -- plain data returned by the translation engine
and consumed by the (external) file-generation orchestrator:
    :class:`InputKind`, :class:`UIHints`, :class:`FormField`,
    :class:`PathCycle`, :class:`DependencyNode`, :class:`SchemaStatistics`,
    :class:`SchemaDocumentation`, and :class:`FlattenedField`.

All models use Pydantic v2. Records never carry file paths; the engine only
returns values.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# --- Engine configuration ---


class TypeOptions(BaseModel):
    """Format-specific overrides for TypeScript type conversion."""

    int64_type: str = Field(
        default="bigint", description="TypeScript type for integer/int64"
    )
    binary_type: str = Field(
        default="Blob", description="TypeScript type for string/binary and string/byte"
    )


class ValidationOptions(BaseModel):
    """Options for zod validation-expression generation.

    ``strict`` only has an effect on object schemas that declare
    ``additionalProperties: false``; those get a ``.strict()`` modifier.
    ``custom_validators`` maps an unrecognised ``format`` name to the source
    of a refine callback, e.g. ``{"phone": "isPhoneNumber"}``.
    """

    strict: bool = False
    coerce: bool = False
    include_descriptions: bool = True
    int64_as_bigint: bool = Field(
        default=True, description="Validate integer/int64 as a coerced bigint"
    )
    custom_validators: dict[str, str] = Field(default_factory=dict)
    import_path: str = Field(default="zod", description="Module the z namespace is imported from")


class FormOptions(BaseModel):
    """Thresholds and extension names for UI input-kind inference."""

    ui_extension: str = Field(
        default="x-ui-component",
        description="Schema extension field that overrides the inferred input kind",
    )
    multiline_threshold: int = Field(
        default=255, description="maxLength above which strings become multi-line"
    )
    radio_max_options: int = Field(
        default=3, description="Largest enum rendered as a radio group"
    )
    include_read_only: bool = Field(
        default=False, description="Emit form fields for readOnly properties"
    )


class MockOptions(BaseModel):
    """Options for mock/test data generation.

    A ``seed`` of ``None`` produces canonical values (first enum member,
    lower bounds, fixed sample strings); an integer seed drives a
    :class:`random.Random` so runs are reproducible.
    """

    seed: Optional[int] = None
    use_examples: bool = True
    max_depth: int = Field(default=5, ge=1)
    include_optional: bool = True


class EngineConfig(BaseModel):
    """Effective engine configuration resolved by :func:`specnext.config.resolve_config`.

    Unknown keys are preserved in ``model_extra`` so that an orchestrator
    can keep its own settings in the same config file.
    """

    model_config = ConfigDict(extra="allow")

    strict_references: bool = Field(
        default=False,
        description="Raise UnresolvedReferenceError instead of degrading to any",
    )
    types: TypeOptions = Field(default_factory=TypeOptions)
    validation: ValidationOptions = Field(default_factory=ValidationOptions)
    forms: FormOptions = Field(default_factory=FormOptions)
    mock: MockOptions = Field(default_factory=MockOptions)


# --- Engine output records ---


class InputKind(str, enum.Enum):
    """UI input kinds inferred for a form field."""

    TEXT = "text"
    TEXTAREA = "textarea"
    NUMBER = "number"
    RANGE = "range"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    SELECT = "select"
    DATE = "date"
    DATETIME = "datetime"
    TIME = "time"
    EMAIL = "email"
    URL = "url"
    PASSWORD = "password"
    FILE = "file"
    COLOR = "color"


class UIHints(BaseModel):
    """Presentation hints for one schema property.

    ``input_kind`` is usually an :class:`InputKind` value; an explicit
    UI-hint extension may name a custom component instead.
    """

    input_kind: str
    label: str
    placeholder: Optional[str] = None
    help_text: Optional[str] = None
    order: Optional[int] = None
    hidden: bool = False
    read_only: bool = False
    write_only: bool = False
    deprecated: bool = False
    extensions: dict[str, Any] = Field(default_factory=dict)


class FormField(BaseModel):
    """A single form field extracted from an object schema."""

    name: str
    label: str
    input_kind: str
    required: bool = False
    nullable: bool = False
    schema_type: Optional[str] = None
    schema_format: Optional[str] = None
    description: Optional[str] = None
    placeholder: Optional[str] = None
    default: Any = None
    options: list[Any] = Field(default_factory=list)
    constraints: dict[str, Any] = Field(default_factory=dict)


class PathCycle(BaseModel):
    """A reference revisited along a single root-to-node path of one schema."""

    ref: str
    path: list[str] = Field(default_factory=list)


class DependencyNode(BaseModel):
    """One named schema in the dependency graph."""

    name: str
    dependencies: list[str] = Field(default_factory=list)
    dependents: list[str] = Field(default_factory=list)
    complexity: int = 1
    circular: bool = False


class SchemaStatistics(BaseModel):
    """Aggregate statistics over a Schema Dictionary."""

    total_schemas: int = 0
    kinds: dict[str, int] = Field(default_factory=dict)
    total_properties: int = 0
    max_depth: int = 0
    circular_schemas: list[str] = Field(default_factory=list)
    unresolved_references: int = 0


class SchemaDocumentation(BaseModel):
    """Documentation fields pulled from a schema."""

    description: str = ""
    title: str = ""
    example: Any = None
    examples: list[Any] = Field(default_factory=list)
    deprecated: bool = False
    read_only: bool = False
    write_only: bool = False
    format: Optional[str] = None
    default: Any = None
    constraints: dict[str, Any] = Field(default_factory=dict)


class FlattenedField(BaseModel):
    """A leaf of a flattened schema, keyed by its dotted path."""

    path: str
    segments: list[str] = Field(default_factory=list)
    required: bool = False
    schema_: dict[str, Any] = Field(default_factory=dict, alias="schema")

    model_config = {"populate_by_name": True}
