"""Exception hierarchy for specnext.

All exceptions inherit from :class:`SpecnextError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specnext.exit_codes`.
The translation engine itself degrades gracefully (``"any"``, ``None``) and
only raises :class:`UnresolvedReferenceError` when strict reference checking
is switched on.

Subclass hierarchy::

    SpecnextError (exit 1)
    +-- ConfigError               (exit 2)
    +-- SpecParseError            (exit 7)
    +-- SchemaTranslationError    (exit 8)
        +-- UnresolvedReferenceError
"""

from specnext.exit_codes import (
    EXIT_CONFIG_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_TRANSLATION_ERROR,
)


class SpecnextError(Exception):
    """Base exception for all specnext errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(SpecnextError):
    """Raised for configuration problems (invalid JSON, bad environment values)."""

    exit_code = EXIT_CONFIG_ERROR


class SpecParseError(SpecnextError):
    """Raised when an OpenAPI/Swagger document cannot be parsed or has no recognizable version."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SchemaTranslationError(SpecnextError):
    """Raised when a schema cannot be translated and the caller asked for strictness."""

    exit_code = EXIT_TRANSLATION_ERROR


class UnresolvedReferenceError(SchemaTranslationError):
    """Raised for a ``$ref`` that does not resolve, under strict reference checking.

    Args:
        ref: The reference string that failed to resolve.
    """

    def __init__(self, ref: str):
        super().__init__(f"Unresolved reference: {ref}")
        self.ref = ref
