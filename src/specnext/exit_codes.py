"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specnext.exceptions.SpecnextError` subclass. A
generation orchestrator that embeds the engine can turn a raised error into
a process exit status without parsing messages.
"""

EXIT_SUCCESS = 0
"""Generation completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_CONFIG_ERROR = 2
"""A configuration file or environment value was invalid."""

EXIT_SPEC_PARSE_ERROR = 7
"""The OpenAPI/Swagger document could not be parsed or validated."""

EXIT_TRANSLATION_ERROR = 8
"""A schema could not be translated under strict reference checking."""
