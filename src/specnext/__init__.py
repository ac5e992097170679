"""specnext -- translate OpenAPI schemas into TypeScript types, zod validators and form hints.

This package is the schema layer of an OpenAPI-to-Next.js generator. A
caller reads an OpenAPI 3.x or Swagger 2.0 document, builds the Schema
Dictionary, and asks the engine for strings and records; writing files is
left to the caller.

Typical workflow::

    from specnext.document import parse_document, extract_schema_dictionary
    from specnext.schema import generate_type_declarations

    document = parse_document(text)
    dictionary = extract_schema_dictionary(document)
    print(generate_type_declarations(dictionary))

Modules:
    schema: The Schema Translation Engine.
    document: Document parsing and Schema Dictionary extraction.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration with precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr diagnostics rendering with Rich support.
"""

__version__ = "0.1.0"
