"""specforge -- Merge, split, validate, and resolve OpenAPI 3.x descriptions.

This package compiles REST API descriptions into the inputs a code generator
needs. It reconciles multi-file specifications into one document (or splits
a large one into cohesive part files), runs a tiered battery of structural
and convention diagnostics, and resolves the ``x-cache-*``, ``x-ratelimit-*``,
``x-retry-*`` and security extensions into per-operation configuration.

Typical workflow::

    specforge spec merge specs/Petstore.yaml -o merged.yaml
    specforge spec validate merged.yaml --strictness strict
    specforge inspect extensions merged.yaml

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware global config and per-target marker files.
    diagnostics: Diagnostic builders and list helpers.
    rules: Stable rule identifiers.
    projector: Schema fragment to type descriptor projection.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
