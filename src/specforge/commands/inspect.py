"""Inspect commands -- examine what the engines derive from a specification.

Provides the ``specforge inspect`` sub-command group with read-only views
over a (merged) specification: its operations, the resolved ``x-cache``,
``x-ratelimit``, ``x-retry`` and security configuration per operation,
and the type descriptors projected for every schema property.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from specforge.commands.spec import load_merged
from specforge.models import (
    CacheConfiguration,
    RateLimitConfiguration,
    ResolvedExtensions,
    RetryConfiguration,
)
from specforge.output import OutputFormat, format_response, get_output, info


inspect_app = typer.Typer(no_args_is_help=True)


@inspect_app.command("operations")
def inspect_operations(
    source: Path = typer.Argument(help="Base specification file."),
) -> None:
    """List every operation in the merged specification.

    Deprecated operations are hidden when the marker file sets
    ``include_deprecated`` to ``false``.

    Example::

        specforge inspect operations specs/Petstore.yaml
    """
    result, config = load_merged(source)
    assert result.document is not None
    document = result.document

    rows: list[list[str]] = []
    for op in document.iter_operations():
        deprecated = op.operation.get("deprecated") is True
        if deprecated and not config.include_deprecated:
            continue
        rows.append([
            op.method.value.upper(),
            op.path,
            op.operation_id or "-",
            ", ".join(op.tags),
            "Yes" if deprecated else "",
        ])

    title = document.info.get("title") or source.name
    get_output().print_table(
        ["Method", "Path", "Operation ID", "Tags", "Deprecated"],
        rows,
        title=f"{title} -- Operations ({len(rows)})",
    )


def _cache_summary(cache: Optional[CacheConfiguration]) -> str:
    if cache is None:
        return "-"
    if not cache.enabled:
        return "off"
    label = f"{cache.type.value} {cache.expiration_seconds}s"
    return f"{label} ({cache.policy})" if cache.policy else label


def _rate_limit_summary(rate_limit: Optional[RateLimitConfiguration]) -> str:
    if rate_limit is None:
        return "-"
    if not rate_limit.enabled:
        return "off"
    label = f"{rate_limit.permit_limit}/{rate_limit.window_seconds}s {rate_limit.algorithm.value}"
    return f"{label} ({rate_limit.policy})" if rate_limit.policy else label


def _retry_summary(retry: Optional[RetryConfiguration]) -> str:
    if retry is None:
        return "-"
    if not retry.enabled:
        return "off"
    label = f"{retry.max_attempts}x {retry.backoff_type.value}"
    if retry.circuit_breaker_enabled:
        label += " +cb"
    return label


def _security_summary(resolved: ResolvedExtensions) -> str:
    security = resolved.security
    if security.allow_anonymous:
        return "anonymous"
    if not security.authentication_required:
        return "-"
    details = security.schemes or [r.scheme_name for r in security.requirements]
    return f"{security.source.value}: {', '.join(details)}" if details else security.source.value


@inspect_app.command("extensions")
def inspect_extensions(
    source: Path = typer.Argument(help="Base specification file."),
    operation_id: Optional[str] = typer.Option(
        None, "--operation", "-O", help="Show a single operation by operationId."
    ),
) -> None:
    """Show resolved cache, rate-limit, retry and security settings.

    Extension values are inherited from the document, then the path item,
    then the operation, with the most specific level winning field by
    field. ``--json`` prints the complete resolved configuration.

    Example::

        specforge inspect extensions specs/Petstore.yaml
        specforge --json inspect extensions api.yaml --operation listPets
    """
    from specforge.exceptions import InvalidUsageError
    from specforge.extensions import (
        has_caching,
        has_rate_limiting,
        has_retry,
        resolve_extensions,
    )

    result, _ = load_merged(source)
    assert result.document is not None
    document = result.document

    resolved = resolve_extensions(document)
    if operation_id is not None:
        resolved = [r for r in resolved if r.operation_id == operation_id]
        if not resolved:
            raise InvalidUsageError(f"No operation with operationId '{operation_id}'")

    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response([r.model_dump(mode="json") for r in resolved])
        return

    features = [
        name
        for name, enabled in (
            ("caching", has_caching(document)),
            ("rate limiting", has_rate_limiting(document)),
            ("retry", has_retry(document)),
        )
        if enabled
    ]
    info(f"Policies in use: {', '.join(features) if features else 'none'}")

    output.print_table(
        ["Operation", "Cache", "Rate limit", "Retry", "Security"],
        [
            [
                r.operation_id or f"{r.method.value.upper()} {r.path}",
                _cache_summary(r.cache),
                _rate_limit_summary(r.rate_limit),
                _retry_summary(r.retry),
                _security_summary(r),
            ]
            for r in resolved
        ],
        title=f"{source.name} -- Extensions",
    )


@inspect_app.command("types")
def inspect_types(
    source: Path = typer.Argument(help="Base specification file."),
    schema: Optional[str] = typer.Option(
        None, "--schema", help="Only show this component schema."
    ),
    convert_dates: Optional[bool] = typer.Option(
        None,
        "--convert-dates/--no-convert-dates",
        help="Project date strings to Date (default: from marker file).",
    ),
) -> None:
    """Show the type descriptor projected for every schema property.

    Projection options come from the marker file (``convert_dates``,
    ``nullable_as_union``) unless overridden on the command line. With
    ``--json`` each row also carries the classified schema shape.

    Example::

        specforge inspect types specs/Petstore.yaml
        specforge inspect types api.yaml --schema Pet --convert-dates
    """
    from specforge.exceptions import InvalidUsageError
    from specforge.parser.schema import properties
    from specforge.projector import (
        ProjectionOptions,
        classify_schema,
        project_type,
        shape_adapter,
    )

    result, config = load_merged(source)
    assert result.document is not None
    schemas = result.document.schemas

    if schema is not None:
        if schema not in schemas:
            raise InvalidUsageError(f"Unknown schema '{schema}'")
        schemas = {schema: schemas[schema]}

    options = ProjectionOptions(
        convert_dates=config.convert_dates if convert_dates is None else convert_dates,
        nullable_as_union=config.nullable_as_union,
    )

    records: list[dict] = []
    for name, definition in schemas.items():
        required = definition.get("required", []) if isinstance(definition, dict) else []
        for prop_name, prop in properties(definition).items():
            is_required = isinstance(required, list) and prop_name in required
            records.append({
                "schema": name,
                "property": prop_name,
                "type": project_type(prop, options, is_required=is_required),
                "required": is_required,
                "shape": shape_adapter.dump_python(classify_schema(prop), mode="json"),
            })

    output = get_output()
    if output.format == OutputFormat.JSON:
        format_response(records)
        return

    output.print_table(
        ["Schema", "Property", "Type", "Required"],
        [
            [r["schema"], r["property"], r["type"], "Yes" if r["required"] else ""]
            for r in records
        ],
        title=f"{source.name} -- Types",
    )
