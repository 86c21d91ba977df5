"""Spec commands -- merge, split, analyze, and validate specifications.

Provides the ``specforge spec`` sub-command group. Every command reads
local files only, resolves the effective configuration from the marker
file next to the source (see :func:`~specforge.config.resolve_config`),
and reports findings through :mod:`specforge.output`.

Commands that block on error-severity diagnostics raise
:class:`~specforge.exceptions.DiagnosticsError`, which the entry point
maps to exit code 8.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional

import typer

from specforge.models import (
    DiagnosticMessage,
    DiagnosticSeverity,
    MarkerConfig,
    MergeResult,
    SpecificationFile,
    SplitStrategy,
)
from specforge.output import (
    debug,
    error,
    format_response,
    get_output,
    info,
    print_data,
    success,
    warning,
)


spec_app = typer.Typer(no_args_is_help=True)


# ------------------------------------------------------------------ #
# Shared helpers
# ------------------------------------------------------------------ #


def report(diagnostics: Iterable[DiagnosticMessage]) -> None:
    """Echo *diagnostics* to stderr, one line each, keeping stdout clean."""
    from specforge.diagnostics import format_diagnostic

    for d in diagnostics:
        line = format_diagnostic(d)
        if d.severity == DiagnosticSeverity.ERROR:
            error(line)
        elif d.severity == DiagnosticSeverity.WARNING:
            warning(line)
        else:
            info(line)


def load_merged(
    source: Path, strictness: Optional[str] = None
) -> tuple[MergeResult, MarkerConfig]:
    """Resolve config for *source*, then read and merge it with its parts.

    Args:
        source: Base specification file.
        strictness: ``--strictness`` flag value, if given.

    Returns:
        A ``(MergeResult, MarkerConfig)`` tuple. The result always carries a
        document.

    Raises:
        DiagnosticsError: If no merged document could be produced (missing
            or unparseable base file).
    """
    from specforge.config import resolve_config
    from specforge.diagnostics import count_by_severity
    from specforge.exceptions import DiagnosticsError
    from specforge.multipart import read_and_merge

    config = resolve_config(source, cli_strictness=strictness)
    result = read_and_merge(source, config.multipart)
    debug(f"Loaded {source} with {len(result.part_files)} part file(s)")
    if result.document is None:
        report(result.diagnostics)
        errors = count_by_severity(result.diagnostics)[DiagnosticSeverity.ERROR]
        raise DiagnosticsError(f"Could not load {source}", error_count=errors)
    return result, config


def _fail_on_errors(diagnostics: list[DiagnosticMessage], action: str) -> None:
    from specforge.diagnostics import count_by_severity
    from specforge.exceptions import DiagnosticsError

    errors = count_by_severity(diagnostics)[DiagnosticSeverity.ERROR]
    if errors:
        raise DiagnosticsError(f"{action} failed with {errors} error(s)", error_count=errors)


def _read_single(source: Path) -> SpecificationFile:
    """Read *source* without merging; raise when it cannot be parsed."""
    from specforge.exceptions import SpecParseError
    from specforge.parser import read_specification

    spec = read_specification(source)
    if spec.document is None:
        report(spec.diagnostics)
        raise SpecParseError(f"Could not parse {source}")
    return spec


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@spec_app.command("merge")
def spec_merge(
    base: Path = typer.Argument(help="Base specification file."),
    output_path: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the merged document to this file."
    ),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f", help="yaml or json (default: from --output, else yaml)."
    ),
) -> None:
    """Merge a base specification with its part files.

    Part files are discovered next to the base (``{base}_*.yaml``) or
    listed explicitly in its ``x-multipart`` block. Without ``--output``
    the merged document is printed to stdout.

    Example::

        specforge spec merge specs/Petstore.yaml -o merged.yaml
        specforge spec merge specs/Petstore.yaml --format json > merged.json
    """
    from specforge.config import write_text_atomic
    from specforge.parser import dump_document
    from specforge.parser.serializer import format_for_path

    result, _ = load_merged(base)
    report(result.diagnostics)
    _fail_on_errors(result.diagnostics, "Merge")

    assert result.document is not None
    target_format = fmt or (format_for_path(output_path.name) if output_path else "yaml")
    text = dump_document(result.document.raw, target_format)

    if output_path is None:
        print_data(text)
        return

    write_text_atomic(output_path, text)
    success(
        f"Merged {len(result.part_files)} part file(s) into {output_path} "
        f"({result.total_paths} paths, {result.total_schemas} schemas)"
    )


@spec_app.command("split")
def spec_split(
    source: Path = typer.Argument(help="Specification file to split."),
    strategy: Optional[SplitStrategy] = typer.Option(
        None,
        "--strategy",
        "-s",
        case_sensitive=False,
        help="ByTag, ByPathSegment or ByDomain (default: recommended).",
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-d", help="Directory for the split files."
    ),
    min_operations: int = typer.Option(
        1, "--min-operations", min=1, help="Fold smaller groups into 'Other'."
    ),
    no_common: bool = typer.Option(
        False, "--no-common", help="Do not extract shared components."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Preview the files without writing them."
    ),
    force: bool = typer.Option(
        False, "--force", help="Allow overwriting the source file."
    ),
) -> None:
    """Split one specification into a base file and cohesive part files.

    The base file keeps the document metadata and gains an
    ``x-multipart`` block listing the parts, so ``spec merge`` on the
    output reproduces the original paths and components.

    Example::

        specforge spec split api.yaml --output-dir specs/
        specforge spec split api.yaml --strategy ByTag --dry-run
    """
    from specforge.config import load_marker, write_text_atomic
    from specforge.exceptions import InvalidUsageError
    from specforge.multipart import split
    from specforge.parser.serializer import format_for_path

    spec = _read_single(source)
    assert spec.document is not None

    if strategy is None:
        marker = load_marker(source)
        strategy = marker.split_strategy if marker is not None else None

    result = split(
        spec.document,
        source.stem,
        strategy=strategy,
        extract_common=not no_common,
        min_operations=min_operations,
        file_format=format_for_path(source.name),
    )
    report(result.diagnostics)
    _fail_on_errors(result.diagnostics, "Split")

    target_dir = output_dir if output_dir is not None else source.parent
    rows: list[list[str]] = []
    for item in result.all_files:
        kind = "base" if item.is_base_file else "common" if item.is_common_file else "part"
        rows.append([
            item.file_name,
            kind,
            str(item.path_count),
            str(item.schema_count),
            str(item.parameter_count),
            str(item.estimated_lines),
        ])
    get_output().print_table(
        ["File", "Kind", "Paths", "Schemas", "Parameters", "Lines"],
        rows,
        title=f"{source.name} -- {result.strategy.value}",
    )

    if dry_run:
        info("Dry run: no files written.")
        return

    targets = [(target_dir / item.file_name, item.content) for item in result.all_files]
    if not force and any(path.resolve() == source.resolve() for path, _ in targets):
        raise InvalidUsageError(
            f"Splitting would overwrite {source}. Use --output-dir or --force."
        )
    for path, content in targets:
        write_text_atomic(path, content)
    success(f"Wrote {len(targets)} file(s) to {target_dir}")


@spec_app.command("analyze")
def spec_analyze(
    source: Path = typer.Argument(help="Specification file to analyse."),
) -> None:
    """Show size statistics and the recommended split strategy.

    Example::

        specforge spec analyze api.yaml
        specforge spec analyze api.yaml --json
    """
    from specforge.multipart import analyze
    from specforge.output import OutputFormat

    spec = _read_single(source)
    assert spec.document is not None
    analysis = analyze(spec.document, file_path=str(source), content=spec.content)

    output = get_output()
    if output.format == OutputFormat.JSON:
        data = analysis.model_dump(mode="json")
        data["should_split"] = analysis.should_split
        format_response(data)
        return

    format_response({
        "file": analysis.file_path,
        "lines": analysis.total_lines,
        "paths": analysis.total_paths,
        "operations": analysis.total_operations,
        "schemas": analysis.total_schemas,
        "parameters": analysis.total_parameters,
        "should_split": analysis.should_split,
        "recommended_strategy": analysis.recommended_strategy.value,
        "reason": analysis.recommended_strategy_reason,
    })
    if analysis.suggested_splits:
        output.print_table(
            ["File", "Description", "Operations", "Est. lines"],
            [
                [s.file_name, s.description, str(s.estimated_operations), str(s.estimated_lines)]
                for s in analysis.suggested_splits
            ],
            title="Suggested splits",
        )
    if analysis.shared_schemas:
        names = ", ".join(s.name for s in analysis.shared_schemas)
        info(f"Schemas shared across groups: {names}")


@spec_app.command("validate")
def spec_validate(
    source: Path = typer.Argument(help="Base specification file."),
    strictness: Optional[str] = typer.Option(
        None, "--strictness", "-s", help="none, standard or strict."
    ),
    no_merge: bool = typer.Option(
        False, "--no-merge", help="Validate the file alone, ignoring part files."
    ),
    parallel: bool = typer.Option(
        False, "--parallel", help="Run the checks on a thread pool."
    ),
) -> None:
    """Validate a specification and print its diagnostics.

    The base file is merged with its parts first (unless ``--no-merge``)
    so that cross-file references resolve. Strictness follows the usual
    precedence: flag, ``SPECFORGE_STRICTNESS``, marker file, user config.

    Exits with code 8 when any error-severity diagnostic is reported.

    Example::

        specforge spec validate specs/Petstore.yaml
        specforge spec validate api.yaml --strictness strict --json
    """
    from specforge.config import resolve_config
    from specforge.diagnostics import count_by_severity, sort_diagnostics
    from specforge.validation import validate

    if no_merge:
        config = resolve_config(source, cli_strictness=strictness)
        spec = _read_single(source)
        document, found = spec.document, list(spec.diagnostics)
    else:
        result, config = load_merged(source, strictness)
        document, found = result.document, list(result.diagnostics)

    assert document is not None
    found.extend(
        validate(document, config.strictness, file_path=str(source), parallel=parallel)
    )
    diagnostics = sort_diagnostics(found)

    counts = count_by_severity(diagnostics)
    if diagnostics:
        get_output().print_diagnostics(
            diagnostics, title=f"{source.name} ({config.strictness.value})"
        )
    summary = (
        f"{counts[DiagnosticSeverity.ERROR]} error(s), "
        f"{counts[DiagnosticSeverity.WARNING]} warning(s), "
        f"{counts[DiagnosticSeverity.INFO]} info"
    )
    _fail_on_errors(diagnostics, "Validation")
    success(f"{source} is valid: {summary}")
