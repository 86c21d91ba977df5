"""Config commands -- view and modify the per-target marker file.

Provides the ``specforge config`` sub-command group for the
``.specforge.json`` marker that sits next to a base specification
(:class:`~specforge.models.MarkerConfig`). The marker records the
validation strictness, generator hints, and multi-part settings so that
repeated runs are reproducible without re-specifying flags.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer

from specforge.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


def _coerce(value: str, current: Any) -> Any:  # noqa: ANN401
    """Coerce the CLI string *value* to the type of the *current* field value."""
    if isinstance(current, bool):
        return value.lower() in ("true", "1", "yes")
    if isinstance(current, int):
        try:
            return int(value)
        except ValueError:
            error(f"Expected integer, got: {value}")
            raise typer.Exit(code=2) from None
    if isinstance(current, list):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


@config_app.command("show")
def config_show(
    spec_path: Path = typer.Argument(
        Path("."), help="Base specification file or its directory."
    ),
) -> None:
    """Show the effective configuration for a specification.

    Prints the marker file location, then the resolved configuration
    (marker values with the strictness precedence applied) as formatted
    output (table or JSON, depending on the active output mode).

    Example::

        specforge config show specs/Petstore.yaml
        specforge --json config show specs/
    """
    from specforge.config import get_config_dir, marker_path, resolve_config

    path = marker_path(spec_path)
    if path.is_file():
        info(f"Marker file: {path}")
    else:
        info(f"No marker file at {path}; showing defaults.")
    info(f"Config directory: {get_config_dir()}")
    format_response(resolve_config(spec_path).model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Marker key (dot notation, e.g., 'multipart.discovery')."
    ),
    value: str = typer.Argument(help="Value to set."),
    spec_path: Path = typer.Option(
        Path("."), "--spec", help="Base specification file or its directory."
    ),
) -> None:
    """Set a value in the marker file.

    Uses dot notation for nested keys. The value is coerced to match the
    existing field's type (bool, int, comma-separated list, or str), and
    the updated marker is validated against
    :class:`~specforge.models.MarkerConfig` before saving.

    Args:
        key: Dot-separated marker key path (e.g. ``multipart.discovery``).
        value: String value to set; coerced to the target field type.
        spec_path: Specification whose marker file is updated.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or Pydantic validation fails.

    Example::

        specforge config set strictness strict --spec specs/
        specforge config set multipart.exclude "*_Draft.yaml" --spec specs/
        specforge config set convert_dates true
    """
    from specforge.config import load_marker, save_marker
    from specforge.models import MarkerConfig

    marker = load_marker(spec_path) or MarkerConfig()
    # Navigate the full dump to validate the key, but edit only the set
    # fields so that untouched defaults stay out of the marker file.
    full = marker.model_dump(mode="json")
    data = marker.model_dump(mode="json", exclude_unset=True)

    keys = key.split(".")
    current: Any = full
    target = data
    for k in keys[:-1]:
        if k not in current or not isinstance(current[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        current = current[k]
        target = target.setdefault(k, {})

    final_key = keys[-1]
    if final_key not in current:
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    coerced = _coerce(value, current[final_key])
    target[final_key] = coerced

    try:
        new_marker = MarkerConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    path = save_marker(spec_path, new_marker)
    success(f"Set {key} = {coerced} in {path}")


@config_app.command("init")
def config_init(
    spec_path: Path = typer.Argument(
        Path("."), help="Base specification file or its directory."
    ),
    strictness: Optional[str] = typer.Option(
        None, "--strictness", "-s", help="none, standard or strict."
    ),
    namespace: Optional[str] = typer.Option(
        None, "--namespace", help="Namespace / package hint for generators."
    ),
    force: bool = typer.Option(
        False, "--force", help="Overwrite an existing marker file."
    ),
) -> None:
    """Create a marker file next to a specification.

    Refuses to replace an existing marker unless ``--force`` is given.

    Example::

        specforge config init specs/Petstore.yaml --strictness strict
        specforge config init specs/ --namespace Petstore.Client --force
    """
    from specforge.config import marker_path, save_marker
    from specforge.models import MarkerConfig, ValidationStrictness

    path = marker_path(spec_path)
    if path.exists() and not force:
        error(f"Marker file already exists: {path}")
        info("Use --force to overwrite it.")
        raise typer.Exit(code=2)

    fields: dict[str, Any] = {}
    if strictness is not None:
        try:
            fields["strictness"] = ValidationStrictness(strictness)
        except ValueError:
            error(f"Invalid strictness: {strictness}")
            raise typer.Exit(code=2) from None
    if namespace is not None:
        fields["namespace"] = namespace

    written = save_marker(spec_path, MarkerConfig(**fields))
    success(f"Created {written}")
