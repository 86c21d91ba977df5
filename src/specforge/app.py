"""Typer application factory and CLI entry point for specforge.

This module wires together the top-level Typer application and registers
the built-in sub-command groups (``spec``, ``inspect``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers, registers commands, and
invokes the Typer app. :class:`~specforge.exceptions.SpecforgeError`
instances map to their exit code; any other exception is written to a
crash log under the data directory.

See Also:
    :mod:`specforge.config`: Global config and marker file resolution.
    :mod:`specforge.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specforge import __version__
from specforge.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="specforge",
    help="Merge, split, validate, and resolve OpenAPI 3.x specifications.",
    no_args_is_help=True,
    add_completion=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specforge {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "--output-file", help="Redirect data output to a file."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~specforge.output.OutputManager` from
    CLI flags. Without ``--json`` or ``--plain`` the format stored in the
    user config (``output.format``) applies. ``--verbose`` also routes the
    library's ``logging`` debug records to stderr.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        output_file: Redirect primary data output to a file path.
    """
    from specforge.config import load_global_config
    from specforge.output import OutputFormat, OutputManager, set_output

    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        try:
            fmt = OutputFormat(load_global_config().output.format)
        except ValueError:
            fmt = OutputFormat.AUTO

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="[%(name)s] %(message)s", stream=sys.stderr
        )

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from specforge.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def register_commands() -> None:
    """Attach the built-in sub-command groups to :data:`app`.

    Safe to call more than once; groups already registered are skipped.
    """
    from specforge.commands.config import config_app
    from specforge.commands.inspect import inspect_app
    from specforge.commands.spec import spec_app

    registered = {group.name for group in app.registered_groups}
    for sub_app, name, help_text in (
        (spec_app, "spec", "Merge, split, analyze, and validate specifications."),
        (inspect_app, "inspect", "Inspect operations, extensions, and types."),
        (config_app, "config", "Marker file management."),
    ):
        if name not in registered:
            app.add_typer(sub_app, name=name, help=help_text)


def main() -> None:
    """CLI entry point invoked by the ``specforge`` console script.

    Performs the following sequence:

    1. Install signal handlers for clean Ctrl-C behaviour.
    2. Register built-in sub-commands (``spec``, ``inspect``, ``config``).
    3. Invoke the Typer application.

    Unhandled :class:`~specforge.exceptions.SpecforgeError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        register_commands()
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specforge.exceptions import SpecforgeError
        from specforge.output import error

        if isinstance(exc, SpecforgeError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
