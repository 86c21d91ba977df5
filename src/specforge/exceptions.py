"""Exception hierarchy for specforge.

All exceptions inherit from :class:`SpecforgeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specforge.exit_codes`.
The top-level error handler in :func:`specforge.app.main` catches
``SpecforgeError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Expected domain conditions (merge conflicts, validation findings, missing
part files) are **not** exceptions -- they are reported as
:class:`~specforge.models.DiagnosticMessage` values.

Subclass hierarchy::

    SpecforgeError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- SpecParseError      (exit 7)
    +-- DiagnosticsError    (exit 8)
    +-- ConfigError         (exit 1)
"""

from specforge.exit_codes import (
    EXIT_DIAGNOSTIC_ERRORS,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
)


class SpecforgeError(Exception):
    """Base exception for all specforge errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specforge.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecforgeError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class SpecParseError(SpecforgeError):
    """Raised when a specification file cannot be read or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class DiagnosticsError(SpecforgeError):
    """Raised at the CLI boundary when error-severity diagnostics block an operation.

    Args:
        message: Summary line printed to stderr.
        error_count: Number of error-severity diagnostics that caused the failure.
    """

    exit_code = EXIT_DIAGNOSTIC_ERRORS

    def __init__(self, message: str, error_count: int = 0):
        super().__init__(message)
        self.error_count = error_count


class ConfigError(SpecforgeError):
    """Raised for configuration problems (invalid marker file, bad global config JSON)."""

    exit_code = EXIT_GENERIC_FAILURE
