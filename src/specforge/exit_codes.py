"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specforge.exceptions.SpecforgeError` subclass.
CI scripts can inspect the exit code to tell a broken specification apart
from a bad invocation without parsing stderr.

Example::

    $ specforge spec validate api.yaml --strictness strict
    $ echo $?
    8   # EXIT_DIAGNOSTIC_ERRORS -- error-severity findings were reported
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The specification could not be read or parsed."""

EXIT_DIAGNOSTIC_ERRORS = 8
"""Merge, split, or validation produced at least one error-severity diagnostic."""
