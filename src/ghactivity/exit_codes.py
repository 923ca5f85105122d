"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~ghactivity.exceptions.GhActivityError` subclass.
Shell wrappers can inspect the exit code to tell a missing user apart from
an outage without parsing stderr.

Example::

    $ ghactivity activity no-such-user-here
    Error: User not found
    $ echo $?
    4   # EXIT_NOT_FOUND
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_NOT_FOUND = 4
"""The requested user does not exist upstream (HTTP 404)."""

EXIT_UPSTREAM_ERROR = 5
"""GitHub answered with a non-success status other than 404."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_PARSE_ERROR = 7
"""The response body was not valid JSON."""

EXIT_CACHE_READ_ERROR = 8
"""The cache directory could not be read (permissions, I/O fault)."""

EXIT_CACHE_WRITE_ERROR = 9
"""A cache entry could not be written."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C."""
