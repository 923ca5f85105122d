"""Exception hierarchy for ghactivity.

All exceptions inherit from :class:`GhActivityError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`ghactivity.exit_codes`.
The top-level error handler in :func:`ghactivity.app.main` catches
``GhActivityError``, prints a single ``Error:`` line and exits with the
appropriate code, while unexpected exceptions produce a crash log and exit
with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    GhActivityError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- NotFoundError       (exit 4)
    +-- UpstreamError       (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- ParseError          (exit 7)
    +-- CacheReadError      (exit 8)
    +-- CacheWriteError     (exit 9)
    +-- ConfigError         (exit 1)

``NotFoundError``, ``UpstreamError``, ``ParseError`` and ``ConnectionError_``
are the failures a fetcher may raise; :class:`FetchError` groups them so
callers can catch "the remote call failed" in one clause.
"""

from ghactivity.exit_codes import (
    EXIT_CACHE_READ_ERROR,
    EXIT_CACHE_WRITE_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_PARSE_ERROR,
    EXIT_UPSTREAM_ERROR,
)


class GhActivityError(Exception):
    """Base exception for all ghactivity errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`ghactivity.exit_codes`. The entry point catches
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


class InvalidUsageError(GhActivityError):
    """Raised for invalid CLI arguments, including an empty username."""

    exit_code = EXIT_INVALID_USAGE


class FetchError(GhActivityError):
    """Base for failures raised by a remote fetcher."""


class NotFoundError(FetchError):
    """Raised when GitHub returns HTTP 404 for the requested user."""

    exit_code = EXIT_NOT_FOUND


class UpstreamError(FetchError):
    """Raised when GitHub returns any other non-success status.

    Args:
        status_code: The HTTP status code returned upstream.
        message: Optional message override.
    """

    exit_code = EXIT_UPSTREAM_ERROR

    def __init__(self, status_code: int, message: str | None = None):
        super().__init__(message or f"Failed to fetch activity (Status: {status_code})")
        self.status_code = status_code


class ConnectionError_(FetchError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ParseError(FetchError):
    """Raised when a response body is not valid JSON."""

    exit_code = EXIT_PARSE_ERROR


class CacheReadError(GhActivityError):
    """Raised when the cache cannot be read for a reason other than a miss."""

    exit_code = EXIT_CACHE_READ_ERROR


class CacheWriteError(GhActivityError):
    """Raised when a cache entry cannot be persisted."""

    exit_code = EXIT_CACHE_WRITE_ERROR


class ConfigError(GhActivityError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
