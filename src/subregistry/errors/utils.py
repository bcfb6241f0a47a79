"""Error utility functions."""

from __future__ import annotations

import errno
import socket

from cassandra import CoordinationFailure, OperationTimedOut, Timeout, Unavailable
from cassandra.cluster import NoHostAvailable

from subregistry.errors.permanent import PermanentError
from subregistry.errors.transient import TransientError

# Driver errors that resolve on retry. ReadTimeout and WriteTimeout subclass Timeout.
_TRANSIENT_DRIVER_TYPES = (
    NoHostAvailable,
    OperationTimedOut,
    Timeout,
    Unavailable,
    CoordinationFailure,
)

_TRANSIENT_STDLIB_TYPES = (
    ConnectionError,
    TimeoutError,
    socket.timeout,
    socket.gaierror,
)

_TRANSIENT_ERRNO_VALUES = frozenset(
    {
        errno.ECONNREFUSED,
        errno.ECONNRESET,
        errno.ECONNABORTED,
        errno.ETIMEDOUT,
        errno.EHOSTUNREACH,
        errno.ENETUNREACH,
    }
)


def is_transient(error: Exception) -> bool:
    """Check if an error is transient and should be retried.

    Checks the error itself and its cause chain (__cause__). Permanent
    classification takes precedence, so a corrupt record or schema error
    is never retried even if it wraps a timeout.

    Args:
        error: The exception to check

    Returns:
        True if the error is transient and should be retried
    """
    if isinstance(error, TransientError):
        return True

    if isinstance(error, PermanentError):
        return False

    if isinstance(error, _TRANSIENT_DRIVER_TYPES + _TRANSIENT_STDLIB_TYPES):
        return True

    if isinstance(error, OSError) and error.errno in _TRANSIENT_ERRNO_VALUES:
        return True

    cause = getattr(error, "__cause__", None)
    if cause is not None and cause is not error:
        return is_transient(cause)

    return False


def is_permanent(error: Exception) -> bool:
    """Check if an error is permanent and should not be retried.

    Args:
        error: The exception to check

    Returns:
        True if the error is permanent and should not be retried
    """
    if isinstance(error, PermanentError):
        return True

    if isinstance(error, TransientError):
        return False

    if isinstance(error, (ValueError, TypeError, KeyError)):
        return True

    cause = getattr(error, "__cause__", None)
    if cause is not None and cause is not error:
        return is_permanent(cause)

    return False
