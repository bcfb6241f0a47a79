"""
Structured error codes for subregistry.

Provides semantic error classification and exception chain traversal.

Usage:
    from subregistry.error_codes import ErrorCode, classify_error

    try:
        store.get("svc-1")
    except Exception as e:
        if classify_error(e) == ErrorCode.DATA_CORRUPTION:
            # Stored payload is unreadable, alert instead of retrying
            raise
"""

from __future__ import annotations

from enum import Enum


class ErrorCode(Enum):
    """Semantic error codes for categorizing exceptions."""

    # General errors
    UNKNOWN = "UNKNOWN"
    SYSTEM_ERROR = "SYSTEM_ERROR"
    USER_CODE_ERROR = "USER_CODE_ERROR"

    # Configuration and provisioning errors
    CONFIGURATION_INVALID = "CONFIGURATION_INVALID"
    SCHEMA_MISMATCH = "SCHEMA_MISMATCH"

    # Stored data errors
    DATA_CORRUPTION = "DATA_CORRUPTION"

    # Validation errors
    VALIDATION_FAILED = "VALIDATION_FAILED"

    # Store availability errors
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT = "TIMEOUT"
    UNAVAILABLE = "UNAVAILABLE"

    # Auth errors
    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"


def error_chain(error: Exception) -> list[Exception]:
    """Traverse __cause__ chain, return list from root to leaf.

    Args:
        error: The exception to traverse

    Returns:
        List of exceptions from root cause to the provided exception.
        If no cause chain exists, returns a list with just the error.
    """
    chain: list[Exception] = []
    current: Exception | None = error

    while current is not None:
        chain.append(current)
        cause = getattr(current, "__cause__", None)
        if cause is current:
            # Prevent infinite loops on self-referential causes
            break
        current = cause

    chain.reverse()
    return chain


def find_in_chain(error: Exception, error_type: type) -> Exception | None:
    """Find first error of given type in cause chain.

    Args:
        error: The exception to search from
        error_type: The type of exception to find

    Returns:
        The first exception of the given type, or None if not found.
    """
    for exc in error_chain(error):
        if isinstance(exc, error_type):
            return exc
    return None


def classify_error(error: Exception) -> ErrorCode:
    """Map any exception to an ErrorCode for routing/alerting.

    Uses explicit error_code attributes on registry exceptions first, then
    name-based heuristics that cover the Cassandra driver's exception names
    (NoHostAvailable, OperationTimedOut, Unavailable, ReadTimeout, ...).

    Args:
        error: The exception to classify

    Returns:
        The most appropriate ErrorCode for the exception.
    """
    if hasattr(error, "error_code"):
        return error.error_code  # type: ignore[no-any-return]

    for exc in error_chain(error):
        if hasattr(exc, "error_code"):
            return exc.error_code  # type: ignore[no-any-return]

    error_type = type(error).__name__.lower()

    if "timeout" in error_type or "timedout" in error_type:
        return ErrorCode.TIMEOUT

    if "unavailable" in error_type or "nohost" in error_type:
        return ErrorCode.UNAVAILABLE

    if any(pattern in error_type for pattern in ["connection", "network", "socket", "dns"]):
        return ErrorCode.NETWORK_ERROR

    if any(
        pattern in error_type
        for pattern in ["authentication", "authorization", "unauthorized", "permission"]
    ):
        return ErrorCode.AUTHENTICATION_FAILED

    if any(pattern in error_type for pattern in ["validation", "invalid", "parse"]):
        return ErrorCode.VALIDATION_FAILED

    if any(pattern in error_type for pattern in ["config", "setting", "environment"]):
        return ErrorCode.CONFIGURATION_INVALID

    return ErrorCode.UNKNOWN
