"""Transient (retryable) errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from subregistry.errors.base import RegistryError

if TYPE_CHECKING:
    from subregistry.error_codes import ErrorCode


class TransientError(RegistryError):
    """Retryable errors.

    These errors indicate temporary conditions that may resolve on retry:
    - Coordinator or replica timeouts
    - No live hosts for the local datacenter
    - Not enough replicas for the requested consistency level

    The subscription store never raises this itself; driver errors propagate
    unchanged. Callers wrapping registry calls in their own retry loops can
    raise it to mark a failure as retryable.

    Example:
        raise TransientError("Registry unavailable", retry_after=5)
    """

    code: int = 101

    @property
    def error_code(self) -> ErrorCode:
        """Get the semantic error code for this exception."""
        if self._error_code is not None:
            return self._error_code
        from subregistry.error_codes import ErrorCode

        return ErrorCode.NETWORK_ERROR

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        cause: Exception | None = None,
        error_code: ErrorCode | None = None,
        retry_after: float | None = None,
    ) -> None:
        super().__init__(message, code=code, cause=cause, error_code=error_code)
        self.retry_after = retry_after
