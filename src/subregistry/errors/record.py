"""Errors raised while decoding stored subscription records."""

from __future__ import annotations

from typing import TYPE_CHECKING

from subregistry.errors.permanent import PermanentError

if TYPE_CHECKING:
    from subregistry.error_codes import ErrorCode


class CorruptRecordError(PermanentError):
    """A stored payload could not be decoded into a subscription.

    Indicates corruption or an incompatible writer. Never coerced into a
    default value.
    """

    code: int = 130

    def __init__(
        self,
        message: str,
        *,
        subscription: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(f"Subscription {subscription!r}: {message}", cause=cause)
        self.subscription = subscription

    @property
    def error_code(self) -> ErrorCode:
        """Get the semantic error code for this exception."""
        if self._error_code is not None:
            return self._error_code
        from subregistry.error_codes import ErrorCode

        return ErrorCode.DATA_CORRUPTION


class MissingFieldError(CorruptRecordError):
    """A required field is absent from a stored payload."""

    code: int = 131

    def __init__(self, field: str, *, subscription: str) -> None:
        super().__init__(f"missing required field {field!r}", subscription=subscription)
        self.field = field
