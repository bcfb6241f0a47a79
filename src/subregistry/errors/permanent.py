"""Permanent (non-retryable) errors."""

from __future__ import annotations

from typing import TYPE_CHECKING

from subregistry.errors.base import RegistryError

if TYPE_CHECKING:
    from subregistry.error_codes import ErrorCode


class PermanentError(RegistryError):
    """Non-retryable errors.

    These errors indicate conditions that will not resolve on retry:
    - Missing or malformed schema
    - Corrupt stored records
    - Unparseable filter expressions
    """

    code: int = 102

    @property
    def error_code(self) -> ErrorCode:
        """Get the semantic error code for this exception."""
        if self._error_code is not None:
            return self._error_code
        from subregistry.error_codes import ErrorCode

        return ErrorCode.USER_CODE_ERROR


class ConfigurationError(PermanentError):
    """Invalid configuration.

    Raised during initialization when configuration is invalid.
    Usually indicates a deployment or setup issue.
    """

    code: int = 104

    @property
    def error_code(self) -> ErrorCode:
        """Get the semantic error code for this exception."""
        if self._error_code is not None:
            return self._error_code
        from subregistry.error_codes import ErrorCode

        return ErrorCode.CONFIGURATION_INVALID


class SchemaResolutionError(PermanentError):
    """The subscription table is missing or does not have the expected shape.

    Signals a provisioning defect. Not retryable.
    """

    code: int = 110

    def __init__(
        self,
        message: str,
        *,
        keyspace: str | None = None,
        table: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.keyspace = keyspace
        self.table = table

    @property
    def error_code(self) -> ErrorCode:
        """Get the semantic error code for this exception."""
        if self._error_code is not None:
            return self._error_code
        from subregistry.error_codes import ErrorCode

        return ErrorCode.SCHEMA_MISMATCH


class FilterParseError(PermanentError):
    """A filter expression could not be parsed."""

    code: int = 120

    def __init__(self, message: str, *, text: str, position: int) -> None:
        super().__init__(f"{message} at position {position}: {text!r}")
        self.text = text
        self.position = position

    @property
    def error_code(self) -> ErrorCode:
        """Get the semantic error code for this exception."""
        if self._error_code is not None:
            return self._error_code
        from subregistry.error_codes import ErrorCode

        return ErrorCode.VALIDATION_FAILED
