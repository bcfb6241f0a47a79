"""subregistry error hierarchy."""

from subregistry.errors.base import RegistryBaseException, RegistryError
from subregistry.errors.permanent import (
    ConfigurationError,
    FilterParseError,
    PermanentError,
    SchemaResolutionError,
)
from subregistry.errors.record import CorruptRecordError, MissingFieldError
from subregistry.errors.transient import TransientError
from subregistry.errors.utils import is_permanent, is_transient

__all__ = [
    "ConfigurationError",
    "CorruptRecordError",
    "FilterParseError",
    "MissingFieldError",
    "PermanentError",
    "RegistryBaseException",
    "RegistryError",
    "SchemaResolutionError",
    "TransientError",
    "is_permanent",
    "is_transient",
]
