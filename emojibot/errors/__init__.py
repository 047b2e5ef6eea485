from .handling import classify_error, log_error
from .internal import (
    AbnormalClosureError,
    AuthenticationError,
    ConfigurationError,
    InternalError,
    StorageError,
    TransportError,
)

__all__ = [
    "InternalError",
    "ConfigurationError",
    "StorageError",
    "AuthenticationError",
    "TransportError",
    "AbnormalClosureError",
    "classify_error",
    "log_error",
]
