from __future__ import annotations

from ..logging_config import log_structured_error
from .internal import (
    AbnormalClosureError,
    AuthenticationError,
    ConfigurationError,
    InternalError,
    StorageError,
    TransportError,
)


def classify_error(error: BaseException) -> str:
    """Map an exception onto the error category used in structured logs."""
    if isinstance(error, TransportError | AbnormalClosureError | OSError | ConnectionError):
        return "network"
    if isinstance(error, AuthenticationError):
        return "auth"
    if isinstance(error, StorageError):
        return "storage"
    if isinstance(error, ConfigurationError):
        return "config"
    if isinstance(error, InternalError):
        return "internal"
    return "unknown"


def log_error(message: str, error: BaseException, context: dict | None = None) -> None:
    """Logs an error message with the associated exception details.

    This function formats and logs an error message along with the string
    representation of the exception using structured logging for better
    error tracking and aggregation.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    log_structured_error(
        error_type=classify_error(error),
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )


__all__ = ["classify_error", "log_error"]
