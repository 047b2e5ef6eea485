"""Centralized internal error hierarchy.

These exceptions provide semantic categories for retry logic and higher-level
error handling. Only raise these inside application/network boundaries; wrap
raw websockets / JSON / OS errors instead of letting them reach retry code.

Classes:
  InternalError          – Base for all internal errors.
  ConfigurationError     – Missing or invalid startup configuration (fatal).
  StorageError           – Storage collaborator failures (isolated, logged).
  AuthenticationError    – Credentials rejected or incompatible auth scheme.
  TransportError         – Websocket could not be opened or used.
  AbnormalClosureError   – A session ended with a non-normal close code.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal application errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        """Initialize the InternalError with message and optional data.

        Args:
            message: The error message to be displayed.
            data: Optional mapping of additional context data. It is copied
                to prevent mutations by the caller.
        """
        super().__init__(message)
        self.data = dict(data) if data else {}


class ConfigurationError(InternalError):
    """Raised when the configuration file is missing or fails validation."""


class StorageError(InternalError):
    """Raised by storage backends when a read or write cannot be completed."""


class AuthenticationError(InternalError):
    """Raised when the remote service rejects the configured credentials."""


class TransportError(InternalError):
    """Raised when the websocket transport cannot be opened or written."""


class AbnormalClosureError(InternalError):
    """Raised when a session closes with anything other than a normal code.

    The supervisor retries on this exception; a normal close never raises it.
    """

    def __init__(self, code: int | None, reason: str = "") -> None:
        super().__init__(
            f"Connection closed abnormally (code: {code}, reason: {reason})",
            data={"code": code, "reason": reason},
        )
        self.code = code
        self.reason = reason


__all__ = [
    "InternalError",
    "ConfigurationError",
    "StorageError",
    "AuthenticationError",
    "TransportError",
    "AbnormalClosureError",
]
