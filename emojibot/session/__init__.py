"""Per-endpoint protocol sessions and their supervisor."""

from .connector import WebSocketConnector, WebSocketTransport
from .session import VMSession
from .state import TRANSITIONS, Phase, Privilege, SessionState
from .supervisor import ConnectionSupervisor

__all__ = [
    "ConnectionSupervisor",
    "VMSession",
    "WebSocketConnector",
    "WebSocketTransport",
    "Phase",
    "Privilege",
    "SessionState",
    "TRANSITIONS",
]
