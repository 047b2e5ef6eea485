"""Protocol phases and the inbound transition table of a VM session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..protocol.opcodes import ADMIN_LOGIN_RESULT, ADMIN_MONITOR_REPLY, RENAME_OTHER, RENAME_SELF, Opcode


class Phase(Enum):
    """Session phases; ``rank`` orders them for forward-only advancement."""

    CONNECTING = ("connecting", 0)
    AWAITING_AUTH = ("awaiting_auth", 1)
    RENAME_CONFIRMED = ("rename_confirmed", 1)
    CONNECTED = ("connected", 2)
    AUTHENTICATED = ("authenticated", 3)
    CLOSED = ("closed", 99)

    def __init__(self, label: str, rank: int) -> None:
        self.label = label
        self.rank = rank


class Privilege(Enum):
    NONE = "none"
    ELEVATED = "elevated"


@dataclass
class SessionState:
    """Mutable per-connection state, owned by exactly one session.

    Attributes:
        phase: Current protocol phase; only ever advances.
        privilege: Whether admin/moderator rights were obtained.
        display_name: Name confirmed by the server (requested name until then).
        auth_challenged: The server sent an ``auth`` challenge.
        attach_deferred: The ``connect`` request waits for a successful login.
        attach_sent: The ``connect`` request has been sent on this session.
    """

    display_name: str
    phase: Phase = Phase.CONNECTING
    privilege: Privilege = Privilege.NONE
    auth_challenged: bool = False
    attach_deferred: bool = False
    attach_sent: bool = False

    def advance(self, target: Phase) -> bool:
        """Move to ``target`` if it lies ahead of the current phase.

        Returns:
            True if the phase changed.
        """
        if self.phase is Phase.CLOSED:
            return False
        if target is Phase.CLOSED or target.rank > self.phase.rank:
            self.phase = target
            return True
        return False

    @property
    def is_elevated(self) -> bool:
        return self.privilege is Privilege.ELEVATED


@dataclass(frozen=True)
class Transition:
    """Maps an inbound opcode (and optional first argument) to a handler."""

    opcode: str
    handler: str
    sub: str | None = None

    def matches(self, fields: list[str]) -> bool:
        if fields[0] != self.opcode:
            return False
        if self.sub is None:
            return True
        return len(fields) > 1 and fields[1] == self.sub


# Ordered: the first matching entry wins. Unmatched frames are ignored.
TRANSITIONS: tuple[Transition, ...] = (
    Transition(Opcode.NOP, "on_nop"),
    Transition(Opcode.AUTH, "on_auth"),
    Transition(Opcode.RENAME, "on_rename_self", sub=RENAME_SELF),
    Transition(Opcode.RENAME, "on_ignored", sub=RENAME_OTHER),
    Transition(Opcode.CONNECT, "on_connect"),
    Transition(Opcode.LOGIN, "on_login"),
    Transition(Opcode.ADMIN, "on_admin_login", sub=ADMIN_LOGIN_RESULT),
    Transition(Opcode.ADMIN, "on_monitor_reply", sub=ADMIN_MONITOR_REPLY),
    Transition(Opcode.CHAT, "on_chat"),
    Transition(Opcode.LIST, "on_ignored"),
    Transition(Opcode.ADDUSER, "on_ignored"),
    Transition(Opcode.REMUSER, "on_ignored"),
)


def find_transition(fields: list[str]) -> Transition | None:
    if not fields:
        return None
    for transition in TRANSITIONS:
        if transition.matches(fields):
            return transition
    return None
