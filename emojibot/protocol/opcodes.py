"""Opcode and status constants of the CollabVM guacamole protocol."""

from __future__ import annotations

from enum import StrEnum


class Opcode(StrEnum):
    NOP = "nop"
    AUTH = "auth"
    RENAME = "rename"
    CONNECT = "connect"
    LOGIN = "login"
    ADMIN = "admin"
    CHAT = "chat"
    LIST = "list"
    ADDUSER = "adduser"
    REMUSER = "remuser"


# rename: "0" acknowledges our own rename request, "1" announces another user
RENAME_SELF = "0"
RENAME_OTHER = "1"

# connect / login: "1" means success
RESULT_OK = "1"

# admin sub-opcodes
ADMIN_LOGIN = "2"  # outbound: elevate with password
ADMIN_LOGIN_RESULT = "0"  # inbound: elevation outcome follows
ADMIN_MONITOR_REPLY = "2"  # inbound: QEMU monitor output
ADMIN_HTML = "21"  # outbound: rich chat message

# admin login outcomes
ADMIN_STATUS_ADMIN = "1"
ADMIN_STATUS_MODERATOR = "3"
ELEVATED_STATUSES = frozenset({ADMIN_STATUS_ADMIN, ADMIN_STATUS_MODERATOR})
