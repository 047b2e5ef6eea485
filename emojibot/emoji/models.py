from __future__ import annotations

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class EmojiRecord:
    """An emoji as stored by the storage collaborator.

    Attributes:
        id: Storage identifier.
        name: Unique name used in ``emoji <name>`` commands.
        web_address: Image URL embedded in markup replies.
        description: Free text shown by ``emojilist``.
        node_ids: Endpoints the emoji is enabled on.
        created_by: Identifier of the creating user, if known.
    """

    id: int
    name: str
    web_address: str
    description: str = ""
    node_ids: frozenset[str] = field(default_factory=frozenset)
    created_by: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> EmojiRecord:
        """Build a record from a storage row.

        Accepts ``vm_node_ids`` (storage spelling) or ``node_ids``.
        """
        node_ids = data.get("vm_node_ids", data.get("node_ids")) or ()
        created_by = data.get("created_by")
        return cls(
            id=int(data["id"]),
            name=str(data["name"]),
            web_address=str(data["web_address"]),
            description=str(data.get("description") or ""),
            node_ids=frozenset(str(n) for n in node_ids),
            created_by=int(created_by) if created_by is not None else None,
        )


@dataclass(frozen=True)
class UserRecord:
    id: int
    username: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserRecord:
        return cls(id=int(data["id"]), username=str(data["username"]))


@dataclass(frozen=True)
class UsageEvent:
    """One privileged ``emoji`` invocation attributed to a user."""

    user_id: int
    emoji_id: int
    node_id: str
    created_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "emoji_id": self.emoji_id,
            "vm_node_id": self.node_id,
            "created_at": self.created_at,
        }
