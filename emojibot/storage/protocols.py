"""Protocol definitions for the storage collaborator.

The bot core never talks to a database directly; it depends on these
structural interfaces so any backend (the bundled JSON store, a SQL adapter,
a test double) can be plugged in.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from ..emoji.models import EmojiRecord, UserRecord


class EmojiStore(Protocol):
    """Storage operations consumed by the emoji directory and commands."""

    async def fetch_emojis_for_node(self, node_id: str) -> Sequence[EmojiRecord]:
        """Return every emoji enabled on ``node_id``.

        Raises:
            StorageError: If the backend cannot be read.
        """
        ...

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        """Return the user with the given display name, or None."""
        ...

    async def append_usage_event(
        self, user_id: int, emoji_id: int, node_id: str
    ) -> None:
        """Persist one usage event.

        Raises:
            StorageError: If the event cannot be written.
        """
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...
