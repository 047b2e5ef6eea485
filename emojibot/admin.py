"""Hooks exposed to the administrative API.

The HTTP layer lives elsewhere; it only needs to nudge the emoji directory
after emojis are created or deleted and to report which endpoints are
connected.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .emoji.directory import EmojiDirectory
    from .session.supervisor import ConnectionSupervisor


class AdminBridge:
    def __init__(self, directory: EmojiDirectory, supervisor: ConnectionSupervisor) -> None:
        self.directory = directory
        self.supervisor = supervisor

    def trigger_refresh(self) -> asyncio.Task[None]:
        """Schedule an immediate directory refresh without waiting for it.

        Safe to call repeatedly and concurrently with the periodic refresh.
        """
        return self.directory.request_refresh()

    # Emoji create/delete handlers call this after committing.
    notify_emoji_changed = trigger_refresh

    async def refresh_now(self) -> None:
        await self.trigger_refresh()

    def connection_status(self) -> Mapping[str, bool]:
        return self.supervisor.connection_status()
