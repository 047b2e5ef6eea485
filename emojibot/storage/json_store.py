"""JSON-file backed storage for emojis, users and usage events.

The data file holds two lists::

    {
      "users": [{"id": 1, "username": "alice"}],
      "emojis": [{"id": 7, "name": "wave", "web_address": "https://...",
                  "description": "hi", "created_by": 1,
                  "vm_node_ids": ["vm1", "vm2"]}]
    }

Usage events are appended as JSON lines to ``<data file>.requests.jsonl``.
The data file is re-read only when its mtime or size changes.
"""

import asyncio
import json
import logging
import os
from collections.abc import Sequence
from typing import Any

from ..emoji.models import EmojiRecord, UsageEvent, UserRecord
from ..errors.internal import StorageError

logger = logging.getLogger(__name__)


class JsonEmojiStore:
    """Asynchronous read-mostly store over a JSON document.

    File I/O runs in the default executor so the event loop never blocks on
    disk access. An ``asyncio.Lock`` serialises loads and event appends.

    Attributes:
        path (str): Path to the JSON data file.
        requests_path (str): Path to the JSON-lines usage event log.
    """

    def __init__(self, path: str, requests_path: str | None = None) -> None:
        if not path:
            raise ValueError("path cannot be empty")
        self.path = path
        self.requests_path = requests_path or f"{os.path.splitext(path)[0]}.requests.jsonl"
        self._lock = asyncio.Lock()
        self._file_mtime: float | None = None
        self._file_size: int | None = None
        self._emojis: tuple[EmojiRecord, ...] = ()
        self._users: dict[str, UserRecord] = {}

    async def _load(self) -> None:
        """Reload the data file when it changed on disk.

        Raises:
            StorageError: If the file is missing, unreadable or malformed.
        """
        loop = asyncio.get_running_loop()

        def _read() -> tuple[float, int, Any] | None:
            st = os.stat(self.path)
            if self._file_mtime == st.st_mtime and self._file_size == st.st_size:
                return None
            with open(self.path, encoding="utf-8") as f:
                return st.st_mtime, st.st_size, json.load(f)

        try:
            result = await loop.run_in_executor(None, _read)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                f"Failed to load emoji data from {self.path}: {e}",
                data={"path": self.path},
            ) from e
        if result is None:
            return
        mtime, size, data = result
        try:
            emojis = tuple(EmojiRecord.from_dict(e) for e in data.get("emojis", []))
            users = {
                u.username: u
                for u in (UserRecord.from_dict(raw) for raw in data.get("users", []))
            }
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise StorageError(
                f"Malformed emoji data in {self.path}: {e}", data={"path": self.path}
            ) from e
        self._emojis = emojis
        self._users = users
        self._file_mtime = mtime
        self._file_size = size
        logger.debug(f"📂 Loaded {len(emojis)} emojis and {len(users)} users from {self.path}")

    async def fetch_emojis_for_node(self, node_id: str) -> Sequence[EmojiRecord]:
        async with self._lock:
            await self._load()
            return [e for e in self._emojis if node_id in e.node_ids]

    async def get_user_by_username(self, username: str) -> UserRecord | None:
        async with self._lock:
            await self._load()
            return self._users.get(username)

    async def append_usage_event(
        self, user_id: int, emoji_id: int, node_id: str
    ) -> None:
        event = UsageEvent(user_id=user_id, emoji_id=emoji_id, node_id=node_id)
        line = json.dumps(event.to_dict(), ensure_ascii=False) + "\n"
        loop = asyncio.get_running_loop()

        def _append() -> None:
            with open(self.requests_path, "a", encoding="utf-8") as f:
                f.write(line)

        async with self._lock:
            try:
                await loop.run_in_executor(None, _append)
            except OSError as e:
                raise StorageError(
                    f"Failed to append usage event to {self.requests_path}: {e}",
                    data={"path": self.requests_path},
                ) from e

    async def close(self) -> None:
        self._emojis = ()
        self._users = {}
        self._file_mtime = None
        self._file_size = None
