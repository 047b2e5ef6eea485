"""Per-endpoint emoji cache refreshed from the storage collaborator.

Each endpoint maps to an immutable snapshot (``MappingProxyType``) that is
replaced with a single assignment on refresh. Readers therefore always see
either the previous complete set or the new complete set.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from ..constants import EMOJI_REFRESH_INTERVAL_SECONDS
from ..errors.handling import log_error
from .models import EmojiRecord

if TYPE_CHECKING:
    from ..storage.protocols import EmojiStore

_EMPTY: Mapping[str, EmojiRecord] = MappingProxyType({})


class EmojiDirectory:
    """Read-mostly cache of enabled emojis keyed by endpoint node id.

    Attributes:
        store: Storage collaborator used for refreshes.
        node_ids: Endpoints refreshed when no explicit list is given.
    """

    def __init__(self, store: EmojiStore, node_ids: Iterable[str] = ()) -> None:
        self.store = store
        self.node_ids: tuple[str, ...] = tuple(node_ids)
        self._snapshots: dict[str, Mapping[str, EmojiRecord]] = {}
        self._refresh_lock = asyncio.Lock()
        self._refresh_task: asyncio.Task[None] | None = None
        self._refresh_pending = False
        self._periodic_task: asyncio.Task[None] | None = None

    # ----------------------------- Reads ----------------------------- #
    def lookup(self, node_id: str, name: str) -> EmojiRecord | None:
        return self._snapshots.get(node_id, _EMPTY).get(name)

    def snapshot(self, node_id: str) -> Mapping[str, EmojiRecord]:
        """Return the current read-only name → record mapping for an endpoint."""
        return self._snapshots.get(node_id, _EMPTY)

    def records(self, node_id: str) -> tuple[EmojiRecord, ...]:
        return tuple(self.snapshot(node_id).values())

    # ---------------------------- Refresh ---------------------------- #
    async def refresh(self, node_ids: Iterable[str] | None = None) -> None:
        """Reload the cached set of every endpoint in ``node_ids``.

        Failures are logged per endpoint and leave that endpoint empty; they
        are never raised and never stop the remaining endpoints.
        """
        targets = tuple(node_ids) if node_ids is not None else self.node_ids
        async with self._refresh_lock:
            for node_id in targets:
                await self._load_node(node_id)

    async def _load_node(self, node_id: str) -> None:
        try:
            emojis = await self.store.fetch_emojis_for_node(node_id)
        except Exception as e:  # noqa: BLE001
            log_error(f"[{node_id}] Failed to load emoji list", e, context={"node_id": node_id})
            self._snapshots[node_id] = _EMPTY
            return
        self._snapshots[node_id] = MappingProxyType({e.name: e for e in emojis})
        logging.info(f"[{node_id}] Loaded {len(emojis)} emojis.")

    def request_refresh(self) -> asyncio.Task[None]:
        """Schedule a refresh without waiting for it.

        Concurrent requests are coalesced: while a refresh is running, any
        number of further requests trigger exactly one follow-up pass.

        Returns:
            The task performing the refresh.
        """
        if self._refresh_task is not None and not self._refresh_task.done():
            self._refresh_pending = True
            return self._refresh_task
        self._refresh_task = asyncio.create_task(self._refresh_until_settled())
        return self._refresh_task

    async def _refresh_until_settled(self) -> None:
        while True:
            self._refresh_pending = False
            await self.refresh()
            if not self._refresh_pending:
                return

    # --------------------------- Lifecycle --------------------------- #
    def start(self, interval: float = EMOJI_REFRESH_INTERVAL_SECONDS) -> None:
        """Start the periodic refresh loop (idempotent)."""
        if self._periodic_task is not None and not self._periodic_task.done():
            return
        self._periodic_task = asyncio.create_task(self._periodic_loop(interval))

    async def _periodic_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            await self.refresh()

    async def stop(self) -> None:
        """Cancel the periodic loop and any in-flight on-demand refresh."""
        tasks = [t for t in (self._periodic_task, self._refresh_task) if t is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._periodic_task = None
        self._refresh_task = None
