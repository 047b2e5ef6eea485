"""Connection status file shared with health checks and the admin API."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
import time
from collections.abc import Mapping
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

DEFAULT_STATUS_FILE = os.environ.get(
    "EMOJIBOT_STATUS_FILE",
    str(Path(tempfile.gettempdir()) / "emojibot.status.json"),
)


def _atomic_write(path: Path, data: dict[str, Any]) -> None:
    tmp = path.with_suffix(".tmp")
    with tmp.open("w", encoding="utf-8") as fh:
        json.dump(data, fh)
    os.replace(tmp, path)


def read_status(path: str | None = None) -> dict[str, Any]:
    p = Path(path or DEFAULT_STATUS_FILE)
    if not p.exists():
        return {}
    try:
        with p.open("r", encoding="utf-8") as fh:
            return json.load(fh) or {}
    except (OSError, json.JSONDecodeError):
        return {}


def write_status(connections: Mapping[str, bool], path: str | None = None) -> None:
    """Publish the live-connection set; failures are logged, never raised."""
    p = Path(path or DEFAULT_STATUS_FILE)
    payload = {
        "connections": dict(connections),
        "last_updated": time.time(),
    }
    try:
        _atomic_write(p, payload)
    except OSError as e:
        logging.warning(f"⚠️ Could not write status file {p}: {e}")


class StatusFilePublisher:
    """Status listener that mirrors supervisor updates into a file.

    Inside an event loop the write runs on a single worker thread, so the
    loop never blocks on disk and writes land in call order. Outside a loop
    the file is written directly.
    """

    def __init__(self, path: str | None = None) -> None:
        self.path = path or DEFAULT_STATUS_FILE
        self._executor: ThreadPoolExecutor | None = None
        self._pending: set[asyncio.Future[None]] = set()

    def __call__(self, connections: Mapping[str, bool]) -> None:
        snapshot = dict(connections)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            write_status(snapshot, self.path)
            return
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="status-file")
        future = loop.run_in_executor(self._executor, write_status, snapshot, self.path)
        self._pending.add(future)
        future.add_done_callback(self._pending.discard)

    async def flush(self) -> None:
        """Wait until every scheduled write has reached the file."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        await self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
