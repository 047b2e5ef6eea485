"""Maps SIGINT/SIGTERM onto a shutdown request the main loop can poll or await."""

from __future__ import annotations

import asyncio
import logging
import signal

_SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class SignalHandler:
    def __init__(self) -> None:
        self._requested = asyncio.Event()

    @property
    def shutdown_initiated(self) -> bool:
        return self._requested.is_set()

    def stop(self) -> None:
        """Request shutdown programmatically."""
        self._requested.set()

    async def wait(self) -> None:
        await self._requested.wait()

    def _on_signal(self, signum: int) -> None:
        if self._requested.is_set():
            return
        logging.warning(f"🛑 {signal.Signals(signum).name} received, shutting down")
        self._requested.set()

    def setup_signal_handlers(self) -> None:  # pragma: no cover
        """Install handlers on the running loop.

        Falls back to ``signal.signal`` where the loop has no signal support
        (Windows); the handler then hops back onto the loop thread.
        """
        loop = asyncio.get_running_loop()
        for sig in _SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, self._on_signal, sig)
            except NotImplementedError:
                signal.signal(
                    sig,
                    lambda signum, _frame: loop.call_soon_threadsafe(self._on_signal, signum),
                )
