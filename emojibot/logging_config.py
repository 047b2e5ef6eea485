"""Colored console logging and per-category error accounting.

Every module logs through the root ``logging`` functions. Failures routed
through :func:`log_structured_error` are additionally counted per category
(network, auth, storage, ...) so the process can print a short tally when it
exits. The tally is informational and never changes the log level.
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
import threading
from collections import Counter
from typing import Any

import colorlog

_LEVEL_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "magenta",
}


class ErrorTally:
    """Thread-safe count of logged failures per category.

    Attributes:
        counts: Failures seen so far, keyed by category.
        last_messages: Most recent message for each category.
    """

    def __init__(self) -> None:
        self.counts: Counter[str] = Counter()
        self.last_messages: dict[str, str] = {}
        self._lock = threading.Lock()

    def record(self, category: str, message: str) -> None:
        with self._lock:
            self.counts[category] += 1
            self.last_messages[category] = message

    def snapshot(self) -> dict[str, tuple[int, str]]:
        with self._lock:
            return {c: (n, self.last_messages[c]) for c, n in self.counts.items()}

    def reset(self) -> None:
        with self._lock:
            self.counts.clear()
            self.last_messages.clear()

    def log_summary(self) -> None:
        tally = self.snapshot()
        if not tally:
            logging.info("📊 No errors recorded")
            return
        logging.warning("📊 Errors by category:")
        for category, (count, last) in sorted(tally.items()):
            logging.warning(f"   • {category}: {count} (last: {last})")


error_tally = ErrorTally()


def log_structured_error(
    error_type: str,
    message: str,
    exception: BaseException | None = None,
    context: dict[str, Any] | None = None,
    level: int = logging.ERROR,
) -> None:
    """Log ``[TYPE] message | Exception: ... | Context: k=v`` and count it.

    Args:
        error_type: Category from ``errors.handling.classify_error``.
        message: Human readable description.
        exception: Exception that caused the failure, if any.
        context: Extra key/value pairs appended to the line.
        level: Logging level of the emitted record.
    """
    parts = [f"[{error_type.upper()}] {message}"]
    if exception is not None:
        parts.append(f"Exception: {type(exception).__name__}: {exception}")
    if context:
        parts.append("Context: " + " ".join(f"{k}={v}" for k, v in context.items()))
    logging.log(level, " | ".join(parts))
    error_tally.record(error_type, message)


def _debug_requested() -> bool:
    return os.environ.get("DEBUG", "").lower() in ("true", "1", "yes")


class LoggerConfigurator:
    """Installs the colorlog formatter on the root logger (once per process)."""

    def __init__(self) -> None:
        self._summary_registered = False

    def configure(self) -> None:
        """Send colored records to stderr.

        The level is INFO, or DEBUG when ``DEBUG`` is ``true``, ``1`` or
        ``yes``. The websockets library is kept at INFO.
        """
        level = logging.DEBUG if _debug_requested() else logging.INFO
        formatter = colorlog.ColoredFormatter(
            "%(asctime)s %(log_color)s%(levelname)-8s%(reset)s %(message_log_color)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            log_colors=_LEVEL_COLORS,
            secondary_log_colors={"message": {"ERROR": "red", "CRITICAL": "magenta"}},
        )
        root = logging.getLogger()
        if not root.handlers:
            root.addHandler(logging.StreamHandler(sys.stderr))
        for handler in root.handlers:
            handler.setFormatter(formatter)
        root.setLevel(level)
        logging.getLogger("websockets").setLevel(logging.INFO)

        if not self._summary_registered:
            atexit.register(error_tally.log_summary)
            self._summary_registered = True
