import logging
from unittest.mock import patch

import pytest

from emojibot.errors.handling import classify_error, log_error
from emojibot.errors.internal import (
    AbnormalClosureError,
    AuthenticationError,
    ConfigurationError,
    InternalError,
    StorageError,
    TransportError,
)
from emojibot.logging_config import ErrorTally, LoggerConfigurator, error_tally


@pytest.mark.parametrize(
    "error,category",
    [
        (TransportError("x"), "network"),
        (AbnormalClosureError(1006), "network"),
        (ConnectionResetError(), "network"),
        (AuthenticationError("x"), "auth"),
        (StorageError("x"), "storage"),
        (ConfigurationError("x"), "config"),
        (InternalError("x"), "internal"),
        (ValueError("x"), "unknown"),
    ],
)
def test_classify_error(error, category):
    assert classify_error(error) == category


def test_internal_error_copies_data():
    data = {"node": "vm1"}
    err = StorageError("boom", data=data)
    data["node"] = "changed"
    assert err.data == {"node": "vm1"}


def test_abnormal_closure_carries_code():
    err = AbnormalClosureError(4001, "login rejected")
    assert err.code == 4001
    assert "4001" in str(err)


def test_log_error_includes_category_and_context(caplog):
    with caplog.at_level(logging.ERROR):
        log_error("Failed to load emoji list", StorageError("db down"), context={"node_id": "vm1"})
    assert "[STORAGE]" in caplog.text
    assert "node_id=vm1" in caplog.text


class TestErrorTally:
    def setup_method(self):
        self.tally = ErrorTally()

    def test_counts_per_category_and_keeps_last_message(self):
        for i in range(3):
            self.tally.record("network", f"e{i}")
        self.tally.record("auth", "bad token")
        assert self.tally.snapshot() == {"network": (3, "e2"), "auth": (1, "bad token")}

    def test_reset(self):
        self.tally.record("storage", "x")
        self.tally.reset()
        assert self.tally.snapshot() == {}

    def test_summary_lists_categories(self, caplog):
        self.tally.record("network", "refused")
        with caplog.at_level(logging.INFO):
            self.tally.log_summary()
        assert "network: 1 (last: refused)" in caplog.text


def test_reconnect_bursts_never_escalate_to_critical(caplog):
    with caplog.at_level(logging.DEBUG):
        for _ in range(50):
            log_error("[vm1] WebSocket error", TransportError("refused"))
    assert all(r.levelno == logging.ERROR for r in caplog.records)
    assert error_tally.snapshot()["network"][0] >= 50


def test_logger_configurator_honours_debug_env(monkeypatch):
    root = logging.getLogger()
    saved = (root.level, [(h, h.formatter) for h in root.handlers])
    monkeypatch.setenv("DEBUG", "true")
    try:
        with patch("emojibot.logging_config.atexit.register"):
            LoggerConfigurator().configure()
        assert root.level == logging.DEBUG
        assert logging.getLogger("websockets").level == logging.INFO
    finally:
        root.setLevel(saved[0])
        for handler, formatter in saved[1]:
            handler.setFormatter(formatter)
