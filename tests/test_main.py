import asyncio
import json
import signal
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest

from emojibot import main as main_module
from emojibot.signal_handler import SignalHandler


def _context(abandoned=(), node_ids=("vm1", "vm2")):
    return SimpleNamespace(
        supervisor=SimpleNamespace(abandoned=set(abandoned)),
        config=SimpleNamespace(node_ids=node_ids),
    )


class TestMainLoop:
    @pytest.mark.asyncio
    async def test_exits_on_shutdown_signal(self):
        signals = SignalHandler()
        signals.stop()
        with patch("emojibot.main.asyncio.sleep", AsyncMock()):
            await main_module._run_main_loop(_context(), signals)

    @pytest.mark.asyncio
    async def test_exits_when_every_endpoint_gave_up(self):
        with patch("emojibot.main.asyncio.sleep", AsyncMock()):
            await main_module._run_main_loop(_context(abandoned={"vm1", "vm2"}), SignalHandler())

    @pytest.mark.asyncio
    async def test_keeps_running_while_some_endpoint_alive(self):
        sleep = AsyncMock(side_effect=[None, None, RuntimeError("stop")])
        with patch("emojibot.main.asyncio.sleep", sleep):
            with pytest.raises(RuntimeError):
                await main_module._run_main_loop(_context(abandoned={"vm1"}), SignalHandler())
        assert sleep.await_count == 3


def test_health_check_reports_status(tmp_path, monkeypatch):
    status = tmp_path / "status.json"
    status.write_text(json.dumps({"connections": {"vm1": True}}))
    config = tmp_path / "config.json"
    config.write_text(
        json.dumps(
            {
                "username": "EmojiBot",
                "adminPassword": "pw",
                "statusFile": str(status),
                "vms": [{"url": "wss://vm.example/", "nodeId": "vm1"}],
            }
        )
    )
    monkeypatch.setenv("EMOJIBOT_CONF_FILE", str(config))
    assert main_module.health_check() == 0


def test_health_check_fails_without_config(tmp_path, monkeypatch):
    monkeypatch.setenv("EMOJIBOT_CONF_FILE", str(tmp_path / "absent.json"))
    with pytest.raises(SystemExit):
        main_module.health_check()


class TestSignalHandler:
    @pytest.mark.asyncio
    async def test_signal_requests_shutdown_once(self, caplog):
        signals = SignalHandler()
        assert not signals.shutdown_initiated
        signals._on_signal(signal.SIGTERM)
        signals._on_signal(signal.SIGINT)
        assert signals.shutdown_initiated
        assert caplog.text.count("received, shutting down") == 1

    @pytest.mark.asyncio
    async def test_wait_returns_after_stop(self):
        signals = SignalHandler()
        waiter = asyncio.create_task(signals.wait())
        await asyncio.sleep(0)
        assert not waiter.done()
        signals.stop()
        await asyncio.wait_for(waiter, timeout=1)
