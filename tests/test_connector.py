from unittest.mock import AsyncMock, Mock, patch

import pytest
from websockets.exceptions import ConnectionClosedError, InvalidURI
from websockets.frames import Close

from emojibot.config.model import EndpointConfig
from emojibot.errors.internal import TransportError
from emojibot.session.connector import WebSocketConnector, WebSocketTransport


class _FakeWS:
    def __init__(self, messages, close_code=None, close_reason=None):
        self._messages = list(messages)
        self.close_code = close_code
        self.close_reason = close_reason
        self.send = AsyncMock()
        self.close = AsyncMock()

    def __aiter__(self):
        return self

    async def __anext__(self):
        if not self._messages:
            raise ConnectionClosedError(Close(1006, ""), None)
        return self._messages.pop(0)


ENDPOINT = EndpointConfig(url="wss://vm.example/vm1", node_id="vm1")


class TestWebSocketConnector:
    @pytest.mark.asyncio
    async def test_connect_uses_guacamole_subprotocol_and_origin(self):
        ws = Mock()
        with patch("emojibot.session.connector.connect", AsyncMock(return_value=ws)) as connect:
            transport = await WebSocketConnector(open_timeout=3).connect(ENDPOINT)

        assert transport.ws is ws
        args, kwargs = connect.call_args
        assert args == ("wss://vm.example/vm1",)
        assert kwargs["subprotocols"] == ["guacamole"]
        assert kwargs["origin"] == "https://computernewb.com"
        assert kwargs["open_timeout"] == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [OSError("refused"), TimeoutError(), InvalidURI("x", "bad")])
    async def test_connect_failures_become_transport_errors(self, error):
        with patch("emojibot.session.connector.connect", AsyncMock(side_effect=error)):
            with pytest.raises(TransportError):
                await WebSocketConnector().connect(ENDPOINT)


class TestWebSocketTransport:
    @pytest.mark.asyncio
    async def test_messages_decode_bytes_and_stop_on_close(self):
        transport = WebSocketTransport(_FakeWS(["4.chat;", b"3.nop;"]))
        received = [m async for m in transport.messages()]
        assert received == ["4.chat;", "3.nop;"]

    def test_missing_close_code_reported_abnormal(self):
        transport = WebSocketTransport(_FakeWS([]))
        assert transport.close_code == 1006
        assert transport.close_reason == ""

    @pytest.mark.asyncio
    async def test_send_on_closed_socket_raises_transport_error(self):
        ws = _FakeWS([])
        ws.send.side_effect = ConnectionClosedError(None, None)
        with pytest.raises(TransportError):
            await WebSocketTransport(ws).send("3.nop;")

    @pytest.mark.asyncio
    async def test_close_passes_code_and_reason(self):
        ws = _FakeWS([], close_code=1000)
        await WebSocketTransport(ws).close(1000, "bye")
        ws.close.assert_awaited_once_with(code=1000, reason="bye")
