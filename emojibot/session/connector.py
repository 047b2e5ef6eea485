"""WebSocket connector for opening guacamole-protocol sessions."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI
from websockets.typing import Origin, Subprotocol

from ..config.model import EndpointConfig
from ..constants import (
    ABNORMAL_CLOSE_CODE,
    CONNECT_TIMEOUT_SECONDS,
    GUACAMOLE_SUBPROTOCOL,
    NORMAL_CLOSE_CODE,
)
from ..errors.internal import TransportError


class WebSocketTransport:
    """Text transport over one open websocket.

    Attributes:
        ws: The underlying websockets client connection.
    """

    def __init__(self, ws: ClientConnection) -> None:
        self.ws = ws

    async def send(self, text: str) -> None:
        try:
            await self.ws.send(text)
        except ConnectionClosed as e:
            raise TransportError(f"Send on closed websocket: {e}") from e

    async def close(self, code: int = NORMAL_CLOSE_CODE, reason: str = "") -> None:
        await self.ws.close(code=code, reason=reason)

    async def messages(self) -> AsyncIterator[str]:
        """Yield inbound text messages until the websocket closes."""
        try:
            async for message in self.ws:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                yield message
        except ConnectionClosed:
            return

    @property
    def close_code(self) -> int:
        code = self.ws.close_code
        return code if code is not None else ABNORMAL_CLOSE_CODE

    @property
    def close_reason(self) -> str:
        return self.ws.close_reason or ""


class WebSocketConnector:
    """Opens websocket transports for configured endpoints."""

    def __init__(self, open_timeout: float = CONNECT_TIMEOUT_SECONDS) -> None:
        self.open_timeout = open_timeout

    async def connect(self, endpoint: EndpointConfig) -> WebSocketTransport:
        """Open a websocket to ``endpoint`` with the guacamole subprotocol.

        Raises:
            TransportError: If the connection cannot be established.
        """
        logging.info(f"🔌 [{endpoint.node_id}] Connecting to {endpoint.url}")
        try:
            ws = await connect(
                endpoint.url,
                subprotocols=[Subprotocol(GUACAMOLE_SUBPROTOCOL)],
                origin=Origin(endpoint.effective_origin),
                open_timeout=self.open_timeout,
                ping_interval=None,
                max_size=None,
            )
        except (OSError, InvalidHandshake, InvalidURI, asyncio.TimeoutError) as e:
            raise TransportError(
                f"WebSocket connection failed: {str(e)}",
                data={"node_id": endpoint.node_id, "url": endpoint.url},
            ) from e
        return WebSocketTransport(ws)
