"""ConnectionSupervisor - owns one session per configured VM endpoint.

Each endpoint runs in its own asyncio task. Abnormal closures are retried
with a flat delay through Tenacity until the retry budget is spent; a normal
close (code 1000) ends the chain immediately. Endpoints never wait on each
other.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from ..constants import (
    ABNORMAL_CLOSE_CODE,
    CONNECT_STAGGER_SECONDS,
    NORMAL_CLOSE_CODE,
    RECONNECT_DELAY_SECONDS,
    RECONNECT_MAX_RETRIES,
)
from ..errors.handling import log_error
from ..errors.internal import AbnormalClosureError, TransportError
from .connector import WebSocketConnector
from .session import VMSession

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from ..commands.interpreter import CommandInterpreter
    from ..config.model import BotConfig, EndpointConfig

StatusListener = Callable[[Mapping[str, bool]], None]


class SessionTransport(Protocol):
    async def send(self, text: str) -> None: ...

    async def close(self, code: int = NORMAL_CLOSE_CODE, reason: str = "") -> None: ...

    def messages(self) -> AsyncIterator[str]: ...

    @property
    def close_code(self) -> int: ...

    @property
    def close_reason(self) -> str: ...


class Connector(Protocol):
    async def connect(self, endpoint: EndpointConfig) -> SessionTransport: ...


class ConnectionSupervisor:
    """Runs and recovers the per-endpoint sessions.

    Attributes:
        config: Bot configuration listing the endpoints.
        interpreter: Shared command interpreter handed to every session.
        connector: Factory opening transports.
        retry_delay: Seconds between a closure and the next attempt.
        max_retries: Reconnects allowed per attempt chain.
        stagger: Seconds between initial connects of consecutive endpoints.
        retry_counts: Reconnects performed in the current chain, per node.
        abandoned: Nodes whose retry budget ran out.
    """

    def __init__(
        self,
        config: BotConfig,
        interpreter: CommandInterpreter,
        connector: Connector | None = None,
        *,
        retry_delay: float = RECONNECT_DELAY_SECONDS,
        max_retries: int = RECONNECT_MAX_RETRIES,
        stagger: float = CONNECT_STAGGER_SECONDS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        status_listener: StatusListener | None = None,
    ) -> None:
        self.config = config
        self.interpreter = interpreter
        self.connector: Connector = connector or WebSocketConnector()
        self.retry_delay = retry_delay
        self.max_retries = max_retries
        self.stagger = stagger
        self.retry_counts: dict[str, int] = {}
        self.abandoned: set[str] = set()
        self._sleep = sleep
        self._status_listener = status_listener
        self._live: dict[str, VMSession] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}
        self._stopping = False

    # ----------------------------- Status ----------------------------- #
    def connection_status(self) -> Mapping[str, bool]:
        """Return a read-only ``node_id -> connected`` view of all endpoints."""
        return MappingProxyType(
            {node: self.is_connected(node) for node in self.config.node_ids}
        )

    def is_connected(self, node_id: str) -> bool:
        session = self._live.get(node_id)
        return session is not None and session.is_open

    def live_sessions(self) -> Mapping[str, VMSession]:
        return MappingProxyType(dict(self._live))

    def _publish_status(self) -> None:
        if self._status_listener is None:
            return
        try:
            self._status_listener(self.connection_status())
        except Exception as e:  # noqa: BLE001
            logging.warning(f"⚠️ Failed to publish connection status: {e}")

    # --------------------------- Lifecycle --------------------------- #
    def start(self) -> None:
        """Launch every endpoint, staggering the initial handshakes."""
        self._stopping = False
        for index, endpoint in enumerate(self.config.vms):
            self.connect(endpoint, delay=index * self.stagger)

    def connect(self, endpoint: EndpointConfig, delay: float = 0.0) -> asyncio.Task[None] | None:
        """Start a fresh attempt chain for ``endpoint``.

        A no-op when the endpoint already has an open session. A pending
        chain (waiting to reconnect) is replaced and its retry counter reset.

        Returns:
            The task running the chain, or None if nothing was started.
        """
        node = endpoint.node_id
        if self.is_connected(node):
            logging.info(f"[{node}] Already connected, skipping.")
            return None
        previous = self._tasks.get(node)
        if previous is not None and not previous.done():
            previous.cancel()
        self.retry_counts[node] = 0
        self.abandoned.discard(node)
        task = asyncio.create_task(self._run_endpoint(endpoint, delay), name=f"vm-{node}")
        self._tasks[node] = task
        return task

    async def shutdown(self) -> None:
        """Close every live session cleanly and stop pending reconnects."""
        self._stopping = True
        for node, session in list(self._live.items()):
            try:
                await session.close(NORMAL_CLOSE_CODE, "shutdown")
            except (TransportError, OSError) as e:
                logging.warning(f"⚠️ [{node}] Error while closing: {e}")
        tasks = [t for t in self._tasks.values() if not t.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._live.clear()
        self._publish_status()

    async def wait(self) -> None:
        """Wait until every endpoint chain has ended."""
        tasks = list(self._tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # -------------------------- Attempt chain -------------------------- #
    async def _run_endpoint(self, endpoint: EndpointConfig, delay: float) -> None:
        node = endpoint.node_id
        if delay:
            await self._sleep(delay)
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.retry_delay),
            retry=retry_if_exception_type(AbnormalClosureError),
            before_sleep=lambda retry_state: self._log_reconnect(node, retry_state),
            sleep=self._sleep,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    self.retry_counts[node] = attempt.retry_state.attempt_number - 1
                    await self._run_once(endpoint)
        except RetryError:
            self.abandoned.add(node)
            logging.error(f"[{node}] Max reconnection attempts reached. Giving up.")

    def _log_reconnect(self, node: str, retry_state: RetryCallState) -> None:
        logging.info(
            f"[{node}] Attempting to reconnect in {self.retry_delay}s... "
            f"(attempt {retry_state.attempt_number}/{self.max_retries})"
        )

    async def _run_once(self, endpoint: EndpointConfig) -> None:
        """Run one session to completion.

        Raises:
            AbnormalClosureError: If the session ended with a non-normal code.
        """
        node = endpoint.node_id
        try:
            transport = await self.connector.connect(endpoint)
        except TransportError as e:
            log_error(f"[{node}] WebSocket error", e, context={"url": endpoint.url})
            raise AbnormalClosureError(ABNORMAL_CLOSE_CODE, str(e)) from e

        session = VMSession(endpoint, self.config, transport, self.interpreter)
        self._live[node] = session
        self._publish_status()
        try:
            await session.on_open()
            async for raw in transport.messages():
                await session.handle_raw(raw)
                if not session.is_open:
                    break
        except TransportError as e:
            log_error(f"[{node}] WebSocket error", e)
        finally:
            if self._live.get(node) is session:
                del self._live[node]
            self._publish_status()

        code = session.close_code if session.close_code is not None else transport.close_code
        reason = session.close_reason or transport.close_reason
        logging.info(f"[{node}] Disconnected (code: {code}, reason: {reason})")
        if code != NORMAL_CLOSE_CODE and not self._stopping:
            raise AbnormalClosureError(code, reason)
