"""VMSession - one protocol session with a single VM endpoint.

Frames are handled strictly one at a time in arrival order. Dispatch goes
through the ``TRANSITIONS`` table in :mod:`emojibot.session.state`; each
handler may update the session state and send frames back on the transport.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from ..config.model import AuthScheme
from ..constants import AUTH_FAILURE_CLOSE_CODE, NORMAL_CLOSE_CODE
from ..errors.handling import log_error
from ..errors.internal import AuthenticationError
from ..protocol.codec import decode_frame, encode_frame
from ..protocol.opcodes import (
    ADMIN_HTML,
    ADMIN_LOGIN,
    ADMIN_STATUS_ADMIN,
    ELEVATED_STATUSES,
    RESULT_OK,
    Opcode,
)
from .state import Phase, Privilege, SessionState, find_transition

if TYPE_CHECKING:
    from ..commands.interpreter import CommandInterpreter
    from ..config.model import BotConfig, EndpointConfig


class Transport(Protocol):
    """Minimal text transport a session writes to."""

    async def send(self, text: str) -> None: ...

    async def close(self, code: int = NORMAL_CLOSE_CODE, reason: str = "") -> None: ...


class VMSession:
    """Protocol state machine for one live connection.

    Attributes:
        endpoint: Endpoint this session is attached to.
        config: Process-wide bot configuration.
        transport: Open transport, owned by the supervisor entry.
        interpreter: Command interpreter receiving chat commands.
        state: Phase, privilege and handshake flags.
        close_code: Code used when this side closed the session, if it did.
    """

    def __init__(
        self,
        endpoint: EndpointConfig,
        config: BotConfig,
        transport: Transport,
        interpreter: CommandInterpreter,
    ) -> None:
        self.endpoint = endpoint
        self.config = config
        self.transport = transport
        self.interpreter = interpreter
        self.state = SessionState(display_name=config.username)
        self.close_code: int | None = None
        self.close_reason = ""

    # ----------------------- ReplyChannel API ----------------------- #
    @property
    def node_id(self) -> str:
        return self.endpoint.node_id

    @property
    def is_elevated(self) -> bool:
        return self.state.is_elevated

    @property
    def is_open(self) -> bool:
        return self.state.phase is not Phase.CLOSED

    async def send_chat(self, text: str) -> None:
        await self.send([Opcode.CHAT, text])

    async def send_markup(self, html: str) -> None:
        await self.send([Opcode.ADMIN, ADMIN_HTML, html])

    # --------------------------- Transport --------------------------- #
    async def send(self, fields: Sequence[str]) -> None:
        await self.transport.send(encode_frame([str(f) for f in fields]))

    async def close(self, code: int = NORMAL_CLOSE_CODE, reason: str = "") -> None:
        """Close the session once; later calls are ignored."""
        if self.state.phase is Phase.CLOSED:
            return
        self.close_code = code
        self.close_reason = reason
        self.state.advance(Phase.CLOSED)
        await self.transport.close(code, reason)

    async def on_open(self) -> None:
        logging.info(f"[{self.node_id}] WebSocket opened, requesting username: {self.config.username}")
        await self.send([Opcode.RENAME, self.config.username])

    async def handle_raw(self, raw: str | bytes) -> None:
        """Decode one inbound frame and run the matching transition."""
        if self.state.phase is Phase.CLOSED:
            return
        fields = decode_frame(raw)
        transition = find_transition(fields)
        if transition is None:
            if fields:
                logging.debug(f"[{self.node_id}] Unhandled opcode '{fields[0]}'")
            return
        await getattr(self, transition.handler)(fields)

    # --------------------------- Handlers --------------------------- #
    async def on_nop(self, _fields: list[str]) -> None:
        await self.send([Opcode.NOP])

    async def on_auth(self, _fields: list[str]) -> None:
        self.state.auth_challenged = True
        self.state.advance(Phase.AWAITING_AUTH)
        if self.config.auth_type is AuthScheme.TOKEN:
            await self.send([Opcode.LOGIN, self.config.bot_token])
            return
        log_error(
            f"[{self.node_id}] Server requires account authentication",
            AuthenticationError(
                'bot token needed: set auth_type to "token" and provide a valid bot_token in config'
            ),
            context={"node_id": self.node_id},
        )
        await self.close(AUTH_FAILURE_CLOSE_CODE, "auth scheme mismatch")

    async def on_rename_self(self, fields: list[str]) -> None:
        if len(fields) > 3 and fields[3]:
            self.state.display_name = fields[3]
        self.state.advance(Phase.RENAME_CONFIRMED)
        logging.info(f"[{self.node_id}] Username confirmed: {self.state.display_name}")
        if self.state.auth_challenged and self.state.phase is not Phase.AUTHENTICATED:
            self.state.attach_deferred = True
            return
        await self._send_attach()

    async def on_connect(self, fields: list[str]) -> None:
        if len(fields) < 2 or fields[1] != RESULT_OK:
            logging.warning(f"[{self.node_id}] Attach to node refused: {fields[1:]}")
            return
        self.state.advance(Phase.CONNECTED)
        logging.info(f"[{self.node_id}] Attached to node")
        if self.state.auth_challenged:
            # privileges come from the account login; on_login elevates otherwise
            if self.state.phase is Phase.AUTHENTICATED:
                self._elevate()
            return
        if self.config.auth_type is AuthScheme.PASSWORD and self.config.wants_elevation:
            logging.info(f"[{self.node_id}] Logging in as {self.config.login_as}...")
            await self.send([Opcode.ADMIN, ADMIN_LOGIN, self.config.admin_password])

    async def on_login(self, fields: list[str]) -> None:
        if len(fields) > 1 and fields[1] == RESULT_OK:
            if self.state.attach_deferred:
                self.state.attach_deferred = False
                await self._send_attach()
            self._elevate()
            self.state.advance(Phase.AUTHENTICATED)
            logging.info(f"[{self.node_id}] Logged in with bot token.")
            return
        reason = fields[2] if len(fields) > 2 and fields[2] else "Unknown error"
        log_error(
            f"[{self.node_id}] Bot token login failed",
            AuthenticationError(reason),
            context={"node_id": self.node_id},
        )
        await self.close(AUTH_FAILURE_CLOSE_CODE, "login rejected")

    async def on_admin_login(self, fields: list[str]) -> None:
        status = fields[2] if len(fields) > 2 else ""
        if status in ELEVATED_STATUSES:
            self._elevate()
            role = "Admin" if status == ADMIN_STATUS_ADMIN else "Moderator"
            logging.info(f"[{self.node_id}] Successfully logged in as {role}")
        else:
            logging.error(f"[{self.node_id}] Admin login failed: {status}")
        self.state.advance(Phase.AUTHENTICATED)

    async def on_monitor_reply(self, fields: list[str]) -> None:
        response = fields[2] if len(fields) > 2 else ""
        logging.info(f"[{self.node_id}] QEMU monitor response: {response}")

    async def on_chat(self, fields: list[str]) -> None:
        if len(fields) < 3:
            return
        sender, message = fields[1], fields[2]
        if not sender or not message or not self.interpreter.is_command(message):
            return
        try:
            await self.interpreter.handle(self, sender, message)
        except Exception as e:  # noqa: BLE001
            log_error(f"[{self.node_id}] Error handling command", e, context={"sender": sender})

    async def on_ignored(self, fields: list[str]) -> None:
        logging.debug(f"[{self.node_id}] Ignoring '{fields[0]}' frame")

    # ---------------------------- Helpers ---------------------------- #
    async def _send_attach(self) -> None:
        if self.state.attach_sent:
            return
        self.state.attach_sent = True
        await self.send([Opcode.CONNECT, self.node_id])

    def _elevate(self) -> None:
        self.state.privilege = Privilege.ELEVATED
