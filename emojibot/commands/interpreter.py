"""CommandInterpreter - parses chat commands and replies through the session."""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

from ..errors.handling import log_error
from .markup import render_emoji, render_emoji_list, render_help

if TYPE_CHECKING:
    from collections.abc import Coroutine

    from ..emoji.directory import EmojiDirectory
    from ..emoji.models import EmojiRecord
    from ..storage.protocols import EmojiStore

# ":name:" at the start of a message
_SHORTHAND_PATTERN = re.compile(r"^:([a-zA-Z0-9_]+):")

NO_EMOJIS_TEXT = "No emojis available for this VM."
PERMISSION_DENIED_TEXT = "Emoji command requires admin/mod."


class ReplyChannel(Protocol):
    """The owning connection as seen by the interpreter."""

    @property
    def node_id(self) -> str: ...

    @property
    def is_elevated(self) -> bool: ...

    async def send_chat(self, text: str) -> None: ...

    async def send_markup(self, html: str) -> None: ...


@dataclass(frozen=True)
class ParsedCommand:
    name: str
    args: tuple[str, ...] = field(default_factory=tuple)


class CommandInterpreter:
    """Processes command messages addressed to the bot.

    Attributes:
        prefix: Command prefix, e.g. ``"!"``.
        directory: Emoji cache consulted by ``emojilist`` and ``emoji``.
        store: Storage collaborator used to record usage events.
        shorthand: Whether ``:name:`` is accepted as ``emoji name``.
    """

    def __init__(
        self,
        prefix: str,
        directory: EmojiDirectory,
        store: EmojiStore,
        *,
        shorthand: bool = False,
    ) -> None:
        self.prefix = prefix
        self.directory = directory
        self.store = store
        self.shorthand = shorthand
        self._background: set[asyncio.Task[None]] = set()
        self._handlers = {
            "help": self._cmd_help,
            "emojilist": self._cmd_emojilist,
            "emoji": self._cmd_emoji,
        }

    def is_command(self, message: str) -> bool:
        if message.startswith(self.prefix):
            return True
        return self.shorthand and _SHORTHAND_PATTERN.match(message) is not None

    def parse(self, message: str) -> ParsedCommand | None:
        """Split a command message into a lowercase name and arguments.

        Returns:
            The parsed command, or None if the message is not a command.
        """
        if self.shorthand:
            match = _SHORTHAND_PATTERN.match(message)
            if match:
                return ParsedCommand("emoji", (match.group(1),))
        if not message.startswith(self.prefix):
            return None
        parts = message[len(self.prefix):].split()
        if not parts:
            return None
        return ParsedCommand(parts[0].lower(), tuple(parts[1:]))

    async def handle(self, channel: ReplyChannel, sender: str, message: str) -> None:
        """Run the command in ``message`` on behalf of ``sender``.

        Unknown commands produce no reply so that other participants'
        prefixed chatter is never echoed.
        """
        command = self.parse(message)
        if command is None:
            return
        handler = self._handlers.get(command.name)
        if handler is None:
            logging.debug(f"[{channel.node_id}] Ignoring unknown command '{command.name}' from {sender}")
            return
        await handler(channel, sender, command)

    async def _cmd_help(self, channel: ReplyChannel, _sender: str, _command: ParsedCommand) -> None:
        await channel.send_markup(render_help(self.prefix))

    async def _cmd_emojilist(self, channel: ReplyChannel, _sender: str, _command: ParsedCommand) -> None:
        emojis = self.directory.records(channel.node_id)
        if not emojis:
            await channel.send_chat(NO_EMOJIS_TEXT)
            return
        await channel.send_markup(render_emoji_list(emojis))

    async def _cmd_emoji(self, channel: ReplyChannel, sender: str, command: ParsedCommand) -> None:
        if not channel.is_elevated:
            await channel.send_chat(PERMISSION_DENIED_TEXT)
            return
        if not command.args:
            await channel.send_chat(f"Usage: {self.prefix}emoji <name>")
            return
        name = command.args[0]
        emoji = self.directory.lookup(channel.node_id, name)
        if emoji is None:
            await channel.send_chat(
                f"Emoji not found. Use {self.prefix}emojilist to see available emojis."
            )
            return
        await channel.send_markup(render_emoji(emoji))
        logging.info(f"[{channel.node_id}] Sent emoji '{name}' for {sender}")
        self._spawn(self._record_usage(sender, emoji, channel.node_id))

    # ------------------------- Usage events ------------------------- #
    def _spawn(self, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(coro)
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def _record_usage(self, sender: str, emoji: EmojiRecord, node_id: str) -> None:
        try:
            user = await self.store.get_user_by_username(sender)
            if user is None:
                logging.debug(f"[{node_id}] No stored user '{sender}', usage not recorded")
                return
            await self.store.append_usage_event(user.id, emoji.id, node_id)
        except Exception as e:  # noqa: BLE001
            log_error(
                "Failed to log emoji request",
                e,
                context={"node_id": node_id, "sender": sender, "emoji": emoji.name},
            )

    async def drain(self) -> None:
        """Wait for outstanding usage-event writes."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)
