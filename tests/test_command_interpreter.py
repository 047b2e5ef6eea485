from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from emojibot.commands.interpreter import (
    NO_EMOJIS_TEXT,
    PERMISSION_DENIED_TEXT,
    CommandInterpreter,
    ParsedCommand,
)
from emojibot.emoji.directory import EmojiDirectory
from tests.fixtures.fakes import FakeStore


class FakeChannel:
    def __init__(self, node_id: str = "vm1", elevated: bool = True) -> None:
        self.node_id = node_id
        self.is_elevated = elevated
        self.send_chat = AsyncMock()
        self.send_markup = AsyncMock()


class TestParse:
    def setup_method(self):
        self.interpreter = CommandInterpreter("!", EmojiDirectory(FakeStore()), FakeStore())

    def test_name_is_lowercased(self):
        assert self.interpreter.parse("!EMOJI Wave") == ParsedCommand("emoji", ("Wave",))

    def test_non_prefixed_message(self):
        assert self.interpreter.parse("hello") is None
        assert not self.interpreter.is_command("hello")

    def test_bare_prefix(self):
        assert self.interpreter.parse("!   ") is None

    def test_multi_character_prefix(self):
        interpreter = CommandInterpreter("$$", EmojiDirectory(FakeStore()), FakeStore())
        assert interpreter.parse("$$help") == ParsedCommand("help", ())
        assert interpreter.parse("!help") is None

    def test_shorthand_only_when_enabled(self):
        assert self.interpreter.parse(":wave:") is None
        self.interpreter.shorthand = True
        assert self.interpreter.is_command(":wave: hi")
        assert self.interpreter.parse(":wave: hi") == ParsedCommand("emoji", ("wave",))


class TestHandle:
    @pytest_asyncio.fixture(autouse=True)
    async def _load(self, directory):
        await directory.refresh()

    @pytest.mark.asyncio
    async def test_help_replies_with_markup(self, interpreter):
        channel = FakeChannel()
        await interpreter.handle(channel, "alice", "!help")
        channel.send_markup.assert_awaited_once()
        assert "!emojilist" in channel.send_markup.await_args.args[0]
        channel.send_chat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_emojilist_lists_node_emojis(self, interpreter):
        channel = FakeChannel("vm2")
        await interpreter.handle(channel, "alice", "!emojilist")
        html = channel.send_markup.await_args.args[0]
        assert "bar" in html
        assert "wave" not in html

    @pytest.mark.asyncio
    async def test_emojilist_empty_node_replies_plain_text(self, interpreter):
        channel = FakeChannel("vm3")
        await interpreter.handle(channel, "alice", "!emojilist")
        channel.send_chat.assert_awaited_once_with(NO_EMOJIS_TEXT)
        channel.send_markup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_emoji_requires_privilege(self, interpreter, store):
        channel = FakeChannel(elevated=False)
        await interpreter.handle(channel, "alice", "!emoji wave")
        await interpreter.drain()
        channel.send_chat.assert_awaited_once_with(PERMISSION_DENIED_TEXT)
        channel.send_markup.assert_not_awaited()
        assert store.events == []

    @pytest.mark.asyncio
    async def test_emoji_without_argument_shows_usage(self, interpreter):
        channel = FakeChannel()
        await interpreter.handle(channel, "alice", "!emoji")
        channel.send_chat.assert_awaited_once_with("Usage: !emoji <name>")

    @pytest.mark.asyncio
    async def test_unknown_emoji(self, interpreter, store):
        channel = FakeChannel()
        await interpreter.handle(channel, "alice", "!emoji nope")
        await interpreter.drain()
        channel.send_chat.assert_awaited_once_with(
            "Emoji not found. Use !emojilist to see available emojis."
        )
        assert store.events == []

    @pytest.mark.asyncio
    async def test_emoji_sends_markup_and_records_usage(self, interpreter, store):
        channel = FakeChannel()
        await interpreter.handle(channel, "alice", "!emoji wave")
        await interpreter.drain()
        channel.send_markup.assert_awaited_once()
        assert "https://img.example/wave.png" in channel.send_markup.await_args.args[0]
        assert store.events == [(10, 1, "vm1")]

    @pytest.mark.asyncio
    async def test_emoji_from_unknown_user_is_not_recorded(self, interpreter, store):
        channel = FakeChannel()
        await interpreter.handle(channel, "mallory", "!emoji wave")
        await interpreter.drain()
        channel.send_markup.assert_awaited_once()
        assert store.events == []

    @pytest.mark.asyncio
    async def test_usage_write_failure_does_not_affect_reply(self, interpreter, store):
        store.fail_append = True
        channel = FakeChannel()
        await interpreter.handle(channel, "alice", "!emoji wave")
        await interpreter.drain()
        channel.send_markup.assert_awaited_once()
        channel.send_chat.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_emoji_scoped_to_channel_node(self, interpreter):
        channel = FakeChannel("vm2")
        await interpreter.handle(channel, "alice", "!emoji wave")
        channel.send_markup.assert_not_awaited()
        channel.send_chat.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unknown_command_is_silent(self, interpreter):
        channel = FakeChannel()
        await interpreter.handle(channel, "alice", "!dance")
        channel.send_chat.assert_not_awaited()
        channel.send_markup.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_shorthand_runs_emoji_command(self, directory, store):
        interpreter = CommandInterpreter("!", directory, store, shorthand=True)
        channel = FakeChannel()
        await interpreter.handle(channel, "alice", ":wave:")
        await interpreter.drain()
        channel.send_markup.assert_awaited_once()
        assert store.events == [(10, 1, "vm1")]
