import pytest

from emojibot.commands.interpreter import CommandInterpreter
from emojibot.config.model import BotConfig
from emojibot.emoji.directory import EmojiDirectory
from emojibot.emoji.models import UserRecord
from tests.fixtures.fakes import FakeStore, make_config, make_emoji


@pytest.fixture
def bot_config() -> BotConfig:
    return make_config()


@pytest.fixture
def token_config() -> BotConfig:
    return make_config(auth_type="token", bot_token="tok-123", admin_password="")


@pytest.fixture
def store() -> FakeStore:
    return FakeStore(
        emojis={
            "vm1": [make_emoji(1, "wave", "vm1"), make_emoji(2, "bar", "vm1", "vm2")],
            "vm2": [make_emoji(2, "bar", "vm1", "vm2")],
        },
        users=[UserRecord(id=10, username="alice")],
    )


@pytest.fixture
def directory(store) -> EmojiDirectory:
    return EmojiDirectory(store, ["vm1", "vm2"])


@pytest.fixture
def interpreter(directory, store) -> CommandInterpreter:
    return CommandInterpreter("!", directory, store)
