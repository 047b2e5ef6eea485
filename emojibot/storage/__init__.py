from .json_store import JsonEmojiStore
from .protocols import EmojiStore

__all__ = ["EmojiStore", "JsonEmojiStore"]
