from .directory import EmojiDirectory
from .models import EmojiRecord, UsageEvent, UserRecord

__all__ = ["EmojiDirectory", "EmojiRecord", "UserRecord", "UsageEvent"]
