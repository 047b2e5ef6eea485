"""Wire protocol helpers."""

from .codec import decode_frame, encode_frame
from .opcodes import Opcode

__all__ = ["encode_frame", "decode_frame", "Opcode"]
