"""Guacamole-style length-prefixed frame codec.

A frame is a sequence of ``<byte-length>.<value>`` fields joined by ``,`` and
terminated by ``;``. Lengths count UTF-8 bytes, so field values never need
escaping.
"""

from __future__ import annotations

from collections.abc import Sequence

_DOT = ord(".")
_COMMA = ord(",")
_SEMICOLON = ord(";")


def encode_frame(fields: Sequence[str]) -> str:
    """Encode ``fields`` into a single terminated frame.

    Args:
        fields: Ordered text fields; the first one is the opcode.

    Returns:
        The wire representation, e.g. ``"3.nop;"``.
    """
    return (
        ",".join(f"{len(field.encode('utf-8'))}.{field}" for field in fields) + ";"
    )


def decode_frame(raw: str | bytes) -> list[str]:
    """Decode one frame into its fields.

    Never raises. Parsing stops at the first malformed length prefix,
    truncated field or missing separator and the fields read so far are
    returned.

    Args:
        raw: Frame text as received from the transport.

    Returns:
        List of decoded fields (possibly empty).
    """
    data = raw.encode("utf-8") if isinstance(raw, str) else bytes(raw)
    fields: list[str] = []
    pos = 0
    end = len(data)
    while pos < end:
        dot = data.find(_DOT, pos)
        if dot == -1:
            break
        prefix = data[pos:dot]
        if not prefix or not prefix.isdigit():
            break
        length = int(prefix)
        start = dot + 1
        stop = start + length
        if stop > end:
            break
        fields.append(data[start:stop].decode("utf-8", errors="replace"))
        if stop >= end:
            break
        separator = data[stop]
        if separator == _COMMA:
            pos = stop + 1
        else:
            # ';' completes the frame, anything else is a broken terminator
            break
    return fields


__all__ = ["encode_frame", "decode_frame"]
