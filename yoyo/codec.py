"""Base64 byte-to-text codec used to embed metadata documents."""

from __future__ import annotations

from typing import Dict, Union

from yoyo.exceptions import MalformedEncoding

ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
PAD = "="

_LOOKUP: Dict[str, int] = {symbol: index for index, symbol in enumerate(ALPHABET)}

BytesLike = Union[bytes, bytearray, memoryview]


def encode(data: BytesLike) -> str:
    """Return the base64 text for *data*.

    Every 3-byte group becomes four symbols taken from bits 23-18, 17-12,
    11-6 and 5-0 of the group. A trailing group of one byte is padded with
    ``==`` and a trailing group of two bytes with ``=``. Empty input encodes
    to an empty string.
    """

    raw = bytes(data)
    if not raw:
        return ""

    out = []
    full = len(raw) - len(raw) % 3
    for offset in range(0, full, 3):
        group = (raw[offset] << 16) | (raw[offset + 1] << 8) | raw[offset + 2]
        out.append(ALPHABET[(group >> 18) & 0x3F])
        out.append(ALPHABET[(group >> 12) & 0x3F])
        out.append(ALPHABET[(group >> 6) & 0x3F])
        out.append(ALPHABET[group & 0x3F])

    remainder = len(raw) - full
    if remainder == 1:
        group = raw[full] << 16
        out.append(ALPHABET[(group >> 18) & 0x3F])
        out.append(ALPHABET[(group >> 12) & 0x3F])
        out.append(PAD * 2)
    elif remainder == 2:
        group = (raw[full] << 16) | (raw[full + 1] << 8)
        out.append(ALPHABET[(group >> 18) & 0x3F])
        out.append(ALPHABET[(group >> 12) & 0x3F])
        out.append(ALPHABET[(group >> 6) & 0x3F])
        out.append(PAD)

    return "".join(out)


def decode(text: str) -> bytes:
    """Return the bytes encoded by *text*.

    Raises:
        MalformedEncoding: If *text* is not canonical padded base64.
    """

    if not isinstance(text, str):
        raise MalformedEncoding("base64 payload must be a string")
    if not text:
        return b""
    if len(text) % 4:
        raise MalformedEncoding(f"base64 length must be a multiple of 4 (got {len(text)})")

    padding = len(text) - len(text.rstrip(PAD))
    if padding > 2:
        raise MalformedEncoding("base64 payload carries more than two padding characters")

    body = text[: len(text) - padding] if padding else text
    values = []
    for position, symbol in enumerate(body):
        value = _LOOKUP.get(symbol)
        if value is None:
            raise MalformedEncoding(f"invalid base64 symbol {symbol!r} at offset {position}")
        values.append(value)

    out = bytearray()
    full = len(values) - len(values) % 4
    for offset in range(0, full, 4):
        group = (
            (values[offset] << 18)
            | (values[offset + 1] << 12)
            | (values[offset + 2] << 6)
            | values[offset + 3]
        )
        out.append((group >> 16) & 0xFF)
        out.append((group >> 8) & 0xFF)
        out.append(group & 0xFF)

    tail = values[full:]
    if len(tail) == 2:
        group = (tail[0] << 18) | (tail[1] << 12)
        if group & 0xFFFF:
            raise MalformedEncoding("non-zero trailing bits in padded base64 group")
        out.append((group >> 16) & 0xFF)
    elif len(tail) == 3:
        group = (tail[0] << 18) | (tail[1] << 12) | (tail[2] << 6)
        if group & 0xFF:
            raise MalformedEncoding("non-zero trailing bits in padded base64 group")
        out.append((group >> 16) & 0xFF)
        out.append((group >> 8) & 0xFF)

    return bytes(out)


__all__ = ["ALPHABET", "PAD", "decode", "encode"]
