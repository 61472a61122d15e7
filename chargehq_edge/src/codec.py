"""
Pure decoders that turn raw Modbus register words into typed values.

Every decoder goes through :func:`words_to_bytes`, which lays the 16-bit
words out big-endian in word order.  Decoders are selected by
:class:`~chargehq_edge.src.registers.RegisterKind` through a lookup table,
never by register address.

This module performs no I/O.  Malformed data raises
:class:`~chargehq_edge.src.errors.DecodeError`.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from chargehq_edge.src.errors import DecodeError
from chargehq_edge.src.registers import RegisterKind

# ---------------------------------------------------------------------------
# Word / byte conversion
# ---------------------------------------------------------------------------


def words_to_bytes(words: Sequence[int]) -> bytes:
    """Concatenate 16-bit words into a big-endian byte string (2 bytes/word)."""
    return b"".join((w & 0xFFFF).to_bytes(2, "big") for w in words)


# ---------------------------------------------------------------------------
# Type decoders
# ---------------------------------------------------------------------------


def decode_int16(words: Sequence[int]) -> int:
    """Interpret the first word as signed 16-bit (two's complement).

    Words beyond the first are ignored.
    """
    if len(words) < 1:
        raise DecodeError("INT16 needs 1 word, got 0")
    val = words[0] & 0xFFFF
    if val >= 0x8000:
        val -= 0x10000
    return val


def decode_uint32(words: Sequence[int]) -> int:
    """Assemble two words (high word first) into an unsigned 32-bit value."""
    data = words_to_bytes(words)
    if len(data) != 4:
        raise DecodeError(f"UINT32 needs 4 bytes, got {len(data)}")
    return int.from_bytes(data, "big", signed=False)


def decode_string(words: Sequence[int]) -> str:
    """Decode packed ASCII (two chars per word) into text.

    Zero bytes are padding wherever they appear and are dropped before the
    remainder is decoded as UTF-8.
    """
    data = words_to_bytes(words).replace(b"\x00", b"")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"STRING is not valid UTF-8: {data!r}") from exc


_DECODERS: dict[RegisterKind, Callable[[Sequence[int]], int | str]] = {
    RegisterKind.INT16: decode_int16,
    RegisterKind.UINT32: decode_uint32,
    RegisterKind.STRING: decode_string,
}


def decode(kind: RegisterKind, words: Sequence[int]) -> int | str:
    """Decode *words* with the decoder registered for *kind*.

    Raises:
        DecodeError: If the words do not fit the type.
    """
    return _DECODERS[kind](words)
