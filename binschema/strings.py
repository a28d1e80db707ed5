"""String readers used for `STRING` fields and type-choice probes."""

from __future__ import annotations

from .coding import Cursor

DEFAULT_ENCODING = "latin-1"


def read_string(cursor: Cursor, encoding: str = DEFAULT_ENCODING) -> str:
    """Read a NUL-terminated string, consuming the terminator."""
    out = bytearray()
    while True:
        byte = cursor.read_bytes(1)
        if byte == b"\x00":
            break
        out += byte
    return out.decode(encoding, errors="replace")


def read_padded_string(cursor: Cursor, size: int, encoding: str = DEFAULT_ENCODING) -> str:
    """Read exactly `size` bytes; the text ends at the first NUL."""
    raw = cursor.read_bytes(size)
    end = raw.find(b"\x00")
    if end != -1:
        raw = raw[:end]
    return raw.decode(encoding, errors="replace")


__all__ = ["DEFAULT_ENCODING", "read_padded_string", "read_string"]
