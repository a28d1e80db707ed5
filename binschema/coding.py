"""Random-access byte cursor used by the decoder."""

from __future__ import annotations

import struct
from typing import BinaryIO, Literal, Protocol, Union

from .errors import TruncatedInput

ByteOrder = Literal["little", "big"]

_INT_FORMATS = {1: "b", 2: "h", 4: "i", 8: "q"}


class Cursor(Protocol):
    order: ByteOrder

    @property
    def position(self) -> int: ...
    def seek(self, offset: int) -> None: ...
    def read_bytes(self, count: int) -> bytes: ...
    def read_int(self, width: int, signed: bool = True) -> int: ...
    def read_float(self) -> float: ...
    def read_double(self) -> float: ...


class DataCursor:
    """
    Seekable reader over an in-memory buffer.

    `order` is consulted on every multi-byte read, so assigning it switches
    the byte order of everything read afterwards.
    """

    def __init__(
        self, buf: Union[bytes, bytearray, memoryview], order: ByteOrder = "little"
    ) -> None:
        self.buf = bytes(buf)
        self.pos = 0
        self.order = order

    @classmethod
    def from_file(cls, fp: BinaryIO, order: ByteOrder = "little") -> "DataCursor":
        return cls(fp.read(), order)

    @property
    def position(self) -> int:
        return self.pos

    def __len__(self) -> int:
        return len(self.buf)

    def remaining(self) -> int:
        return len(self.buf) - self.pos

    def seek(self, offset: int) -> None:
        if not 0 <= offset <= len(self.buf):
            raise TruncatedInput(0, len(self.buf) - offset, offset=offset)
        self.pos = offset

    def _require(self, count: int) -> None:
        if self.pos + count > len(self.buf):
            raise TruncatedInput(count, self.remaining(), offset=self.pos)

    def _unpack(self, fmt: str) -> Union[int, float]:
        size = struct.calcsize(fmt)
        self._require(size)
        prefix = "<" if self.order == "little" else ">"
        (value,) = struct.unpack_from(prefix + fmt, self.buf, self.pos)
        self.pos += size
        return value

    def read_bytes(self, count: int) -> bytes:
        self._require(count)
        data = self.buf[self.pos : self.pos + count]
        self.pos += count
        return data

    def peek_bytes(self, count: int) -> bytes:
        self._require(count)
        return self.buf[self.pos : self.pos + count]

    def read_int(self, width: int, signed: bool = True) -> int:
        fmt = _INT_FORMATS.get(width)
        if fmt is None:
            # Odd widths (e.g. 3-byte offsets) fall back to int.from_bytes.
            return int.from_bytes(self.read_bytes(width), self.order, signed=signed)
        return int(self._unpack(fmt if signed else fmt.upper()))

    def read_float(self) -> float:
        return float(self._unpack("f"))

    def read_double(self) -> float:
        return float(self._unpack("d"))


__all__ = ["ByteOrder", "Cursor", "DataCursor"]
