from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Iterator, List, Optional


class ReferenceType(str, Enum):
    """How non-inline object fields are addressed."""

    NONE = "none"
    ABSOLUTE_POINTER = "absolute"
    SELF_RELATIVE_POINTER = "self_relative"


class PointerResolver:
    """
    Converts stored pointer values to absolute stream offsets.

    Absolute pointers are relative to the innermost pointer base; the stack
    starts with a single base of 0 and never drops below one entry.
    """

    def __init__(self, ref_type: ReferenceType) -> None:
        self.ref_type = ref_type
        self._bases: List[int] = [0]

    @property
    def current(self) -> int:
        return self._bases[-1]

    @property
    def depth(self) -> int:
        return len(self._bases)

    @property
    def indirect(self) -> bool:
        return self.ref_type is not ReferenceType.NONE

    def push(self, offset: int) -> None:
        self._bases.append(offset)

    def pop(self) -> int:
        if len(self._bases) == 1:
            raise RuntimeError("pointer base stack underflow")
        return self._bases.pop()

    @contextmanager
    def based_at(self, offset: int) -> Iterator[int]:
        self.push(offset)
        try:
            yield offset
        finally:
            self.pop()

    def based(self, raw: int) -> int:
        return raw + self.current

    def resolve(self, raw: int, pointer_offset: int) -> Optional[int]:
        """Absolute target of `raw` read at `pointer_offset`; None if absent."""
        if raw == 0:
            return None
        if self.ref_type is ReferenceType.SELF_RELATIVE_POINTER:
            return raw + pointer_offset
        return self.based(raw)
