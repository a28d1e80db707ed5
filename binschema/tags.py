"""Declarative layout tags attached to schema fields and types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


def _require_width(tag: str, value: int) -> None:
    if value <= 0:
        raise ValueError(f"{tag} width must be positive: {value}")


@dataclass(frozen=True, slots=True)
class Ignore:
    pass


@dataclass(frozen=True, slots=True)
class Size:
    """Byte width of a sized integer, enum ordinal or fixed-width string."""

    bytes: int

    def __post_init__(self) -> None:
        _require_width("Size", self.bytes)


@dataclass(frozen=True, slots=True)
class ArraySize:
    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"ArraySize out of range: {self.count}")


@dataclass(frozen=True, slots=True)
class ArrayLengthSize:
    bytes: int

    def __post_init__(self) -> None:
        _require_width("ArrayLengthSize", self.bytes)


@dataclass(frozen=True, slots=True)
class DefinedArraySize:
    name: str


@dataclass(frozen=True, slots=True)
class Define:
    name: str


@dataclass(frozen=True, slots=True)
class ObjSize:
    pass


@dataclass(frozen=True, slots=True)
class PointerBase:
    """Pointers inside a value of the tagged type are relative to its start."""


@dataclass(frozen=True, slots=True)
class PointerSize:
    bytes: int

    def __post_init__(self) -> None:
        _require_width("PointerSize", self.bytes)


@dataclass(frozen=True, slots=True)
class Inline:
    pass


@dataclass(frozen=True, slots=True)
class ByteOrderMark:
    """
    The tagged primitive is probed big-endian; its value then selects the
    session byte order for every read that follows.
    """

    if_be: int
    if_le: int


@dataclass(frozen=True, slots=True)
class MagicStr:
    text: str


@dataclass(frozen=True, slots=True)
class MagicStrLE:
    pass


@dataclass(frozen=True, slots=True)
class TypeChoiceInt:
    key: int
    type: type


@dataclass(frozen=True, slots=True)
class TypeChoiceStr:
    key: str
    type: type


class LengthPosType(str, Enum):
    BEFORE_PTR = "before_ptr"
    AFTER_PTR = "after_ptr"
    BEFORE_DATA = "before_data"


@dataclass(frozen=True, slots=True)
class LengthPos:
    """Placement of an explicit length when the value is encoded."""

    position: LengthPosType = LengthPosType.BEFORE_PTR


Tag = Union[
    Ignore,
    Size,
    ArraySize,
    ArrayLengthSize,
    DefinedArraySize,
    Define,
    ObjSize,
    PointerBase,
    PointerSize,
    Inline,
    ByteOrderMark,
    MagicStr,
    MagicStrLE,
    TypeChoiceInt,
    TypeChoiceStr,
    LengthPos,
]

REPEATABLE_TAGS = (TypeChoiceInt, TypeChoiceStr)

__all__ = [
    "ArrayLengthSize",
    "ArraySize",
    "ByteOrderMark",
    "Define",
    "DefinedArraySize",
    "Ignore",
    "Inline",
    "LengthPos",
    "LengthPosType",
    "MagicStr",
    "MagicStrLE",
    "ObjSize",
    "PointerBase",
    "PointerSize",
    "REPEATABLE_TAGS",
    "Size",
    "Tag",
    "TypeChoiceInt",
    "TypeChoiceStr",
]
