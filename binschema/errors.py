"""Failure kinds raised while decoding.

Every error here is fatal for the decode call that raised it; the session
does not attempt to produce a partial object graph.
"""

from __future__ import annotations

from typing import Optional


class DecodeError(Exception):
    """Base class for all decode failures."""

    def __init__(self, message: str, *, offset: Optional[int] = None) -> None:
        if offset is not None:
            message = f"{message} (at 0x{offset:08X})"
        super().__init__(message)
        self.offset = offset


class SchemaError(DecodeError):
    """Raised when a schema declaration cannot drive a decode."""


class TruncatedInput(DecodeError):
    """Raised when attempting to read past the end of the buffer."""

    def __init__(self, needed: int, available: int, *, offset: Optional[int] = None) -> None:
        super().__init__(
            f"Insufficient bytes: need {needed}, have {available} remaining",
            offset=offset,
        )
        self.needed = needed
        self.available = available


class MagicMismatch(DecodeError):
    def __init__(self, expected: str, observed: str, *, offset: Optional[int] = None) -> None:
        super().__init__(
            f"Invalid magic - expected {expected!r}, got {observed!r}", offset=offset
        )
        self.expected = expected
        self.observed = observed


class ObjectSizeMismatch(DecodeError):
    def __init__(self, declared: int, actual: int, start: int, end: int) -> None:
        super().__init__(
            f"Object size 0x{declared:08X} does not match actual object size "
            f"(0x{actual:08X})! Object start: 0x{start:08X}, "
            f"current stream position: 0x{end:08X}."
        )
        self.declared = declared
        self.actual = actual
        self.start = start
        self.end = end


class UnsupportedPrimitiveKind(DecodeError):
    def __init__(self, kind: str, *, offset: Optional[int] = None) -> None:
        super().__init__(f"Unsupported primitive: {kind}", offset=offset)
        self.kind = kind


class InvalidByteOrderMark(DecodeError):
    def __init__(
        self, value: int, if_be: int, if_le: int, *, offset: Optional[int] = None
    ) -> None:
        super().__init__(
            f"Unrecognized ByteOrderMark: 0x{value:08X}, expected 0x{if_be:08X} "
            f"for BE and 0x{if_le:08X} for LE respectively.",
            offset=offset,
        )
        self.value = value
        self.if_be = if_be
        self.if_le = if_le


class UnresolvedGenericType(DecodeError):
    def __init__(self, param: str) -> None:
        super().__init__(f"Type parameter {param!r} is not bound by any enclosing field")
        self.param = param


class AbstractTypeInstantiation(DecodeError):
    def __init__(self, cls: type, *, offset: Optional[int] = None) -> None:
        super().__init__(
            f"Can not instantiate abstract type {cls.__qualname__}. "
            "Check for an invalid type choice?",
            offset=offset,
        )
        self.cls = cls


class MalformedDefinition(DecodeError):
    def __init__(self, name: str, value: object) -> None:
        if value is None:
            message = f"Definition {name!r} is not set"
        else:
            message = f"Definition {name!r} is not a number: {value!r}"
        super().__init__(message)
        self.name = name
        self.value = value


__all__ = [
    "AbstractTypeInstantiation",
    "DecodeError",
    "InvalidByteOrderMark",
    "MagicMismatch",
    "MalformedDefinition",
    "ObjectSizeMismatch",
    "SchemaError",
    "TruncatedInput",
    "UnresolvedGenericType",
    "UnsupportedPrimitiveKind",
]
