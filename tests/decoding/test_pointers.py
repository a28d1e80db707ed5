from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List

from binschema import (
    INT,
    STRING,
    BinaryDecoder,
    DecoderConfig,
    Inline,
    ListOf,
    PointerBase,
    PointerResolver,
    PointerSize,
    ReferenceType,
    SchemaRegistry,
    schema,
    slot,
)

REG = SchemaRegistry()


def _decoder(data: bytes, ref: ReferenceType = ReferenceType.ABSOLUTE_POINTER) -> BinaryDecoder:
    return BinaryDecoder(data, "little", ref, config=DecoderConfig(), registry=REG)


def _image(size: int, *chunks: tuple[int, bytes]) -> bytes:
    buf = bytearray(size)
    for offset, payload in chunks:
        buf[offset : offset + len(payload)] = payload
    return bytes(buf)


def _u32(value: int) -> bytes:
    return struct.pack("<I", value)


@schema(slot("value", INT), registry=REG)
@dataclass
class Leaf:
    value: int = 0


@schema(slot("child", Leaf), registry=REG, tags=(PointerBase(),))
@dataclass
class BasedHolder:
    child: object = None


@schema(slot("child", Leaf), slot("tail", INT), registry=REG)
@dataclass
class Holder:
    child: object = None
    tail: int = 0


@dataclass
class ProbedBased:
    leaf: object = None
    seen_base: int = -1

    def decode_extra(self, decoder: BinaryDecoder) -> None:
        self.seen_base = decoder.addressing.current


REG.register(ProbedBased, [slot("leaf", Leaf)], tags=(PointerBase(),))


@schema(slot("based", ProbedBased), slot("after", Leaf), registry=REG)
@dataclass
class Root:
    based: object = None
    after: object = None


def test_resolver_adds_current_base() -> None:
    resolver = PointerResolver(ReferenceType.ABSOLUTE_POINTER)
    resolver.push(0x4)
    assert resolver.resolve(0x10, pointer_offset=0x40) == 0x14
    assert resolver.resolve(0, pointer_offset=0x40) is None
    assert resolver.pop() == 0x4
    assert resolver.current == 0


def test_resolver_self_relative_ignores_base() -> None:
    resolver = PointerResolver(ReferenceType.SELF_RELATIVE_POINTER)
    resolver.push(0x100)
    assert resolver.resolve(0x8, pointer_offset=0x20) == 0x28


def test_absolute_pointer_against_base() -> None:
    data = _image(0x18, (0x4, _u32(0x10)), (0x14, _u32(0x11223344)))
    dec = _decoder(data)
    dec.cursor.seek(0x4)
    holder = dec.decode(BasedHolder)
    assert holder.child.value == 0x11223344
    assert dec.position == 0x8
    assert dec.addressing.depth == 1


def test_zero_pointer_is_absent_without_seek() -> None:
    data = _u32(0) + _u32(42)
    dec = _decoder(data)
    holder = dec.decode(Holder)
    assert holder.child is None
    assert holder.tail == 42
    assert dec.position == 8


def test_pointer_base_scoping_and_restore() -> None:
    data = _image(
        0x10C,
        (0x00, _u32(0x100)),
        (0x04, _u32(0x20)),
        (0x20, _u32(9)),
        (0x100, _u32(0x8)),
        (0x108, _u32(7)),
    )
    dec = _decoder(data)
    root = dec.decode(Root)
    assert root.based.leaf.value == 7
    assert root.based.seen_base == 0x100
    assert root.after.value == 9
    assert dec.addressing.current == 0
    assert dec.position == 8


def test_self_relative_pointer() -> None:
    data = _image(0x10, (0x0, _u32(0xC)), (0x4, _u32(5)), (0xC, _u32(77)))
    dec = _decoder(data, ReferenceType.SELF_RELATIVE_POINTER)
    holder = dec.decode(Holder)
    assert holder.child.value == 77
    assert holder.tail == 5


def test_reference_type_none_reads_inline() -> None:
    data = _u32(3) + _u32(4)
    holder = _decoder(data, ReferenceType.NONE).decode(Holder)
    assert holder.child.value == 3
    assert holder.tail == 4


def test_inline_tag_suppresses_pointer() -> None:
    @schema(slot("child", Leaf, Inline()), slot("tail", INT), registry=REG)
    @dataclass
    class InlineHolder:
        child: object = None
        tail: int = 0

    holder = _decoder(_u32(3) + _u32(4)).decode(InlineHolder)
    assert holder.child.value == 3
    assert holder.tail == 4


def test_pointer_size_tag() -> None:
    @schema(slot("child", Leaf, PointerSize(2)), slot("tail", INT), registry=REG)
    @dataclass
    class ShortPtrHolder:
        child: object = None
        tail: int = 0

    data = _image(0xC, (0x0, b"\x08\x00"), (0x2, _u32(6)), (0x8, _u32(12)))
    dec = _decoder(data)
    holder = dec.decode(ShortPtrHolder)
    assert holder.child.value == 12
    assert holder.tail == 6
    assert dec.position == 6


def test_collection_elements_are_pointers_unless_inline() -> None:
    @schema(slot("leaves", ListOf(Leaf)), registry=REG)
    @dataclass
    class PtrList:
        leaves: List[Leaf] = field(default_factory=list)

    @schema(slot("leaves", ListOf(Leaf), Inline()), registry=REG)
    @dataclass
    class InlineList:
        leaves: List[Leaf] = field(default_factory=list)

    data = _image(
        0x18,
        (0x0, _u32(2)),
        (0x4, _u32(0x10)),
        (0x8, _u32(0x14)),
        (0x10, _u32(1)),
        (0x14, _u32(2)),
    )
    dec = _decoder(data)
    assert [leaf.value for leaf in dec.decode(PtrList).leaves] == [1, 2]
    assert dec.position == 0xC

    inline = _decoder(_u32(2) + _u32(5) + _u32(6)).decode(InlineList)
    assert [leaf.value for leaf in inline.leaves] == [5, 6]


def test_shared_pointee_decodes_independent_copies() -> None:
    @schema(slot("a", Leaf), slot("b", Leaf), registry=REG)
    @dataclass
    class Twin:
        a: object = None
        b: object = None

    data = _image(0xC, (0x0, _u32(0x8)), (0x4, _u32(0x8)), (0x8, _u32(31)))
    twin = _decoder(data).decode(Twin)
    assert twin.a == twin.b
    assert twin.a is not twin.b


def test_string_field_follows_pointer() -> None:
    @schema(slot("name", STRING), slot("tail", INT), registry=REG)
    @dataclass
    class Named:
        name: str = ""
        tail: int = 0

    data = _image(0xB, (0x0, _u32(0x8)), (0x4, _u32(1)), (0x8, b"hi\x00"))
    named = _decoder(data).decode(Named)
    assert named.name == "hi"
    assert named.tail == 1


def test_read_pointer_uses_same_resolution() -> None:
    dec = _decoder(_u32(0x10) + _u32(0))
    dec.addressing.push(0x4)
    assert dec.read_pointer() == 0x14
    assert dec.read_pointer() is None
    assert dec.based_pointer(0x10) == 0x14

    rel = _decoder(bytes(4) + _u32(0x8), ReferenceType.SELF_RELATIVE_POINTER)
    rel.cursor.seek(4)
    assert rel.read_pointer() == 0xC
