"""
Schema-driven decoding of binary object graphs.

`BinaryDecoder` is one decode session: it owns the cursor's effective byte
order, the pointer base stack, the generic binding stack and the definition
registry. Sessions are single-use and single-threaded; the underlying cursor
is borrowed and never closed.

Byte order is session state. A `ByteOrderMark` field is the only schema
construct that changes it, and the change is not scoped: it holds for the
rest of the session, including reads outside the object that declared the
mark, until another mark changes it again.
"""

from __future__ import annotations

import enum
import logging
from contextlib import nullcontext
from dataclasses import dataclass, field
from numbers import Number
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

from .addressing import PointerResolver, ReferenceType
from .coding import ByteOrder, Cursor, DataCursor
from .config import DecoderConfig, load_decoder_config
from .definitions import Definitions
from .errors import (
    AbstractTypeInstantiation,
    DecodeError,
    InvalidByteOrderMark,
    MagicMismatch,
    MalformedDefinition,
    ObjectSizeMismatch,
    SchemaError,
    UnsupportedPrimitiveKind,
)
from .generics import TypeParameterStack
from .schema import (
    REGISTRY,
    ArrayOf,
    FieldDescriptor,
    ListOf,
    Parameterized,
    PrimitiveType,
    SchemaRegistry,
    StringType,
    TypeSpec,
    category,
    raw_type,
)
from .strings import read_padded_string, read_string
from .tags import (
    ArrayLengthSize,
    ArraySize,
    ByteOrderMark,
    Define,
    DefinedArraySize,
    Ignore,
    Inline,
    MagicStr,
    MagicStrLE,
    ObjSize,
    PointerBase,
    PointerSize,
    TypeChoiceInt,
    TypeChoiceStr,
)
from .trace import TraceBuffer, TraceEntry, TraceEvent

logger = logging.getLogger(__name__)

_ROOT = "<root>"


@dataclass(frozen=True)
class LayoutEntry:
    key: str
    kind: str
    meta: Dict[str, object] = field(default_factory=dict)


@runtime_checkable
class DecodeHook(Protocol):
    """Objects needing logic beyond their declared fields."""

    def decode_extra(self, decoder: "BinaryDecoder") -> None: ...


def _is_number(value: object) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


class BinaryDecoder:
    def __init__(
        self,
        source: Union[Cursor, bytes, bytearray, memoryview],
        byte_order: Optional[ByteOrder] = None,
        reference_type: Optional[ReferenceType] = None,
        *,
        config: Optional[DecoderConfig] = None,
        registry: Optional[SchemaRegistry] = None,
        record_layout: bool = False,
    ) -> None:
        self.config = config or load_decoder_config()
        self.registry = registry or REGISTRY
        if isinstance(source, (bytes, bytearray, memoryview)):
            source = DataCursor(source)
        self.cursor: Cursor = source
        self.cursor.order = byte_order or self.config.byte_order
        self.addressing = PointerResolver(reference_type or self.config.reference_type)
        self.type_params = TypeParameterStack(self.registry)
        self.definitions = Definitions()
        self.file_version = 0
        self.record_layout = record_layout
        self._layout: List[LayoutEntry] = []
        self.trace: Optional[TraceBuffer] = TraceBuffer() if self.config.trace else None

    # ------------------------------------------------------------------
    # Public surface

    @property
    def position(self) -> int:
        return self.cursor.position

    @property
    def byte_order(self) -> ByteOrder:
        return self.cursor.order

    def set_byte_order(self, order: ByteOrder) -> None:
        """Switch the byte order of every subsequent read in this session."""
        if order != self.cursor.order:
            logger.debug("Setting %s endian order at 0x%X", order, self.position)
        self.cursor.order = order

    def decode(self, target: TypeSpec) -> Any:
        """Decode a value of `target` starting at the cursor's position."""
        return self._read_value(target, None)

    def decode_into(self, obj: object) -> object:
        """Populate an already constructed schema object in place."""
        cls = type(obj)
        start = self.position
        with self.type_params.entered(cls):
            with self._pointer_base(start, cls):
                self._read_fields(obj, cls, start)
        return obj

    def get_definition(self, name: str) -> Optional[object]:
        return self.definitions.get(name)

    def based_pointer(self, raw: int) -> int:
        return self.addressing.based(raw)

    def read_pointer(self, width: Optional[int] = None) -> Optional[int]:
        """Read a pointer at the cursor and resolve it; None when it is zero."""
        pointer_at = self.position
        raw = self._read_sized_int(width or self.config.pointer_size)
        return self.addressing.resolve(raw, pointer_at)

    def snapshot_layout(self) -> tuple[LayoutEntry, ...]:
        return tuple(self._layout)

    # ------------------------------------------------------------------
    # Bookkeeping

    def _record(
        self, event: TraceEvent, key: str, detail: str, offset: Optional[int] = None
    ) -> None:
        if self.trace is None:
            return
        self.trace.record(
            TraceEntry(
                event=event,
                offset=self.position if offset is None else offset,
                key=key,
                detail=detail,
            )
        )

    def _pointer_base(self, start: int, *classes: Optional[type]):
        if self.registry.has_tag(PointerBase, None, *classes):
            return self.addressing.based_at(start)
        return nullcontext()

    # ------------------------------------------------------------------
    # Value dispatch

    def _read_value(
        self, type_: TypeSpec, fld: Optional[FieldDescriptor], element: bool = False
    ) -> Any:
        key = fld.name if fld is not None else _ROOT
        start = self.position
        logger.debug("Reading %s at 0x%X", key, start)
        if element:
            resolved = self.type_params.resolve(type_)
            if not isinstance(resolved, Parameterized):
                return self._dispatch(resolved, fld, element=True)
            # Parameterized elements bind their own arguments.
            with self.type_params.entered(resolved):
                return self._dispatch(resolved, fld, element=True)
        with self.type_params.entered(type_) as resolved:
            self._record("field", key, category(resolved), offset=start)
            value = self._dispatch(resolved, fld, element=False)
        if self.record_layout:
            self._layout.append(
                LayoutEntry(
                    key=key,
                    kind=category(resolved),
                    meta={"offset": start, "length_bytes": self.position - start},
                )
            )
        return value

    def _dispatch(self, type_: TypeSpec, fld: Optional[FieldDescriptor], element: bool) -> Any:
        kind = category(type_)
        if kind == "primitive":
            return self._read_primitive(type_, fld)
        if kind == "enum":
            return self._read_enum(type_, fld)
        if kind == "array":
            return self._read_array(type_, fld)
        if kind == "collection":
            return self._read_collection(type_, fld)
        return self._read_object(type_, fld, element)

    # ------------------------------------------------------------------
    # Primitives

    def _read_sized_int(self, size: int) -> int:
        if size in (1, 2, 3):
            return self.cursor.read_int(size, signed=False)
        if size in (4, 8):
            return self.cursor.read_int(size, signed=True)
        raise UnsupportedPrimitiveKind(f"int{size * 8}", offset=self.position)

    def _read_primitive(self, prim: PrimitiveType, fld: Optional[FieldDescriptor]) -> Any:
        bom = self.registry.find_tag(ByteOrderMark, fld)
        start = self.position
        if bom is None:
            return self._read_primitive_value(prim, fld)

        self.cursor.order = "big"
        value = self._read_primitive_value(prim, fld)
        if not _is_number(value):
            raise SchemaError(
                f"ByteOrderMark field {fld.name!r} must be numeric, got {prim.kind}",
                offset=start,
            )
        observed = int(value)
        if observed == bom.if_be:
            self.set_byte_order("big")
        elif observed == bom.if_le:
            self.set_byte_order("little")
        else:
            raise InvalidByteOrderMark(observed, bom.if_be, bom.if_le, offset=start)
        self._record("byte_order", fld.name, self.cursor.order, offset=start)
        return value

    def _read_primitive_value(self, prim: PrimitiveType, fld: Optional[FieldDescriptor]) -> Any:
        kind = prim.kind
        if kind == "int":
            return self._read_sized_int(self.registry.int_size(self.config.int_size, fld))
        if kind == "short":
            return self.cursor.read_int(2)
        if kind == "byte":
            return self.cursor.read_int(1)
        if kind == "bool":
            return self._read_sized_int(self.registry.int_size(1, fld)) == 1
        if kind == "float":
            return self.cursor.read_float()
        if kind == "double":
            return self.cursor.read_double()
        if kind == "long":
            return self.cursor.read_int(8)
        raise UnsupportedPrimitiveKind(kind, offset=self.position)

    def _read_enum(self, enum_cls: type, fld: Optional[FieldDescriptor]) -> Optional[enum.Enum]:
        members = list(enum_cls)
        if len(members) <= 0x100:
            default = 1
        elif len(members) <= 0x10000:
            default = 2
        else:
            default = 4
        ordinal = self._read_sized_int(self.registry.int_size(default, fld, enum_cls))
        if not 0 <= ordinal < len(members):
            return None
        return members[ordinal]

    # ------------------------------------------------------------------
    # Arrays and collections

    def _read_array_length(self, fld: Optional[FieldDescriptor]) -> int:
        fixed = self.registry.find_tag(ArraySize, fld)
        if fixed is not None:
            return fixed.count

        defined = self.registry.find_tag(DefinedArraySize, fld)
        if defined is not None:
            value = self.definitions.get(defined.name)
            logger.debug("Defined array length %s = %r", defined.name, value)
            if not _is_number(value):
                raise MalformedDefinition(defined.name, value)
            return int(value)

        prefix = self.registry.find_tag(ArrayLengthSize, fld)
        start = self.position
        count = self._read_sized_int(self.config.int_size if prefix is None else prefix.bytes)
        if count < 0:
            raise DecodeError(f"Negative element count {count}", offset=start)
        return count

    def _read_elements(self, element_type: TypeSpec, fld: Optional[FieldDescriptor]) -> List[Any]:
        count = self._read_array_length(fld)
        logger.debug("Reading %d element(s) of %r", count, element_type)
        return [self._read_value(element_type, fld, element=True) for _ in range(count)]

    def _read_array(self, arr: ArrayOf, fld: Optional[FieldDescriptor]) -> List[Any]:
        return self._read_elements(arr.element, fld)

    def _read_collection(self, coll: ListOf, fld: Optional[FieldDescriptor]) -> Any:
        return coll.factory(self._read_elements(coll.element, fld))

    # ------------------------------------------------------------------
    # Objects and strings

    def _read_object(self, type_: TypeSpec, fld: Optional[FieldDescriptor], element: bool) -> Any:
        declared = raw_type(type_)
        key = fld.name if fld is not None else _ROOT
        resume_at: Optional[int] = None

        if (
            (fld is not None or element)
            and self.addressing.indirect
            and not self.registry.has_tag(Inline, fld, declared)
        ):
            pointer_at = self.position
            width = self.registry.find_tag(PointerSize, fld)
            raw = self._read_sized_int(self.config.pointer_size if width is None else width.bytes)
            resume_at = self.position
            target = self.addressing.resolve(raw, pointer_at)
            if target is None:
                self._record("null_pointer", key, "absent", offset=pointer_at)
                return None
            logger.debug("Following pointer of %s at 0x%X to 0x%X", key, pointer_at, target)
            self._record("pointer", key, f"0x{target:X}", offset=pointer_at)
            self.cursor.seek(target)

        if isinstance(type_, StringType):
            value: Any = self._read_string(fld)
        else:
            value = self._read_schema_object(declared, fld)

        if resume_at is not None:
            self.cursor.seek(resume_at)
        return value

    def _read_string(self, fld: Optional[FieldDescriptor]) -> str:
        start = self.position
        encoding = self.config.string_encoding
        size = self.registry.int_size(0, fld)
        if size:
            text = read_padded_string(self.cursor, size, encoding)
        else:
            text = read_string(self.cursor, encoding)

        magic = self.registry.find_tag(MagicStr, fld)
        if magic is not None:
            expected = magic.text
            if self.registry.has_tag(MagicStrLE, fld):
                expected = expected[::-1]
            if expected != text:
                raise MagicMismatch(expected, text, offset=start)
        return text

    def _choose_type(self, declared: type, fld: Optional[FieldDescriptor], start: int) -> type:
        int_choices = self.registry.find_all(TypeChoiceInt, fld, declared)
        str_choices = self.registry.find_all(TypeChoiceStr, fld, declared)
        if not int_choices and not str_choices:
            return declared

        width = self.registry.int_size(4, fld, declared)
        int_value = self._read_sized_int(width)
        self.cursor.seek(start)
        str_value = read_padded_string(self.cursor, width, self.config.string_encoding)
        self.cursor.seek(start)
        if self.registry.has_tag(MagicStrLE, fld, declared):
            str_value = str_value[::-1]

        for choice in int_choices:
            if choice.key == int_value:
                return self._chosen(choice.type, fld, start)
        for choice in str_choices:
            if choice.key == str_value:
                return self._chosen(choice.type, fld, start)

        logger.warning(
            "Unknown type choice %r (0x%X) at 0x%X; using base type %s of field %s",
            str_value,
            int_value,
            start,
            declared.__qualname__,
            fld.name if fld is not None else _ROOT,
        )
        self._record("type_choice", fld.name if fld is not None else _ROOT, "unmatched", offset=start)
        return declared

    def _chosen(self, cls: type, fld: Optional[FieldDescriptor], start: int) -> type:
        if not self.registry.is_registered(cls) or self.registry.lookup(cls).abstract:
            raise SchemaError(
                f"Type choice target {cls.__qualname__} is not a concrete registered schema",
                offset=start,
            )
        logger.debug("Resolved type choice %s at 0x%X", cls.__qualname__, start)
        self._record("type_choice", fld.name if fld is not None else _ROOT, cls.__qualname__, offset=start)
        return cls

    def _read_schema_object(self, declared: type, fld: Optional[FieldDescriptor]) -> object:
        start = self.position
        cls = self._choose_type(declared, fld, start)
        entry = self.registry.lookup(cls)
        if entry.abstract:
            raise AbstractTypeInstantiation(cls, offset=start)
        obj = entry.instantiate()
        with self._pointer_base(start, declared, cls):
            self._read_fields(obj, cls, start)
        return obj

    def _read_fields(self, obj: object, cls: type, start: int) -> None:
        size_fields: List[FieldDescriptor] = []
        with self.definitions.scope():
            for fld in self.registry.fields_of(cls):
                if self.registry.has_tag(Ignore, fld):
                    continue
                value = self._read_value(fld.type, fld)
                setattr(obj, fld.name, value)
                if self.registry.has_tag(ObjSize, fld):
                    size_fields.append(fld)
                define = self.registry.find_tag(Define, fld)
                if define is not None:
                    self.definitions.define(define.name, value)

            if isinstance(obj, DecodeHook):
                obj.decode_extra(self)

            actual = self.position - start
            for fld in size_fields:
                declared = getattr(obj, fld.name)
                if not _is_number(declared):
                    raise SchemaError(
                        f"ObjSize field {fld.name!r} of {cls.__qualname__} is not numeric"
                    )
                if int(declared) != actual:
                    raise ObjectSizeMismatch(int(declared), actual, start, self.position)


def decode_default(
    target: TypeSpec,
    data: Union[Cursor, bytes, bytearray, memoryview],
    *,
    registry: Optional[SchemaRegistry] = None,
) -> Any:
    """Decode little-endian data whose object fields are absolute pointers."""
    decoder = BinaryDecoder(
        data, "little", ReferenceType.ABSOLUTE_POINTER, registry=registry
    )
    return decoder.decode(target)


def decode_bytes_into(
    data: Union[Cursor, bytes, bytearray, memoryview],
    obj: object,
    reference_type: ReferenceType = ReferenceType.NONE,
    *,
    byte_order: ByteOrder = "little",
    registry: Optional[SchemaRegistry] = None,
) -> object:
    decoder = BinaryDecoder(data, byte_order, reference_type, registry=registry)
    return decoder.decode_into(obj)


__all__ = [
    "BinaryDecoder",
    "DecodeHook",
    "LayoutEntry",
    "decode_bytes_into",
    "decode_default",
]
