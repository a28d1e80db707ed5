"""
Type descriptors, field descriptors and the schema registry.

A schema is an explicit table associating a Python class with an ordered list
of field descriptors and the tags that describe their layout::

    @schema(
        slot("magic", STRING, Size(4), MagicStr("RGEC")),
        slot("size", INT, ObjSize()),
        slot("entries", ListOf(Entry), ArrayLengthSize(2)),
        tags=(PointerBase(),),
    )
    @dataclass
    class Header:
        magic: str = ""
        size: int = 0
        entries: list = field(default_factory=list)

Fields of registered ancestor classes come first, in the order they were
declared. Classes are never inspected for attributes; only the registered
tables drive decoding.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import (
    Callable,
    Dict,
    Iterable,
    List,
    Literal,
    Optional,
    Sequence,
    Tuple,
    Type,
    TypeVar,
    Union,
)

from .errors import SchemaError
from .tags import (
    ArraySize,
    DefinedArraySize,
    LengthPos,
    Size,
    Tag,
)

PrimitiveKind = Literal["int", "short", "byte", "bool", "float", "double", "long"]
Category = Literal["primitive", "enum", "array", "collection", "string", "object"]
TagT = TypeVar("TagT")


@dataclass(frozen=True, slots=True)
class PrimitiveType:
    kind: str


INT = PrimitiveType("int")
SHORT = PrimitiveType("short")
BYTE = PrimitiveType("byte")
BOOL = PrimitiveType("bool")
FLOAT = PrimitiveType("float")
DOUBLE = PrimitiveType("double")
LONG = PrimitiveType("long")


@dataclass(frozen=True, slots=True)
class StringType:
    pass


STRING = StringType()


@dataclass(frozen=True, slots=True)
class TypeParam:
    """Open generic parameter, bound by whichever field instantiates its owner."""

    name: str


@dataclass(frozen=True, slots=True)
class ArrayOf:
    element: "TypeSpec"


@dataclass(frozen=True, slots=True)
class ListOf:
    element: "TypeSpec"
    factory: Callable[[List[object]], object] = list


@dataclass(frozen=True, slots=True)
class Parameterized:
    raw: type
    args: Tuple["TypeSpec", ...]

    def __post_init__(self) -> None:
        if not isinstance(self.args, tuple):
            object.__setattr__(self, "args", tuple(self.args))


TypeSpec = Union[PrimitiveType, StringType, TypeParam, ArrayOf, ListOf, Parameterized, type]


def raw_type(type_: TypeSpec) -> Optional[type]:
    """Class behind a declared type, or None for structural descriptors."""
    if isinstance(type_, Parameterized):
        return type_.raw
    if isinstance(type_, type):
        return type_
    return None


def category(type_: TypeSpec) -> Category:
    if isinstance(type_, PrimitiveType):
        return "primitive"
    if isinstance(type_, StringType):
        return "string"
    if isinstance(type_, ArrayOf):
        return "array"
    if isinstance(type_, ListOf):
        return "collection"
    if isinstance(type_, type) and issubclass(type_, enum.Enum):
        return "enum"
    if isinstance(type_, (type, Parameterized)):
        return "object"
    raise SchemaError(f"Unsupported type descriptor {type_!r}")


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    name: str
    type: TypeSpec
    tags: Tuple[Tag, ...] = ()

    def tag(self, tag_cls: Type[TagT]) -> Optional[TagT]:
        for tag in self.tags:
            if isinstance(tag, tag_cls):
                return tag
        return None


def slot(name: str, type_: TypeSpec, *tags: Tag) -> FieldDescriptor:
    for tag in tags:
        if isinstance(tag, type):
            raise SchemaError(f"field {name!r}: tag {tag.__name__} must be instantiated")
    return FieldDescriptor(name=name, type=type_, tags=tuple(tags))


@dataclass(frozen=True)
class Schema:
    cls: type
    fields: Tuple[FieldDescriptor, ...]
    type_params: Tuple[str, ...] = ()
    abstract: bool = False
    factory: Optional[Callable[[], object]] = None

    def instantiate(self) -> object:
        return (self.factory or self.cls)()


class SchemaRegistry:
    """Maps classes to their schemas and type-level tags."""

    def __init__(self) -> None:
        self._schemas: Dict[type, Schema] = {}
        self._type_tags: Dict[type, Tuple[Tag, ...]] = {}
        self._field_cache: Dict[type, Tuple[FieldDescriptor, ...]] = {}

    def register(
        self,
        cls: type,
        fields: Iterable[FieldDescriptor] = (),
        *,
        tags: Sequence[Tag] = (),
        type_params: Sequence[str] = (),
        abstract: bool = False,
        factory: Optional[Callable[[], object]] = None,
    ) -> Schema:
        if issubclass(cls, enum.Enum):
            raise SchemaError(
                f"{cls.__qualname__} is an enum; attach tags with add_type_tags()"
            )
        fields = tuple(fields)
        seen = set()
        for fld in fields:
            if fld.name in seen:
                raise SchemaError(f"{cls.__qualname__}: duplicate field {fld.name!r}")
            seen.add(fld.name)
        entry = Schema(
            cls=cls,
            fields=fields,
            type_params=tuple(type_params),
            abstract=abstract,
            factory=factory,
        )
        self._schemas[cls] = entry
        self._field_cache.clear()
        if tags:
            self.add_type_tags(cls, *tags)
        return entry

    def add_type_tags(self, cls: type, *tags: Tag) -> None:
        self._type_tags[cls] = self._type_tags.get(cls, ()) + tuple(tags)

    def lookup(self, cls: type) -> Schema:
        try:
            return self._schemas[cls]
        except KeyError:
            raise SchemaError(f"No schema registered for {cls.__qualname__}") from None

    def is_registered(self, cls: type) -> bool:
        return cls in self._schemas

    def fields_of(self, cls: type) -> Tuple[FieldDescriptor, ...]:
        cached = self._field_cache.get(cls)
        if cached is not None:
            return cached
        self.lookup(cls)
        ordered: List[FieldDescriptor] = []
        for klass in reversed(cls.__mro__):
            entry = self._schemas.get(klass)
            if entry is not None:
                ordered.extend(entry.fields)
        result = tuple(ordered)
        self._field_cache[cls] = result
        return result

    def type_tags(self, cls: Optional[type]) -> Tuple[Tag, ...]:
        if cls is None:
            return ()
        return self._type_tags.get(cls, ())

    def _sources(
        self, fld: Optional[FieldDescriptor], types: Sequence[Optional[type]]
    ) -> List[Tuple[Tag, ...]]:
        sources: List[Tuple[Tag, ...]] = []
        if fld is not None:
            sources.append(fld.tags)
            sources.append(self.type_tags(raw_type(fld.type)))
        for cls in types:
            sources.append(self.type_tags(cls))
        return sources

    def find_tag(
        self,
        tag_cls: Type[TagT],
        fld: Optional[FieldDescriptor],
        *types: Optional[type],
    ) -> Optional[TagT]:
        """First tag of `tag_cls` on the field, its declared type, then `types`."""
        for tags in self._sources(fld, types):
            for tag in tags:
                if isinstance(tag, tag_cls):
                    return tag
        return None

    def has_tag(
        self, tag_cls: type, fld: Optional[FieldDescriptor], *types: Optional[type]
    ) -> bool:
        return self.find_tag(tag_cls, fld, *types) is not None

    def find_all(
        self,
        tag_cls: Type[TagT],
        fld: Optional[FieldDescriptor],
        *types: Optional[type],
    ) -> Tuple[TagT, ...]:
        """All tags of a repeatable kind, from the first source declaring any."""
        for tags in self._sources(fld, types):
            found = tuple(tag for tag in tags if isinstance(tag, tag_cls))
            if found:
                return found
        return ()

    def int_size(
        self, default: int, fld: Optional[FieldDescriptor], *types: Optional[type]
    ) -> int:
        size = self.find_tag(Size, fld, *types)
        return default if size is None else size.bytes


REGISTRY = SchemaRegistry()


def schema(
    *fields: FieldDescriptor,
    tags: Sequence[Tag] = (),
    type_params: Sequence[str] = (),
    abstract: bool = False,
    factory: Optional[Callable[[], object]] = None,
    registry: Optional[SchemaRegistry] = None,
) -> Callable[[type], type]:
    """Class decorator registering `fields` as the schema of the class."""

    def wrap(cls: type) -> type:
        (registry or REGISTRY).register(
            cls,
            fields,
            tags=tags,
            type_params=type_params,
            abstract=abstract,
            factory=factory,
        )
        return cls

    return wrap


def type_tags(*tags: Tag, registry: Optional[SchemaRegistry] = None) -> Callable[[type], type]:
    """Class decorator attaching type-level tags without declaring fields."""

    def wrap(cls: type) -> type:
        (registry or REGISTRY).add_type_tags(cls, *tags)
        return cls

    return wrap


def add_type_tags(cls: type, *tags: Tag, registry: Optional[SchemaRegistry] = None) -> None:
    (registry or REGISTRY).add_type_tags(cls, *tags)


def needs_explicit_size(type_: TypeSpec, tags: Sequence[Tag] = ()) -> bool:
    """Whether encoding `type_` has to emit a length alongside the value."""

    def has(tag_cls: type) -> bool:
        return any(isinstance(tag, tag_cls) for tag in tags)

    allow_array = not (has(DefinedArraySize) or has(ArraySize))
    if isinstance(type_, (ArrayOf, ListOf)):
        return allow_array
    if isinstance(type_, StringType):
        return has(LengthPos) and not has(Size)
    return False


__all__ = [
    "ArrayOf",
    "BOOL",
    "BYTE",
    "DOUBLE",
    "FLOAT",
    "FieldDescriptor",
    "INT",
    "LONG",
    "ListOf",
    "Parameterized",
    "PrimitiveType",
    "REGISTRY",
    "SHORT",
    "STRING",
    "Schema",
    "SchemaRegistry",
    "StringType",
    "TypeParam",
    "TypeSpec",
    "add_type_tags",
    "category",
    "needs_explicit_size",
    "raw_type",
    "schema",
    "slot",
    "type_tags",
]
