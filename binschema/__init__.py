"""
Declarative decoding of binary object graphs.

Layouts are described with registered schemas (ordered field descriptors plus
layout tags); `BinaryDecoder` interprets them against a seekable byte cursor,
following pointers, resolving generic parameters, switching byte order on
byte-order marks and dispatching tagged unions.
"""

from .addressing import PointerResolver, ReferenceType  # noqa: F401
from .coding import ByteOrder, Cursor, DataCursor  # noqa: F401
from .config import DecoderConfig, load_decoder_config  # noqa: F401
from .decoder import (  # noqa: F401
    BinaryDecoder,
    DecodeHook,
    LayoutEntry,
    decode_bytes_into,
    decode_default,
)
from .definitions import Definitions  # noqa: F401
from .errors import (  # noqa: F401
    AbstractTypeInstantiation,
    DecodeError,
    InvalidByteOrderMark,
    MagicMismatch,
    MalformedDefinition,
    ObjectSizeMismatch,
    SchemaError,
    TruncatedInput,
    UnresolvedGenericType,
    UnsupportedPrimitiveKind,
)
from .generics import TypeParameterStack  # noqa: F401
from .schema import (  # noqa: F401
    BOOL,
    BYTE,
    DOUBLE,
    FLOAT,
    INT,
    LONG,
    REGISTRY,
    SHORT,
    STRING,
    ArrayOf,
    FieldDescriptor,
    ListOf,
    Parameterized,
    PrimitiveType,
    Schema,
    SchemaRegistry,
    TypeParam,
    add_type_tags,
    needs_explicit_size,
    schema,
    slot,
    type_tags,
)
from .tags import (  # noqa: F401
    ArrayLengthSize,
    ArraySize,
    ByteOrderMark,
    Define,
    DefinedArraySize,
    Ignore,
    Inline,
    LengthPos,
    LengthPosType,
    MagicStr,
    MagicStrLE,
    ObjSize,
    PointerBase,
    PointerSize,
    Size,
    TypeChoiceInt,
    TypeChoiceStr,
)
from . import trace  # noqa: F401

__all__ = [
    "AbstractTypeInstantiation",
    "ArrayLengthSize",
    "ArrayOf",
    "ArraySize",
    "BOOL",
    "BYTE",
    "BinaryDecoder",
    "ByteOrder",
    "ByteOrderMark",
    "Cursor",
    "DOUBLE",
    "DataCursor",
    "DecodeError",
    "DecodeHook",
    "DecoderConfig",
    "Define",
    "DefinedArraySize",
    "Definitions",
    "FLOAT",
    "FieldDescriptor",
    "INT",
    "Ignore",
    "Inline",
    "InvalidByteOrderMark",
    "LONG",
    "LayoutEntry",
    "LengthPos",
    "LengthPosType",
    "ListOf",
    "MagicMismatch",
    "MagicStr",
    "MagicStrLE",
    "MalformedDefinition",
    "ObjSize",
    "ObjectSizeMismatch",
    "Parameterized",
    "PointerBase",
    "PointerResolver",
    "PointerSize",
    "PrimitiveType",
    "REGISTRY",
    "ReferenceType",
    "SHORT",
    "STRING",
    "Schema",
    "SchemaError",
    "SchemaRegistry",
    "Size",
    "TruncatedInput",
    "TypeChoiceInt",
    "TypeChoiceStr",
    "TypeParam",
    "TypeParameterStack",
    "UnresolvedGenericType",
    "UnsupportedPrimitiveKind",
    "add_type_tags",
    "decode_bytes_into",
    "decode_default",
    "load_decoder_config",
    "needs_explicit_size",
    "schema",
    "slot",
    "trace",
    "type_tags",
]
