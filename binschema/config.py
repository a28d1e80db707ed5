from __future__ import annotations

from dataclasses import dataclass
import os

from .addressing import ReferenceType
from .coding import ByteOrder
from .strings import DEFAULT_ENCODING


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    return normalized not in {"0", "false", "off", ""}


def _env_byte_order(name: str, default: ByteOrder) -> ByteOrder:
    raw = os.getenv(name)
    if raw is None:
        return default
    normalized = raw.strip().casefold()
    if normalized in {"little", "le"}:
        return "little"
    if normalized in {"big", "be"}:
        return "big"
    raise ValueError(f"{name}: unknown byte order {raw!r} (expected little or big)")


def _env_reference_type(name: str, default: ReferenceType) -> ReferenceType:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return ReferenceType(raw.strip().casefold())
    except ValueError:
        choices = ", ".join(member.value for member in ReferenceType)
        raise ValueError(f"{name}: unknown reference type {raw!r} (expected one of: {choices})") from None


@dataclass(frozen=True)
class DecoderConfig:
    byte_order: ByteOrder = "little"
    reference_type: ReferenceType = ReferenceType.ABSOLUTE_POINTER
    string_encoding: str = DEFAULT_ENCODING
    int_size: int = 4
    pointer_size: int = 4
    trace: bool = False


def load_decoder_config() -> DecoderConfig:
    return DecoderConfig(
        byte_order=_env_byte_order("BINSCHEMA_BYTE_ORDER", "little"),
        reference_type=_env_reference_type(
            "BINSCHEMA_REFERENCE_TYPE", ReferenceType.ABSOLUTE_POINTER
        ),
        string_encoding=os.getenv("BINSCHEMA_STRING_ENCODING", DEFAULT_ENCODING),
        trace=_env_flag("BINSCHEMA_TRACE", default=False),
    )


__all__ = ["DecoderConfig", "load_decoder_config"]
