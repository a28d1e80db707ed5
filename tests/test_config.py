import pytest

from binschema import ReferenceType, config


def test_defaults_are_little_endian_absolute() -> None:
    cfg = config.load_decoder_config()
    assert cfg.byte_order == "little"
    assert cfg.reference_type is ReferenceType.ABSOLUTE_POINTER
    assert cfg.string_encoding == "latin-1"
    assert (cfg.int_size, cfg.pointer_size) == (4, 4)
    assert cfg.trace is False


def test_byte_order_aliases(monkeypatch) -> None:
    monkeypatch.setenv("BINSCHEMA_BYTE_ORDER", " BE ")
    assert config.load_decoder_config().byte_order == "big"
    monkeypatch.setenv("BINSCHEMA_BYTE_ORDER", "Little")
    assert config.load_decoder_config().byte_order == "little"


def test_reference_type_from_env(monkeypatch) -> None:
    monkeypatch.setenv("BINSCHEMA_REFERENCE_TYPE", "SELF_RELATIVE")
    assert config.load_decoder_config().reference_type is ReferenceType.SELF_RELATIVE_POINTER
    monkeypatch.setenv("BINSCHEMA_REFERENCE_TYPE", "none")
    assert config.load_decoder_config().reference_type is ReferenceType.NONE


@pytest.mark.parametrize(
    "name, value",
    [("BINSCHEMA_BYTE_ORDER", "middle"), ("BINSCHEMA_REFERENCE_TYPE", "relative")],
)
def test_unknown_values_are_rejected(monkeypatch, name: str, value: str) -> None:
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        config.load_decoder_config()


@pytest.mark.parametrize("raw, expected", [("1", True), ("yes", True), ("0", False), ("off", False)])
def test_trace_flag(monkeypatch, raw: str, expected: bool) -> None:
    monkeypatch.setenv("BINSCHEMA_TRACE", raw)
    assert config.load_decoder_config().trace is expected


def test_string_encoding_override(monkeypatch) -> None:
    monkeypatch.setenv("BINSCHEMA_STRING_ENCODING", "utf-8")
    assert config.load_decoder_config().string_encoding == "utf-8"
