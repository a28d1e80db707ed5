"""Shared pytest fixtures for binschema tests."""

from __future__ import annotations

import pytest

_ENV_VARS = (
    "BINSCHEMA_BYTE_ORDER",
    "BINSCHEMA_REFERENCE_TYPE",
    "BINSCHEMA_STRING_ENCODING",
    "BINSCHEMA_TRACE",
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
