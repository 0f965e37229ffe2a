from __future__ import annotations

import os

import pytest

_ENV_PREFIXES = ("LINEAR_", "GCAL_", "GOOGLE_SERVICE_ACCOUNT")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep credentials from the developer shell out of every test."""

    for name in list(os.environ):
        if name.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(name, raising=False)
