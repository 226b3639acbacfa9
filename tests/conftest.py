from __future__ import annotations

import pytest

from arrstate.domain.model import App

_CONNECTION_SUFFIXES = ("URL", "API_KEY", "INSECURE_SKIP_VERIFY")


@pytest.fixture(autouse=True)
def isolated_connection_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep connection variables from the developer's shell out of the tests."""

    for app in App:
        for suffix in _CONNECTION_SUFFIXES:
            monkeypatch.delenv(f"{app.value.upper()}_{suffix}", raising=False)
