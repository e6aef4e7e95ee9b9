"""Shared test fixtures for all test modules."""

from __future__ import annotations

import pytest

from tests.payloads import ENV_VARS, FakeMarathonClient


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Run without exporter env vars and outside any .env file."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def fake_client() -> FakeMarathonClient:
    return FakeMarathonClient()
