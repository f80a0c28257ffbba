"""Shared test fixtures: environment isolation and a mock collector."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tests.collector import MockCollector


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Strip WORLDVIOUS_* variables and run from an empty directory (no .env)."""
    for key in list(os.environ):
        if key.startswith("WORLDVIOUS_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def collector() -> MockCollector:
    return MockCollector()
