"""Shared test fixtures."""

from pathlib import Path

import pytest

from tests.unit.samples import SAMPLE_KNT


@pytest.fixture
def sample_path(tmp_path: Path) -> Path:
    """Write the sample plain KeyNote file and return its path."""
    path = tmp_path / "sample.knt"
    path.write_text(SAMPLE_KNT, encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _no_env_passphrase(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a passphrase in the developer's environment out of the tests."""
    monkeypatch.delenv("KEYNOTE_PASSPHRASE", raising=False)
