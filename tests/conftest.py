"""
Shared pytest fixtures for the console test suite.

Every test runs with the keybindings file pointed at a path that does not
exist, so a developer's own ~/.config overrides never leak into results.
"""

from collections.abc import Generator
from pathlib import Path

import pytest

from kaos_console.data.sources import SampleDataSource
from kaos_console.keybindings import ENV_KEYBINDINGS_PATH


@pytest.fixture(autouse=True)
def isolated_keybindings(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[None, None, None]:
    """Point keybinding loading at a missing file for the duration of a test."""
    monkeypatch.setenv(ENV_KEYBINDINGS_PATH, str(tmp_path / "no-keybindings.json"))
    yield


@pytest.fixture
def sample_source() -> SampleDataSource:
    """A fresh copy of the bundled sample data."""
    return SampleDataSource.from_yaml()
