"""Integration fixtures: services backed by a real SQLite file."""

from pathlib import Path

import pytest

from coursereg.store import EntityStore


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Temporary database file path."""
    return str(tmp_path / "coursereg.db")


@pytest.fixture
def store(db_path: str):
    """EntityStore on a WAL-mode database file."""
    s = EntityStore(db_path, busy_timeout=10.0)
    yield s
    s.close()
