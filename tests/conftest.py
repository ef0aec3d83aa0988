"""Pytest configuration for repository test runs."""

from __future__ import annotations

from pathlib import Path
import sqlite3
import sys
from typing import Callable, Sequence

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def make_code_db(tmp_path: Path) -> Callable[[Sequence[tuple[object, object]]], Path]:
    """Return a factory seeding a sqlite ``code_files`` table under tmp_path."""

    def _make(rows: Sequence[tuple[object, object]]) -> Path:
        db_path = tmp_path / "code.db"
        connection = sqlite3.connect(db_path)
        try:
            connection.execute("CREATE TABLE code_files (file_path TEXT, content TEXT)")
            connection.executemany("INSERT INTO code_files VALUES (?, ?)", rows)
            connection.commit()
        finally:
            connection.close()
        return db_path

    return _make
