"""Shared pytest fixtures for freedb ingest tests.

This module contains common fixtures used across multiple test files,
reducing duplication and improving test maintainability.
"""

import tempfile
from pathlib import Path

import pytest

from freedb.db import init_db
from dump_builders import SAMPLE_DUMP, make_dump, write_dump_tree


@pytest.fixture
def temp_db():
    """Create a temporary database for testing.

    Creates an isolated SQLite database in a temporary directory.
    The database is cleaned up after the test completes.

    Yields:
        tuple: (db_path, engine, SessionFactory)
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        engine, SessionFactory = init_db(str(db_path))
        yield db_path, engine, SessionFactory
        engine.dispose()


@pytest.fixture
def sample_dump_bytes() -> bytes:
    """The sample dump encoded as UTF-8."""
    return SAMPLE_DUMP.encode("utf-8")


@pytest.fixture
def dump_tree(tmp_path):
    """A small extracted dump tree with README/COPYING at the top level.

    Layout:
        README, COPYING
        soundtrack/decafbad   (sample dump)
        rock/0a0b0c0d         (two tracks)
        jazz/11223344         (three tracks)
    """
    return write_dump_tree(
        tmp_path / "freedb",
        {
            "README": "freedb dump\n",
            "COPYING": "GNU GPL\n",
            "soundtrack/decafbad": SAMPLE_DUMP,
            "rock/0a0b0c0d": make_dump("0a0b0c0d", "Artist / Rock Album", ["One", "Two"]),
            "jazz/11223344": make_dump("11223344", "Trio / Live", ["A", "B", "C"]),
        },
    )
