"""Shared fixtures: temporary database files and connections."""

import os
import sqlite3
import tempfile

import pytest

from shotauto.platform.store import SCHEMA, ShotStore


@pytest.fixture
def tmp_db_path():
    """Create a temporary db file path, removed after the test."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    os.unlink(path)
    yield path
    for suffix in ("", "-journal", "-wal", "-shm"):
        if os.path.exists(path + suffix):
            os.unlink(path + suffix)


@pytest.fixture
def conn():
    """A bootstrapped in-memory connection configured like the store's."""
    connection = sqlite3.connect(":memory:", isolation_level=None)
    connection.row_factory = sqlite3.Row
    connection.executescript(SCHEMA)
    yield connection
    connection.close()


@pytest.fixture
def store(tmp_db_path):
    """A ShotStore backed by a temporary file."""
    shot_store = ShotStore(tmp_db_path)
    yield shot_store
    shot_store.close()
