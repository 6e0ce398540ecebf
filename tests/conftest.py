"""Shared pytest fixtures and configuration for the ssh-cm test suite.

Guidelines
----------
* No network access and no real SSH client in any test.
* Every database lives under ``tmp_path``.
* The process launcher is always a mock.
* Tests must not depend on the caller's environment (``$USER`` etc.).
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ssh_cm.core.connection_service import ConnectionService
from ssh_cm.infra.sqlite_store import SqliteStore


SCHEMA_V1_0 = """
BEGIN TRANSACTION;
CREATE TABLE 'global' (
    'setting'   TEXT UNIQUE,
    'value'     TEXT,
    PRIMARY KEY('setting')
);
CREATE TABLE 'defaults' (
    'setting'   TEXT UNIQUE,
    'value'     TEXT,
    PRIMARY KEY('setting')
);
CREATE TABLE 'connections' (
    'id'            INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT UNIQUE,
    'nickname'      TEXT NOT NULL UNIQUE,
    'host'          TEXT NOT NULL,
    'user'          TEXT,
    'description'   TEXT,
    'args'          TEXT,
    'identity'      TEXT,
    'command'       TEXT
);
INSERT INTO 'global' (setting,value) VALUES ('schema_version','1.0');
INSERT INTO 'defaults' (setting,value) VALUES ('user',NULL);
INSERT INTO 'defaults' (setting,value) VALUES ('args',NULL);
INSERT INTO 'defaults' (setting,value) VALUES ('identity',NULL);
INSERT INTO 'defaults' (setting,value) VALUES ('command',NULL);
COMMIT;
"""
"""Schema as written by ssh-cm 1.0, before the ``binary`` column existed."""


def _write_v1_0_db(path: Path, rows: list[tuple[str, str, str | None]] | None = None) -> Path:
    """Create a version 1.0 database at *path* with optional ``(nickname, host, user)`` rows."""
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(SCHEMA_V1_0)
        for nickname, host, user in rows or []:
            conn.execute(
                "INSERT INTO connections (nickname, host, user) VALUES (?, ?, ?)",
                (nickname, host, user),
            )
        conn.commit()
    finally:
        conn.close()
    return path


@pytest.fixture()
def make_v1_0_db() -> Callable[..., Path]:
    """Factory writing a schema 1.0 database; see :data:`SCHEMA_V1_0`."""
    return _write_v1_0_db


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "ssh-cm.connections"


@pytest.fixture()
def store(db_path: Path) -> Iterator[SqliteStore]:
    opened, _outcome = SqliteStore.open(db_path)
    with opened:
        yield opened


@pytest.fixture()
def service(store: SqliteStore) -> ConnectionService:
    return ConnectionService(store, {})


@pytest.fixture()
def launcher() -> MagicMock:
    fake = MagicMock()
    fake.launch.return_value = 0
    return fake
