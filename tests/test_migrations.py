"""Tests for schema versioning and migration (infra/migrations.py).

Each migration step has a regression fixture: a database written in
the step's source schema, upgraded and then inspected.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from pathlib import Path

import pytest

from ssh_cm.exceptions import CorruptSchemaError, SchemaTooNewError
from ssh_cm.infra.migrations import (
    CURRENT_SCHEMA_VERSION,
    MIGRATIONS,
    MigrationStep,
    migrate,
    parse_version,
    read_version,
)
from ssh_cm.infra.sqlite_store import SqliteStore


def _autocommit(path: Path) -> sqlite3.Connection:
    return sqlite3.connect(str(path), isolation_level=None)


def _columns(conn: sqlite3.Connection) -> list[str]:
    return [row[1] for row in conn.execute("PRAGMA table_info('connections')")]


# ---------------------------------------------------------------------------
# Version parsing
# ---------------------------------------------------------------------------

class TestParseVersion:
    def test_dotted(self) -> None:
        assert parse_version("1.1") == (1, 1)

    def test_ordering_is_numeric(self) -> None:
        assert parse_version("1.10") > parse_version("1.9")
        assert parse_version("2") > parse_version("1.1")

    @pytest.mark.parametrize("raw", [None, "", "abc", "1.x", "1..1"])
    def test_rejects_garbage(self, raw: object) -> None:
        with pytest.raises(CorruptSchemaError):
            parse_version(raw)


# ---------------------------------------------------------------------------
# Registry shape
# ---------------------------------------------------------------------------

class TestRegistry:
    def test_chain_is_contiguous_and_ends_at_current(self) -> None:
        for earlier, later in zip(MIGRATIONS, MIGRATIONS[1:]):
            assert earlier.target == later.source
        assert MIGRATIONS[-1].target == CURRENT_SCHEMA_VERSION

    def test_each_step_moves_forward(self) -> None:
        for step in MIGRATIONS:
            assert parse_version(step.target) > parse_version(step.source)


# ---------------------------------------------------------------------------
# v1.0 -> v1.1
# ---------------------------------------------------------------------------

class TestV10ToV11:
    def test_adds_binary_column_and_default(self, tmp_path: Path, make_v1_0_db: Callable[..., Path]) -> None:
        path = make_v1_0_db(tmp_path / "old.db", [("tank", "bsdbox", "notroot")])
        conn = _autocommit(path)
        try:
            applied = migrate(conn)
            assert applied == [("1.0", "1.1")]
            assert "binary" in _columns(conn)
            setting = conn.execute(
                "SELECT value FROM defaults WHERE setting = 'binary'",
            ).fetchone()
            assert setting == (None,)
            assert read_version(conn) == "1.1"
        finally:
            conn.close()

    def test_existing_rows_survive(self, tmp_path: Path, make_v1_0_db: Callable[..., Path]) -> None:
        path = make_v1_0_db(tmp_path / "old.db", [("tank", "bsdbox", "notroot")])
        store, outcome = SqliteStore.open(path)
        with store:
            assert outcome.migrations == (("1.0", "1.1"),)
            (profile,) = store.list_profiles()
            assert profile.nickname == "tank"
            assert profile.user == "notroot"
            assert profile.binary is None

    def test_step_is_safe_to_rerun(self, tmp_path: Path, make_v1_0_db: Callable[..., Path]) -> None:
        path = make_v1_0_db(tmp_path / "old.db")
        conn = _autocommit(path)
        try:
            step = MIGRATIONS[0]
            step.apply(conn)
            step.apply(conn)
            assert _columns(conn).count("binary") == 1
            count = conn.execute(
                "SELECT COUNT(*) FROM defaults WHERE setting = 'binary'",
            ).fetchone()
            assert count == (1,)
        finally:
            conn.close()

    def test_failed_step_rolls_back(self, tmp_path: Path, make_v1_0_db: Callable[..., Path]) -> None:
        path = make_v1_0_db(tmp_path / "old.db")

        def _half_done(conn: sqlite3.Connection) -> None:
            conn.execute("ALTER TABLE connections ADD COLUMN 'binary' TEXT")
            conn.execute("INSERT INTO no_such_table VALUES (1)")

        broken = (MigrationStep(source="1.0", target="1.1", apply=_half_done),)
        conn = _autocommit(path)
        try:
            with pytest.raises(CorruptSchemaError):
                migrate(conn, broken)
            assert "binary" not in _columns(conn)
            assert read_version(conn) == "1.0"
        finally:
            conn.close()


# ---------------------------------------------------------------------------
# Version gates
# ---------------------------------------------------------------------------

class TestVersionGates:
    def _with_version(
        self, tmp_path: Path, make_v1_0_db: Callable[..., Path], version: str,
    ) -> Path:
        path = make_v1_0_db(tmp_path / "v.db")
        conn = sqlite3.connect(str(path))
        conn.execute(
            "UPDATE global SET value = ? WHERE setting = 'schema_version'", (version,),
        )
        conn.commit()
        conn.close()
        return path

    def test_newer_file_is_refused(self, tmp_path: Path, make_v1_0_db: Callable[..., Path]) -> None:
        path = self._with_version(tmp_path, make_v1_0_db, "9.0")
        with pytest.raises(SchemaTooNewError):
            SqliteStore.open(path)

    def test_non_numeric_version_is_corrupt(self, tmp_path: Path, make_v1_0_db: Callable[..., Path]) -> None:
        path = self._with_version(tmp_path, make_v1_0_db, "banana")
        with pytest.raises(CorruptSchemaError):
            SqliteStore.open(path)

    def test_unknown_old_version_is_corrupt(self, tmp_path: Path, make_v1_0_db: Callable[..., Path]) -> None:
        path = self._with_version(tmp_path, make_v1_0_db, "0.5")
        with pytest.raises(CorruptSchemaError, match="No upgrade path"):
            SqliteStore.open(path)

    def test_current_version_is_a_noop(self, tmp_path: Path, make_v1_0_db: Callable[..., Path]) -> None:
        path = tmp_path / "fresh.db"
        SqliteStore.open(path)[0].close()
        conn = _autocommit(path)
        try:
            assert migrate(conn) == []
        finally:
            conn.close()
