"""SQLite-backed implementation of :class:`~ssh_cm.core.protocols.ConnectionStore`.

This module is the **only** place in the codebase that talks to the
database.  All ``sqlite3`` exceptions are caught here and re-raised as
typed :class:`~ssh_cm.exceptions.SshCmError` subclasses — nothing raw
escapes the infrastructure boundary.

Column names are never taken from user input directly: every dynamic
name is checked against :data:`~ssh_cm.core.models.CONNECTION_COLUMNS`
before it is quoted into a statement, and every value is a bound
parameter.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from types import TracebackType

from ssh_cm.core.models import CONNECTION_COLUMNS, ConnectionProfile, OpenOutcome
from ssh_cm.core.validator import MAX_ID
from ssh_cm.exceptions import CannotOpenError, SshCmError, StoreError
from ssh_cm.infra.migrations import create_schema, migrate, run_in_transaction

_LIKE_ESCAPE = "\\"


def _quoted(columns: Iterable[str]) -> list[str]:
    """Return ``"name"`` for each column, rejecting unknown names."""
    quoted: list[str] = []
    for column in columns:
        if column not in CONNECTION_COLUMNS:
            raise StoreError(f"Unknown connection column '{column}'.")
        quoted.append(f'"{column}"')
    return quoted


def _storable(connection_id: int) -> bool:
    return 0 < connection_id <= MAX_ID


def _like_pattern(text: str) -> str:
    escaped = (
        text.replace(_LIKE_ESCAPE, _LIKE_ESCAPE * 2)
        .replace("%", _LIKE_ESCAPE + "%")
        .replace("_", _LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


class SqliteStore:
    """Concrete :class:`ConnectionStore` over a single SQLite file.

    Usage::

        store, outcome = SqliteStore.open(path)
        with store:
            store.list_profiles()

    The connection runs in autocommit mode: each public method is one
    statement, or one explicit transaction when it needs several.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn: sqlite3.Connection | None = conn

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @classmethod
    def open(cls, path: Path | str) -> tuple[SqliteStore, OpenOutcome]:
        """Open (creating if needed) and migrate the database at *path*.

        Raises
        ------
        CannotOpenError
            If the file or its directory cannot be created or opened.
        CorruptSchemaError
            If the schema version is missing or unreadable.
        SchemaTooNewError
            If the file was written by a newer ssh-cm.
        """
        db_path = Path(path)
        created = not db_path.exists()

        if created:
            try:
                db_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise CannotOpenError(
                    f"Can't create directory {db_path.parent}: {exc}",
                ) from exc

        try:
            conn = sqlite3.connect(str(db_path), isolation_level=None)
        except sqlite3.Error as exc:
            raise CannotOpenError(
                f"Can't open database file {db_path}: {exc}",
                hint="Check the path and its permissions, or pass --db.",
            ) from exc

        store = cls(conn)
        try:
            if created:
                create_schema(conn)
                applied: list[tuple[str, str]] = []
            else:
                applied = migrate(conn)
        except sqlite3.Error as exc:
            store.close()
            if created:
                db_path.unlink(missing_ok=True)
            raise CannotOpenError(
                f"Can't initialise database file {db_path}: {exc}",
            ) from exc
        except SshCmError:
            store.close()
            raise

        conn.row_factory = sqlite3.Row
        return store, OpenOutcome(
            path=str(db_path),
            created=created,
            migrations=tuple(applied),
        )

    def close(self) -> None:
        """Close the database handle.  Safe to call more than once."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> SqliteStore:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    @property
    def _db(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("The connections database is closed.")
        return self._conn

    @contextmanager
    def _errors(self, action: str) -> Iterator[None]:
        """Translate ``sqlite3`` failures and out-of-range integers into :class:`StoreError`."""
        try:
            yield
        except (sqlite3.IntegrityError, OverflowError) as exc:
            raise StoreError(f"Can't {action}: {exc}") from exc
        except sqlite3.Error as exc:
            raise StoreError(
                f"Database error while trying to {action}: {exc}",
                hint="Another ssh-cm may be writing the file; try again.",
            ) from exc

    @staticmethod
    def _to_profile(row: sqlite3.Row) -> ConnectionProfile:
        return ConnectionProfile(**{key: row[key] for key in row.keys()})

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def id_exists(self, connection_id: int) -> bool:
        if not _storable(connection_id):
            return False
        with self._errors("look up a connection"):
            row = self._db.execute(
                "SELECT 1 FROM connections WHERE id = ?", (connection_id,),
            ).fetchone()
        return row is not None

    def id_for_nickname(self, nickname: str) -> int | None:
        with self._errors("look up a connection"):
            row = self._db.execute(
                "SELECT id FROM connections WHERE nickname = ?", (nickname,),
            ).fetchone()
        return None if row is None else int(row[0])

    def get_profile(self, connection_id: int) -> ConnectionProfile | None:
        if not _storable(connection_id):
            return None
        with self._errors("read a connection"):
            row = self._db.execute(
                "SELECT * FROM connections WHERE id = ?", (connection_id,),
            ).fetchone()
        return None if row is None else self._to_profile(row)

    def list_profiles(self) -> list[ConnectionProfile]:
        with self._errors("list connections"):
            rows = self._db.execute("SELECT * FROM connections ORDER BY id").fetchall()
        return [self._to_profile(row) for row in rows]

    def search(
        self,
        terms: Mapping[str, str],
        *,
        match_any: bool,
    ) -> list[int]:
        columns = _quoted(terms)
        joiner = " OR " if match_any else " AND "
        where = joiner.join(
            f"({column} LIKE ? ESCAPE '{_LIKE_ESCAPE}')" for column in columns
        )
        params = [_like_pattern(value) for value in terms.values()]
        with self._errors("search connections"):
            rows = self._db.execute(
                f"SELECT id FROM connections WHERE {where} ORDER BY id", params,
            ).fetchall()
        return [int(row[0]) for row in rows]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert_profile(
        self,
        values: Mapping[str, str | None],
        *,
        requested_id: int | None = None,
    ) -> int:
        row: dict[str, object] = dict(values)
        if requested_id is not None:
            row["id"] = requested_id
        columns = ", ".join(_quoted(row))
        marks = ", ".join("?" for _ in row)
        with self._errors("add connection"):
            cursor = self._db.execute(
                f"INSERT INTO connections ({columns}) VALUES ({marks})",
                list(row.values()),
            )
        return int(cursor.lastrowid)

    def update_profile(
        self,
        connection_id: int,
        changes: Mapping[str, str | int | None],
    ) -> None:
        if not changes:
            return
        assignments = ", ".join(f"{column} = ?" for column in _quoted(changes))
        with self._errors("update connection"):
            self._db.execute(
                f"UPDATE connections SET {assignments} WHERE id = ?",
                [*changes.values(), connection_id],
            )

    def delete_by_id(self, connection_id: int) -> int:
        if not _storable(connection_id):
            return 0
        with self._errors("remove connection"):
            cursor = self._db.execute(
                "DELETE FROM connections WHERE id = ?", (connection_id,),
            )
        return cursor.rowcount

    def delete_by_nickname(self, nickname: str) -> int:
        with self._errors("remove connection"):
            cursor = self._db.execute(
                "DELETE FROM connections WHERE nickname = ?", (nickname,),
            )
        return cursor.rowcount

    # ------------------------------------------------------------------
    # Defaults / metadata
    # ------------------------------------------------------------------

    def get_defaults(self) -> dict[str, str | None]:
        with self._errors("read defaults"):
            rows = self._db.execute(
                "SELECT setting, value FROM defaults ORDER BY setting",
            ).fetchall()
        return {row[0]: row[1] for row in rows}

    def set_defaults(self, changes: Mapping[str, str | None]) -> None:
        def _apply(conn: sqlite3.Connection) -> None:
            conn.executemany(
                "UPDATE defaults SET value = ? WHERE setting = ?",
                [(value, name) for name, value in changes.items()],
            )

        with self._errors("update defaults"):
            run_in_transaction(self._db, _apply)

    def schema_version(self) -> str:
        with self._errors("read the schema version"):
            row = self._db.execute(
                "SELECT value FROM global WHERE setting = 'schema_version'",
            ).fetchone()
        return "" if row is None else str(row[0])
