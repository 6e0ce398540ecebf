"""Infrastructure: schema creation and version migration.

Each :class:`MigrationStep` upgrades exactly one schema version to the
next.  :func:`migrate` walks the chain from the stored version to
:data:`CURRENT_SCHEMA_VERSION`, running every step in its own
transaction so a failure leaves the file at the previous version.

Steps are written to be safe when re-run: columns are only added when
absent and default rows use ``INSERT OR IGNORE``.
"""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from dataclasses import dataclass

from ssh_cm.core.models import DEFAULT_SETTINGS
from ssh_cm.exceptions import CorruptSchemaError, SchemaTooNewError

CURRENT_SCHEMA_VERSION = "1.1"


# ---------------------------------------------------------------------------
# Version handling
# ---------------------------------------------------------------------------

def parse_version(raw: object) -> tuple[int, ...]:
    """Parse a dotted version string such as ``"1.1"``.

    Raises
    ------
    CorruptSchemaError
        If *raw* is missing or not made of dot-separated integers.
    """
    if raw is None:
        raise CorruptSchemaError(
            "Database has no schema version.",
            hint="The file may not be an ssh-cm database.",
        )
    parts = str(raw).strip().split(".")
    if not all(part.isdigit() for part in parts):
        raise CorruptSchemaError(
            f"Database schema version '{raw}' is not a number.",
            hint="The file may be damaged.",
        )
    return tuple(int(part) for part in parts)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

def run_in_transaction(
    conn: sqlite3.Connection,
    work: Callable[[sqlite3.Connection], None],
) -> None:
    """Run *work* between ``BEGIN`` and ``COMMIT``; roll back on error.

    *conn* must be in autocommit mode (``isolation_level=None``).
    """
    conn.execute("BEGIN")
    try:
        work(conn)
    except BaseException:
        conn.execute("ROLLBACK")
        raise
    conn.execute("COMMIT")


# ---------------------------------------------------------------------------
# Fresh schema
# ---------------------------------------------------------------------------

_CREATE_TABLES = (
    """
    CREATE TABLE 'global' (
        'setting'   TEXT UNIQUE,
        'value'     TEXT,
        PRIMARY KEY('setting')
    )
    """,
    """
    CREATE TABLE 'defaults' (
        'setting'   TEXT UNIQUE,
        'value'     TEXT,
        PRIMARY KEY('setting')
    )
    """,
    """
    CREATE TABLE 'connections' (
        'id'            INTEGER NOT NULL PRIMARY KEY AUTOINCREMENT UNIQUE,
        'nickname'      TEXT NOT NULL UNIQUE,
        'host'          TEXT NOT NULL,
        'user'          TEXT,
        'description'   TEXT,
        'args'          TEXT,
        'identity'      TEXT,
        'command'       TEXT,
        'binary'        TEXT
    )
    """,
)


def _create_current(conn: sqlite3.Connection) -> None:
    for statement in _CREATE_TABLES:
        conn.execute(statement)
    conn.execute(
        "INSERT INTO 'global' (setting, value) VALUES ('schema_version', ?)",
        (CURRENT_SCHEMA_VERSION,),
    )
    conn.executemany(
        "INSERT INTO 'defaults' (setting, value) VALUES (?, NULL)",
        [(name,) for name in DEFAULT_SETTINGS],
    )


def create_schema(conn: sqlite3.Connection) -> None:
    """Create all tables at the current version in one transaction."""
    run_in_transaction(conn, _create_current)


# ---------------------------------------------------------------------------
# Migration steps
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class MigrationStep:
    """One upgrade between two adjacent schema versions."""

    source: str
    target: str
    apply: Callable[[sqlite3.Connection], None]


def _column_names(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info('{table}')")}


def _set_version(conn: sqlite3.Connection, version: str) -> None:
    conn.execute(
        "UPDATE 'global' SET value = ? WHERE setting = 'schema_version'",
        (version,),
    )


def _add_binary(conn: sqlite3.Connection) -> None:
    if "binary" not in _column_names(conn, "connections"):
        conn.execute("ALTER TABLE 'connections' ADD COLUMN 'binary' TEXT")
    conn.execute(
        "INSERT OR IGNORE INTO 'defaults' (setting, value) VALUES ('binary', NULL)",
    )
    _set_version(conn, "1.1")


MIGRATIONS: tuple[MigrationStep, ...] = (
    MigrationStep(source="1.0", target="1.1", apply=_add_binary),
)


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

def read_version(conn: sqlite3.Connection) -> str:
    """Return the stored schema version string.

    Raises
    ------
    CorruptSchemaError
        If the ``global`` table or version row is missing or invalid.
    """
    try:
        row = conn.execute(
            "SELECT value FROM 'global' WHERE setting = 'schema_version'",
        ).fetchone()
    except sqlite3.DatabaseError as exc:
        raise CorruptSchemaError(
            f"Cannot read schema version: {exc}",
            hint="The file may not be an ssh-cm database.",
        ) from exc
    raw = row[0] if row is not None else None
    parse_version(raw)
    return str(raw).strip()


def migrate(
    conn: sqlite3.Connection,
    steps: tuple[MigrationStep, ...] = MIGRATIONS,
    current: str = CURRENT_SCHEMA_VERSION,
) -> list[tuple[str, str]]:
    """Bring the schema up to *current*; return applied steps in order.

    Raises
    ------
    SchemaTooNewError
        If the stored version is newer than *current*.
    CorruptSchemaError
        If the version is unreadable or no step starts at it.
    """
    version = read_version(conn)
    target = parse_version(current)

    if parse_version(version) > target:
        raise SchemaTooNewError(
            "This tool is too old to use this database file.",
            hint=f"Please update ssh-cm. Schema: tool {current}, file {version}.",
        )

    by_source = {parse_version(step.source): step for step in steps}
    applied: list[tuple[str, str]] = []
    while parse_version(version) < target:
        step = by_source.get(parse_version(version))
        if step is None:
            raise CorruptSchemaError(
                f"No upgrade path from schema {version} to {current}.",
            )
        try:
            run_in_transaction(conn, step.apply)
        except sqlite3.Error as exc:
            raise CorruptSchemaError(
                f"Upgrading schema {step.source} to {step.target} failed: {exc}",
            ) from exc
        applied.append((step.source, step.target))
        version = step.target
    return applied
