"""Infrastructure layer — external system integration.

This layer wraps all interaction with SQLite, the filesystem and the
SSH client process.  Every raw ``sqlite3`` or ``OSError`` exception
must be caught here and re-raised as a
:class:`~ssh_cm.exceptions.SshCmError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from ssh_cm.infra.db_path import DbLocation, resolve_db_path
from ssh_cm.infra.migrations import CURRENT_SCHEMA_VERSION, MIGRATIONS, MigrationStep
from ssh_cm.infra.sqlite_store import SqliteStore
from ssh_cm.infra.ssh_launcher import SubprocessLauncher

__all__: list[str] = [
    "CURRENT_SCHEMA_VERSION",
    "DbLocation",
    "MIGRATIONS",
    "MigrationStep",
    "SqliteStore",
    "SubprocessLauncher",
    "resolve_db_path",
]
