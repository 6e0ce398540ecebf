"""Domain models for ssh-cm.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  They carry zero I/O and are discarded at
the end of each command invocation; the store is the only owner of
persistent state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields


# ---------------------------------------------------------------------------
# Column / setting names
# ---------------------------------------------------------------------------

OPTIONAL_COLUMNS: tuple[str, ...] = (
    "user",
    "description",
    "args",
    "identity",
    "command",
    "binary",
)
"""Nullable connection columns; ``None`` means inherit at resolve time."""

CONNECTION_COLUMNS: tuple[str, ...] = ("id", "nickname", "host", *OPTIONAL_COLUMNS)
"""Every column of the ``connections`` table, in export order."""

DEFAULT_SETTINGS: tuple[str, ...] = ("binary", "user", "args", "identity", "command")
"""Keys of the ``defaults`` table at the current schema version."""

SEARCH_ALL_COLUMNS: tuple[str, ...] = ("nickname", "host", "user", "description")
"""Columns matched by a single-argument search."""


# ---------------------------------------------------------------------------
# Stored profile
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ConnectionProfile:
    """One row of the ``connections`` table, values exactly as stored."""

    id: int
    nickname: str
    host: str
    user: str | None = None
    description: str | None = None
    args: str | None = None
    identity: str | None = None
    command: str | None = None
    binary: str | None = None

    def as_dict(self) -> dict[str, object]:
        """Return the profile as a column-name → value mapping."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


# ---------------------------------------------------------------------------
# Resolved settings
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class EffectiveConnection:
    """Fully merged settings for one connection.

    Every field is a string; an unset optional value is ``""``.
    """

    id: str
    nickname: str
    host: str
    user: str
    description: str
    args: str
    identity: str
    command: str
    binary: str

    def as_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def summary_line(self) -> str:
        """Render the one-line listing form used by ``list`` and ``search``."""
        return f"{self.id}. {self.nickname}:\t{self.user}@{self.host}\t({self.description})"


# ---------------------------------------------------------------------------
# Command outcomes
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class AddOutcome:
    """Result of inserting a connection."""

    connection_id: int
    nickname: str
    dropped_id: int | None = None
    """Requested ID that was already taken, or ``None``."""


@dataclass(frozen=True, slots=True)
class DefaultsReport:
    """Stored defaults plus the hard-coded fallbacks not kept in the DB."""

    stored: tuple[tuple[str, str | None], ...]
    builtin: tuple[tuple[str, str], ...]


@dataclass(frozen=True, slots=True)
class ImportRowOutcome:
    """What happened to a single CSV data line during import."""

    line_number: int
    action: str
    """One of ``"added"``, ``"updated"`` or ``"skipped"``."""

    message: str
    nickname: str = ""
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ImportReport:
    """Ordered per-line outcomes of one import run."""

    rows: tuple[ImportRowOutcome, ...] = ()
    ignored_columns: tuple[str, ...] = ()

    def count(self, action: str) -> int:
        return sum(1 for row in self.rows if row.action == action)

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True, slots=True)
class OpenOutcome:
    """What happened while opening the store."""

    path: str
    created: bool = False
    migrations: tuple[tuple[str, str], ...] = field(default_factory=tuple)
    """``(source, target)`` version pairs that were applied, in order."""
