"""Infrastructure: locating the connections database file.

Rules
-----
* An explicit path (``--db`` or ``SSH_CM_DB``) always wins.
* Otherwise the first existing candidate is used.
* With no existing file, the first candidate is the creation target.
* Nothing is created here — :mod:`ssh_cm.infra.sqlite_store` does that.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

DB_FILENAME = "ssh-cm.connections"
ENV_DB_PATH = "SSH_CM_DB"


@dataclass(frozen=True, slots=True)
class DbLocation:
    """Result of store-path resolution.

    Attributes
    ----------
    path : Path
        The file to open or create.
    exists : bool
        Whether *path* existed when it was resolved.
    source : str
        ``"option"``, ``"environment"``, ``"found"`` or ``"default"``.
    """

    path: Path
    exists: bool
    source: str


def candidate_paths(environ: Mapping[str, str]) -> tuple[Path, ...]:
    """Return the ordered default locations, preferred first."""
    config_home = environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return (
        Path(config_home).expanduser() / DB_FILENAME,
        Path(__file__).resolve().parent.parent / DB_FILENAME,
    )


def resolve_db_path(
    environ: Mapping[str, str],
    explicit: str | None = None,
) -> DbLocation:
    """Pick the database file to use."""
    if explicit:
        path = Path(explicit).expanduser()
        return DbLocation(path=path, exists=path.exists(), source="option")

    from_env = environ.get(ENV_DB_PATH)
    if from_env:
        path = Path(from_env).expanduser()
        return DbLocation(path=path, exists=path.exists(), source="environment")

    candidates = candidate_paths(environ)
    for path in candidates:
        if path.exists():
            return DbLocation(path=path, exists=True, source="found")
    return DbLocation(path=candidates[0], exists=False, source="default")
