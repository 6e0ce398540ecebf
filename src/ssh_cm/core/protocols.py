"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — so the SQLite store and the subprocess launcher can
be swapped for fakes in tests.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

from ssh_cm.core.models import ConnectionProfile


class ConnectionStore(Protocol):
    """Contract for the persistent connection registry.

    Column names passed in mappings must come from
    :data:`~ssh_cm.core.models.CONNECTION_COLUMNS`; implementations must
    reject anything else rather than interpolate it.
    """

    def id_exists(self, connection_id: int) -> bool:
        ...  # pragma: no cover

    def id_for_nickname(self, nickname: str) -> int | None:
        """Return the ID owning *nickname*, or ``None``."""
        ...  # pragma: no cover

    def get_profile(self, connection_id: int) -> ConnectionProfile | None:
        ...  # pragma: no cover

    def list_profiles(self) -> list[ConnectionProfile]:
        """Return every profile in ascending ID order."""
        ...  # pragma: no cover

    def insert_profile(
        self,
        values: Mapping[str, str | None],
        *,
        requested_id: int | None = None,
    ) -> int:
        """Insert one row and return its ID.

        *requested_id* is used as the primary key when given; the caller
        is responsible for checking that it is free.
        """
        ...  # pragma: no cover

    def update_profile(
        self,
        connection_id: int,
        changes: Mapping[str, str | int | None],
    ) -> None:
        """Apply *changes* to one row as a single statement."""
        ...  # pragma: no cover

    def delete_by_id(self, connection_id: int) -> int:
        """Delete by ID; return the number of rows removed."""
        ...  # pragma: no cover

    def delete_by_nickname(self, nickname: str) -> int:
        """Delete by nickname; return the number of rows removed."""
        ...  # pragma: no cover

    def search(
        self,
        terms: Mapping[str, str],
        *,
        match_any: bool,
    ) -> list[int]:
        """Return IDs whose columns contain the given substrings.

        ``match_any=True`` combines the terms with OR, otherwise AND.
        """
        ...  # pragma: no cover

    def get_defaults(self) -> dict[str, str | None]:
        """Return every stored default keyed by setting name."""
        ...  # pragma: no cover

    def set_defaults(self, changes: Mapping[str, str | None]) -> None:
        """Update several defaults atomically."""
        ...  # pragma: no cover


class ProcessLauncher(Protocol):
    """Contract for starting the external SSH client."""

    def launch(self, argv: Sequence[str]) -> int:
        """Run *argv* with inherited stdio and return its exit status.

        Raises
        ------
        LaunchError
            When the process cannot be started at all.
        """
        ...  # pragma: no cover


Environment = Mapping[str, str]
"""Read-only view of OS environment variables."""
