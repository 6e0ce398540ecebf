"""Core / service layer — pure business logic and data transformations.

Rules
-----
* No ``print()`` calls.
* No filesystem, database or process I/O.
* No imports from ``cli`` or ``infra``.
* All functions must be fully typed and deterministic.
"""

from ssh_cm.core.connection_service import ConnectionService
from ssh_cm.core.launch_service import LaunchService
from ssh_cm.core.models import (
    AddOutcome,
    ConnectionProfile,
    DefaultsReport,
    EffectiveConnection,
    ImportReport,
    ImportRowOutcome,
    OpenOutcome,
)
from ssh_cm.core.protocols import ConnectionStore, Environment, ProcessLauncher
from ssh_cm.core.resolver import get_connection, merge_layers

__all__: list[str] = [
    "AddOutcome",
    "ConnectionProfile",
    "ConnectionService",
    "ConnectionStore",
    "DefaultsReport",
    "EffectiveConnection",
    "Environment",
    "ImportReport",
    "ImportRowOutcome",
    "LaunchService",
    "OpenOutcome",
    "ProcessLauncher",
    "get_connection",
    "merge_layers",
]
