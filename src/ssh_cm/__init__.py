"""ssh-cm — SSH connection manager.

A local registry of remote-host connection profiles backed by SQLite,
with layered settings resolution and CSV import/export.
"""

from ssh_cm.version import __version__

__all__: list[str] = ["__version__"]
