"""Allow ``python -m ssh_cm`` invocation.

This module simply delegates to the CLI error-boundary entry point so
that ``python -m ssh_cm`` behaves identically to the ``ssh-cm``
console script.
"""

from __future__ import annotations

from ssh_cm.cli.app import cli

if __name__ == "__main__":
    cli()
