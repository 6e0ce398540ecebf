"""Process exit statuses returned by :func:`ssh_cm.cli.app.main`.

``connect`` always finishes with :data:`SUCCESS` once the store was
opened; the SSH client's own status is not forwarded.
"""

from __future__ import annotations

SUCCESS: int = 0
"""Command completed (warnings may have been shown)."""

GENERAL_ERROR: int = 1
"""Usage problem or a known SshCmError, reported on stderr."""

KEYBOARD_INTERRUPT: int = 130
"""Ctrl+C (128 + SIGINT)."""

UNEXPECTED_ERROR: int = 2
"""An exception outside the SshCmError hierarchy reached :func:`~ssh_cm.cli.app.cli`."""
