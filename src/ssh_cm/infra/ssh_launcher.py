"""Subprocess-backed implementation of :class:`~ssh_cm.core.protocols.ProcessLauncher`.

Rules
-----
* The binary is located with :func:`shutil.which` before anything runs.
* Standard input, output and error are inherited unchanged.
* The call blocks until the client exits; no timeout is applied.
* ``OSError`` never escapes — it becomes :class:`~ssh_cm.exceptions.LaunchError`.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Sequence

from ssh_cm.exceptions import LaunchError


class SubprocessLauncher:
    """Concrete :class:`ProcessLauncher` using :func:`subprocess.run`.

    This class satisfies the protocol structurally — no explicit
    inheritance required.
    """

    def launch(self, argv: Sequence[str]) -> int:
        """Run *argv* in the foreground and return its exit status.

        Raises
        ------
        LaunchError
            When the binary is missing or the process cannot start.
        """
        if not argv:
            raise LaunchError("No command to run.")

        binary = argv[0]
        resolved = shutil.which(binary)
        if resolved is None:
            raise LaunchError(
                f"'{binary}' was not found on PATH.",
                hint="Install an SSH client or point to one with: ssh-cm def -binary /path/to/ssh",
            )

        try:
            completed = subprocess.run([resolved, *argv[1:]], check=False)
        except OSError as exc:
            raise LaunchError(f"Could not start '{binary}': {exc}") from exc
        return completed.returncode
