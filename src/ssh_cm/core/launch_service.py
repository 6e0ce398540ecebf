"""Core launch service — turns a resolved connection into a client run.

This service delegates the actual process start to a
:class:`~ssh_cm.core.protocols.ProcessLauncher` injected at
construction time.  It is responsible for:

* Building the SSH client argument vector.
* Delegating to the launcher.
* Ensuring only :class:`~ssh_cm.exceptions.SshCmError` subclasses
  escape.

Guarantees
----------
* Pure orchestration — no I/O, no ``print()``.
* No ``subprocess`` import.
"""

from __future__ import annotations

import shlex

from ssh_cm.core.models import EffectiveConnection
from ssh_cm.core.protocols import ProcessLauncher
from ssh_cm.exceptions import LaunchError, SshCmError


class LaunchService:
    """Stateless service that starts an SSH session.

    Parameters
    ----------
    launcher:
        Any object satisfying the :class:`ProcessLauncher` protocol.
    """

    def __init__(self, launcher: ProcessLauncher) -> None:
        self._launcher: ProcessLauncher = launcher

    # ------------------------------------------------------------------
    # Argument vector construction (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def build_argv(connection: EffectiveConnection) -> list[str]:
        """Build the client argv for *connection*.

        Rules
        -----
        * The binary comes first.
        * ``args`` is split into words with POSIX shell rules.
        * ``identity`` becomes ``-i <path>``.
        * The target is ``user@host``, or just ``host`` with no user.
        * ``command`` is appended last as the remote command.
        """
        try:
            extra = shlex.split(connection.args)
        except ValueError as exc:
            raise LaunchError(
                f"Cannot parse args for '{connection.nickname}': {exc}",
                hint=f"Fix them with: ssh-cm set {connection.id} -args '...'",
            ) from exc

        argv = [connection.binary, *extra]
        if connection.identity:
            argv.extend(("-i", connection.identity))
        if connection.user:
            argv.append(f"{connection.user}@{connection.host}")
        else:
            argv.append(connection.host)
        if connection.command:
            argv.append(connection.command)
        return argv

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def connect(self, connection: EffectiveConnection) -> int:
        """Run the client for *connection* and return its exit status.

        Raises
        ------
        LaunchError
            When the client cannot be started.
        """
        argv = self.build_argv(connection)
        try:
            return self._launcher.launch(argv)
        except SshCmError:
            # Already one of ours — propagate unchanged.
            raise
        except Exception as exc:
            raise LaunchError(
                f"Unexpected launch error: {exc}",
            ) from exc
