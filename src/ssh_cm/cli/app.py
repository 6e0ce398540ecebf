"""CLI application entry point and command routing for ssh-cm.

This module is the **sole error boundary** for the entire application.
It catches :class:`~ssh_cm.exceptions.SshCmError`, ``KeyboardInterrupt``,
and any unexpected ``Exception``, rendering user-friendly messages via Rich
and returning well-defined exit codes.

Architecture notes
------------------
* No business logic lives here — all work is delegated to the core/service
  and infrastructure layers.
* Listings, CSV and help text go to stdout as plain text; every diagnostic
  goes to stderr through :data:`~ssh_cm.cli.console.console`.
* The store is opened once per invocation and closed on every exit path.
"""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import TextIO

from ssh_cm.cli import exit_codes, help_text
from ssh_cm.cli.console import console, escape
from ssh_cm.core import csv_codec
from ssh_cm.core.connection_service import ConnectionService
from ssh_cm.core.launch_service import LaunchService
from ssh_cm.core.models import OpenOutcome
from ssh_cm.core.protocols import ProcessLauncher
from ssh_cm.exceptions import ArgumentError, LaunchError, SshCmError
from ssh_cm.version import __version__


COMMANDS: tuple[str, ...] = (
    "add",
    "connect",
    "def",
    "defaults",
    "export",
    "help",
    "import",
    "list",
    "rm",
    "search",
    "set",
)

ALIASES: Mapping[str, str] = {"c": "connect", "s": "search"}

NO_ARG_COMMANDS: frozenset[str] = frozenset({"defaults", "list", "export", "import", "help"})


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    """Construct the top-level argument parser.

    Subcommand arguments use ``-flag value`` pairs that argparse cannot
    describe, so everything after the command name is collected verbatim
    and validated by the core layer.
    """
    parser = argparse.ArgumentParser(
        prog="ssh-cm",
        description="SSH connection manager.",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--db",
        default=None,
        metavar="PATH",
        help="Connections database file (default: ~/.config/ssh-cm.connections).",
    )
    parser.add_argument(
        "command",
        nargs="?",
        default=None,
        help="Subcommand to run; see 'ssh-cm help'.",
    )
    parser.add_argument(
        "arguments",
        nargs=argparse.REMAINDER,
        help="Arguments for the subcommand.",
    )
    return parser


# ---------------------------------------------------------------------------
# Per-invocation session
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class _Session:
    service: ConnectionService
    launcher: ProcessLauncher
    stdin: TextIO
    stdout: TextIO

    def emit(self, text: str = "") -> None:
        print(text, file=self.stdout)


def _single(arguments: Sequence[str], command: str) -> str:
    if len(arguments) != 1:
        raise ArgumentError(
            f"'{command}' takes exactly one ID or nickname.",
            hint=f"ssh-cm help {command}",
        )
    return arguments[0]


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------

def _handle_add(session: _Session, arguments: Sequence[str]) -> int:
    outcome = session.service.add(arguments[0], arguments[1:])
    if outcome.dropped_id is not None:
        console.warn(f"Requested ID {outcome.dropped_id} not available.")
    console.info(
        f"Added connection '{outcome.nickname}' with ID {outcome.connection_id}.",
    )
    return exit_codes.SUCCESS


def _handle_set(session: _Session, arguments: Sequence[str]) -> int:
    session.service.update(arguments[0], arguments[1:])
    return exit_codes.SUCCESS


def _handle_rm(session: _Session, arguments: Sequence[str]) -> int:
    session.service.remove(_single(arguments, "rm"))
    return exit_codes.SUCCESS


def _handle_def(session: _Session, arguments: Sequence[str]) -> int:
    session.service.set_defaults(arguments)
    return exit_codes.SUCCESS


def _handle_defaults(session: _Session, arguments: Sequence[str]) -> int:
    report = session.service.defaults()
    session.emit("Configured Defaults (DB)")
    for name, value in report.stored:
        session.emit(f"    {name}: '{value or ''}'")
    session.emit()
    session.emit("App Defaults (Hard-Coded)")
    for name, value in report.builtin:
        session.emit(f"    {name}: '{value}'")
    return exit_codes.SUCCESS


def _handle_list(session: _Session, arguments: Sequence[str]) -> int:
    session.emit("Connections")
    for connection in session.service.list_connections():
        session.emit(connection.summary_line())
    return exit_codes.SUCCESS


def _handle_search(session: _Session, arguments: Sequence[str]) -> int:
    for connection in session.service.search(arguments):
        session.emit(connection.summary_line())
    return exit_codes.SUCCESS


def _handle_connect(session: _Session, arguments: Sequence[str]) -> int:
    """Launch the client; a failed launch is reported, not fatal."""
    service = session.service
    connection_id = service.resolve_identifier(_single(arguments, "connect"))
    connection = service.get_connection(connection_id)
    try:
        LaunchService(session.launcher).connect(connection)
    except LaunchError as exc:
        console.warn(str(exc))
        if exc.hint:
            console.print(f"[yellow]Hint:[/yellow] {escape(exc.hint)}")
    return exit_codes.SUCCESS


def _handle_export(session: _Session, arguments: Sequence[str]) -> int:
    csv_codec.write_csv(session.service.export_profiles(), session.stdout)
    return exit_codes.SUCCESS


def _handle_import(session: _Session, arguments: Sequence[str]) -> int:
    report = session.service.import_csv(session.stdin)

    for column in report.ignored_columns:
        console.warn(f"Ignoring unknown column '{column}'.")

    for row in report.rows:
        if row.action == "skipped":
            console.warn(row.message)
            continue
        for warning in row.warnings:
            console.warn(f"Line {row.line_number}: {warning}")
        console.info(row.message)

    console.info(
        f"Imported {len(report)}: {report.count('added')} added, "
        f"{report.count('updated')} updated, {report.count('skipped')} skipped.",
    )
    return exit_codes.SUCCESS


_HANDLERS: Mapping[str, Callable[[_Session, Sequence[str]], int]] = {
    "add": _handle_add,
    "connect": _handle_connect,
    "def": _handle_def,
    "defaults": _handle_defaults,
    "export": _handle_export,
    "import": _handle_import,
    "list": _handle_list,
    "rm": _handle_rm,
    "search": _handle_search,
    "set": _handle_set,
}


def _report_open(outcome: OpenOutcome) -> None:
    if outcome.created:
        console.info(
            "Didn't find a connections database, so creating a new one "
            f"at {outcome.path}.",
        )
    for source, target in outcome.migrations:
        console.info(f"Upgraded v{source} schema to v{target}.")


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(
    argv: list[str] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    launcher: ProcessLauncher | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> int:
    """Run the ssh-cm CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.
    environ:
        Environment variables; defaults to :data:`os.environ`.
    launcher:
        Process launcher for ``connect``; defaults to
        :class:`~ssh_cm.infra.ssh_launcher.SubprocessLauncher`.
    stdin, stdout:
        Streams for CSV input and data output.

    Returns
    -------
    int
        OS process exit code.
    """
    from ssh_cm.infra.db_path import resolve_db_path
    from ssh_cm.infra.sqlite_store import SqliteStore
    from ssh_cm.infra.ssh_launcher import SubprocessLauncher

    parser = _build_parser()
    args = parser.parse_args(argv)
    out = stdout if stdout is not None else sys.stdout

    if args.command is None:
        print(help_text.GENERAL, end="", file=out)
        return exit_codes.SUCCESS

    command: str = ALIASES.get(args.command, args.command)
    arguments: list[str] = list(args.arguments)

    if command not in COMMANDS:
        console.error(f"Unknown instruction '{args.command}'.")
        print(help_text.GENERAL, end="", file=sys.stderr)
        return exit_codes.GENERAL_ERROR

    if command == "help":
        print(help_text.topic(arguments[0] if arguments else None), end="", file=out)
        return exit_codes.SUCCESS

    if not arguments and command not in NO_ARG_COMMANDS:
        console.error(f"Missing arguments to '{command}'.")
        print(help_text.topic(command), end="", file=sys.stderr)
        return exit_codes.GENERAL_ERROR

    env = environ if environ is not None else os.environ
    location = resolve_db_path(env, args.db)
    store, outcome = SqliteStore.open(location.path)
    with store:
        _report_open(outcome)
        session = _Session(
            service=ConnectionService(store, env),
            launcher=launcher if launcher is not None else SubprocessLauncher(),
            stdin=stdin if stdin is not None else sys.stdin,
            stdout=out,
        )
        return _HANDLERS[command](session, arguments)


# ---------------------------------------------------------------------------
# Script-level error boundary
# ---------------------------------------------------------------------------

def cli() -> None:
    """Top-level error boundary invoked by the console-script entry point.

    This function wraps :func:`main` and guarantees the process never
    exits with a raw stack trace during normal usage.
    """
    try:
        code = main()
        sys.exit(code)
    except SshCmError as exc:
        console.error(str(exc), exc.hint)
        sys.exit(exit_codes.GENERAL_ERROR)
    except KeyboardInterrupt:
        console.print("\n[yellow]Aborted by user.[/yellow]")
        sys.exit(exit_codes.KEYBOARD_INTERRUPT)
    except Exception as exc:  # noqa: BLE001
        console.print(
            "[bold red]Unexpected error.[/bold red] "
            "Please report this issue.\n"
            f"  {type(exc).__name__}: {exc}"
        )
        sys.exit(exit_codes.UNEXPECTED_ERROR)
