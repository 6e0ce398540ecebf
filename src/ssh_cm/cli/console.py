"""CLI console helpers with optional Rich support.

All diagnostics go to stderr so that stdout stays clean for listings
and CSV.  This module intentionally avoids module-level imports of
Rich so bootstrap paths (``--help``, ``--version``) remain functional
even when it is not installed.
"""

from __future__ import annotations

import re
import sys
from typing import Any

from ssh_cm.exceptions import SshCmError

_MARKUP_TAG = re.compile(r"\[/?[a-z ]*\]")


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``SshCmError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise SshCmError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console() -> Any:
	"""Create a Rich console instance targeting stderr."""
	console_class = _load_rich_console_class()
	return console_class(stderr=True, highlight=False)


def escape(text: object) -> str:
	"""Escape user-supplied text so Rich does not treat it as markup."""
	try:
		from rich.markup import escape as rich_escape
	except ModuleNotFoundError:
		return str(text)
	return rich_escape(str(text))


class _ConsoleProxy:
	"""Minimal ``print``-compatible proxy with Rich fallback."""

	def print(self, *objects: object) -> None:
		"""Render with Rich when available, else plain stderr print."""
		try:
			rich_console = get_rich_console()
		except SshCmError:
			plain = [_MARKUP_TAG.sub("", o) if isinstance(o, str) else o for o in objects]
			print(*plain, file=sys.stderr)
			return
		rich_console.print(*objects)

	def info(self, message: str) -> None:
		self.print(escape(message))

	def warn(self, message: str) -> None:
		self.print(f"[yellow]Warning:[/yellow] {escape(message)}")

	def error(self, message: str, hint: str | None = None) -> None:
		self.print(f"[bold red]Error:[/bold red] {escape(message)}")
		if hint:
			self.print(f"[yellow]Hint:[/yellow] {escape(hint)}")


console = _ConsoleProxy()
