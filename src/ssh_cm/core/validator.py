"""Token classification and flag/value argument validation.

Pure, stateless helpers shared by every mutating command.  The
per-command flag tables defined here are also the allow-list that gates
which column names the store may ever interpolate into SQL.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from ssh_cm.core.models import CONNECTION_COLUMNS, DEFAULT_SETTINGS
from ssh_cm.exceptions import OddArgumentCountError, UnrecognizedArgumentError


# ---------------------------------------------------------------------------
# Allowed flags per command
# ---------------------------------------------------------------------------

DEF_FLAGS: frozenset[str] = frozenset(DEFAULT_SETTINGS)
"""Flags accepted by ``def``."""

CONNECTION_FLAGS: frozenset[str] = frozenset(CONNECTION_COLUMNS)
"""Flags accepted by ``add``, ``set`` and multi-argument ``search``."""

FLAG_MARKER = "-"

_LEADING_DIGIT = re.compile(r"^[0-9]")
_WHITESPACE = re.compile(r"[ \t]")
_DECIMAL = re.compile(r"\+?[0-9]+")
_ID_PREFIX = re.compile(r"\+?[0-9]")

MAX_ID = 2**63 - 1
"""Largest value SQLite can store in an INTEGER column."""


# ---------------------------------------------------------------------------
# Token classification
# ---------------------------------------------------------------------------

def is_nickname(subject: str) -> bool:
    """Return ``True`` if *subject* is shaped like a nickname.

    Nicknames may not begin with a digit or contain a space or tab.
    This is a syntactic check only; it says nothing about existence.
    """
    if _LEADING_DIGIT.match(subject):
        return False
    if _WHITESPACE.search(subject):
        return False
    return True


def is_id(subject: str) -> bool:
    """Return ``True`` if *subject* is a base-10 integer in ``1..MAX_ID``."""
    if not _DECIMAL.fullmatch(subject):
        return False
    return 0 < int(subject) <= MAX_ID


def looks_like_id(subject: str) -> bool:
    """Return ``True`` if *subject* starts the way an ID does (``7``, ``+7``)."""
    return _ID_PREFIX.match(subject) is not None


# ---------------------------------------------------------------------------
# Flag/value pairs
# ---------------------------------------------------------------------------

def strip_marker(flag: str) -> str:
    """Return *flag* without its leading ``-`` marker(s)."""
    return flag.lstrip(FLAG_MARKER)


def validate_args(
    tokens: Sequence[str],
    allowed: frozenset[str],
) -> dict[str, str]:
    """Check alternating ``-flag value`` tokens against *allowed*.

    Returns an insertion-ordered mapping of flag name (without marker)
    to value.  A flag given twice keeps its last value.

    Raises
    ------
    OddArgumentCountError
        If *tokens* does not hold an even number of items.
    UnrecognizedArgumentError
        If a flag lacks the marker or is not in *allowed*.
    """
    if len(tokens) % 2:
        raise OddArgumentCountError(
            "Wrong number of arguments: flags and values must come in pairs.",
            hint="Quote values that contain spaces, e.g. -description 'my box'.",
        )

    pairs: dict[str, str] = {}
    for flag, value in zip(tokens[::2], tokens[1::2]):
        name = strip_marker(flag)
        if not flag.startswith(FLAG_MARKER) or name not in allowed:
            raise UnrecognizedArgumentError(
                flag,
                hint="Valid flags: " + ", ".join(f"-{n}" for n in sorted(allowed)),
            )
        pairs[name] = value
    return pairs
