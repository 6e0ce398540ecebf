"""Custom exception hierarchy for ssh-cm.

All exceptions that cross layer boundaries must inherit from
:class:`SshCmError`.  Raw ``sqlite3`` and ``OSError`` exceptions must
NEVER propagate beyond the infrastructure layer — they must be caught
and re-raised as a typed subclass defined here.

Hierarchy
---------
SshCmError
├── StoreError
│   ├── CannotOpenError
│   ├── CorruptSchemaError
│   └── SchemaTooNewError
├── ArgumentError
│   ├── OddArgumentCountError
│   ├── UnrecognizedArgumentError
│   ├── InvalidIdentifierError
│   │   └── AmbiguousIdentifierError
│   ├── InvalidNicknameError
│   ├── NicknameInUseError
│   └── MissingRequiredFieldError
├── NotFoundError
├── IdCollisionError
├── CsvError
│   ├── MissingHeaderError
│   └── MalformedCsvLineError
└── LaunchError
"""

from __future__ import annotations


class SshCmError(Exception):
    """Base exception for all ssh-cm errors.

    Every user-visible error condition must map to a subclass of this
    exception so that the CLI error boundary can render a clean message
    without leaking internal stack traces.
    """

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Store -----------------------------------------------------------------

class StoreError(SshCmError):
    """Base class for failures of the connections database."""


class CannotOpenError(StoreError):
    """Raised when the database file cannot be created or opened."""


class CorruptSchemaError(StoreError):
    """Raised when the stored schema version is missing or unreadable."""


class SchemaTooNewError(StoreError):
    """Raised when the database was written by a newer ssh-cm."""


# --- Command arguments -----------------------------------------------------

class ArgumentError(SshCmError):
    """Base class for malformed command arguments."""


class OddArgumentCountError(ArgumentError):
    """Raised when flag/value tokens do not come in pairs."""


class UnrecognizedArgumentError(ArgumentError):
    """Raised when a flag is not accepted by the current command."""

    def __init__(self, name: str, *, hint: str | None = None) -> None:
        super().__init__(f"'{name}' is not a valid argument.", hint=hint)
        self.name: str = name


class InvalidIdentifierError(ArgumentError):
    """Raised when a token is neither a valid ID nor a valid nickname."""


class AmbiguousIdentifierError(InvalidIdentifierError):
    """Raised when a connection token matches neither identifier shape."""


class InvalidNicknameError(ArgumentError):
    """Raised when a nickname starts with a digit or contains whitespace."""


class NicknameInUseError(ArgumentError):
    """Raised when a nickname is already taken by another connection."""


class MissingRequiredFieldError(ArgumentError):
    """Raised when a mandatory value (e.g. ``-host``) is absent or empty."""


# --- Lookup / identity -----------------------------------------------------

class NotFoundError(SshCmError):
    """Raised when the requested connection does not exist."""


class IdCollisionError(SshCmError):
    """Raised when ``set -id`` targets an ID that is already in use."""


# --- CSV -------------------------------------------------------------------

class CsvError(SshCmError):
    """Base class for CSV import failures."""


class MissingHeaderError(CsvError):
    """Raised when CSV input is empty or has an empty header row."""


class MalformedCsvLineError(CsvError):
    """Raised for a single CSV line that cannot be parsed."""

    def __init__(self, line_number: int, reason: str) -> None:
        super().__init__(f"Line {line_number}: {reason}")
        self.line_number: int = line_number
        self.reason: str = reason


# --- External process ------------------------------------------------------

class LaunchError(SshCmError):
    """Raised when the SSH client process cannot be started."""
