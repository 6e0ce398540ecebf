"""Smoke tests — verify scaffold wiring.

These tests prove that:
* The CLI entry point is importable and callable.
* The exception hierarchy is correctly structured.
* Version is accessible.
* Exit codes are defined.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ssh_cm import __version__
from ssh_cm.cli import exit_codes
from ssh_cm.cli.app import main
from ssh_cm.exceptions import (
    AmbiguousIdentifierError,
    ArgumentError,
    CannotOpenError,
    CorruptSchemaError,
    CsvError,
    IdCollisionError,
    InvalidIdentifierError,
    InvalidNicknameError,
    LaunchError,
    MalformedCsvLineError,
    MissingHeaderError,
    MissingRequiredFieldError,
    NicknameInUseError,
    NotFoundError,
    OddArgumentCountError,
    SchemaTooNewError,
    SshCmError,
    StoreError,
    UnrecognizedArgumentError,
)


# ---------------------------------------------------------------------------
# Version
# ---------------------------------------------------------------------------

class TestVersion:
    def test_version_is_string(self) -> None:
        assert isinstance(__version__, str)

    def test_version_is_semver_like(self) -> None:
        parts = __version__.split(".")
        assert len(parts) == 3
        assert all(part.isdigit() for part in parts)


# ---------------------------------------------------------------------------
# Exception hierarchy
# ---------------------------------------------------------------------------

class TestExceptions:
    @pytest.mark.parametrize(
        "exc_class",
        [
            StoreError,
            CannotOpenError,
            CorruptSchemaError,
            SchemaTooNewError,
            ArgumentError,
            OddArgumentCountError,
            InvalidIdentifierError,
            AmbiguousIdentifierError,
            InvalidNicknameError,
            NicknameInUseError,
            MissingRequiredFieldError,
            NotFoundError,
            IdCollisionError,
            CsvError,
            MissingHeaderError,
            LaunchError,
        ],
    )
    def test_all_exceptions_inherit_from_base(
        self, exc_class: type[SshCmError]
    ) -> None:
        assert issubclass(exc_class, SshCmError)

    def test_store_errors_share_a_base(self) -> None:
        for exc_class in (CannotOpenError, CorruptSchemaError, SchemaTooNewError):
            assert issubclass(exc_class, StoreError)

    def test_ambiguous_is_an_invalid_identifier(self) -> None:
        assert issubclass(AmbiguousIdentifierError, InvalidIdentifierError)

    def test_hint_is_stored(self) -> None:
        err = SshCmError("boom", hint="try this")
        assert str(err) == "boom"
        assert err.hint == "try this"

    def test_hint_defaults_to_none(self) -> None:
        err = SshCmError("boom")
        assert err.hint is None

    def test_unrecognized_argument_names_the_flag(self) -> None:
        err = UnrecognizedArgumentError("-port")
        assert err.name == "-port"
        assert "'-port' is not a valid argument." == str(err)

    def test_malformed_line_carries_line_number(self) -> None:
        err = MalformedCsvLineError(7, "unexpected end of data")
        assert err.line_number == 7
        assert str(err) == "Line 7: unexpected end of data"


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

class TestExitCodes:
    def test_success_is_zero(self) -> None:
        assert exit_codes.SUCCESS == 0

    def test_general_error_is_one(self) -> None:
        assert exit_codes.GENERAL_ERROR == 1

    def test_keyboard_interrupt_is_130(self) -> None:
        assert exit_codes.KEYBOARD_INTERRUPT == 130

    def test_unexpected_error_is_two(self) -> None:
        assert exit_codes.UNEXPECTED_ERROR == 2


# ---------------------------------------------------------------------------
# CLI routing
# ---------------------------------------------------------------------------

class TestCLIRouting:
    def test_no_args_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        code = main([])
        assert code == exit_codes.SUCCESS
        assert "SSH Connection Manager" in capsys.readouterr().out

    def test_version_flag(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0

    def test_help_does_not_touch_the_database(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str],
    ) -> None:
        db = tmp_path / "never.db"
        code = main(["--db", str(db), "help", "add"])
        assert code == exit_codes.SUCCESS
        assert not db.exists()
        assert "Add a connection" in capsys.readouterr().out
