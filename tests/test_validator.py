"""Tests for token classification and flag validation (core/validator.py)."""

from __future__ import annotations

import pytest

from ssh_cm.core.validator import (
    CONNECTION_FLAGS,
    DEF_FLAGS,
    is_id,
    is_nickname,
    looks_like_id,
    strip_marker,
    validate_args,
)
from ssh_cm.exceptions import OddArgumentCountError, UnrecognizedArgumentError


# ---------------------------------------------------------------------------
# is_nickname
# ---------------------------------------------------------------------------

class TestIsNickname:
    @pytest.mark.parametrize("subject", ["home", "tank", "web-01", "a1", "_x", "-odd", "ü"])
    def test_accepts(self, subject: str) -> None:
        assert is_nickname(subject)

    @pytest.mark.parametrize("subject", ["1home", "0", "42", "my box", "tab\tbed", " lead"])
    def test_rejects(self, subject: str) -> None:
        assert not is_nickname(subject)

    def test_is_syntactic_only(self) -> None:
        # Existence is never consulted.
        assert is_nickname("definitely-not-stored")


# ---------------------------------------------------------------------------
# is_id
# ---------------------------------------------------------------------------

class TestIsId:
    @pytest.mark.parametrize("subject", ["1", "7", "42", "0010", "123456789"])
    def test_accepts_positive_integers(self, subject: str) -> None:
        assert is_id(subject)

    @pytest.mark.parametrize("subject", ["0", "-1", "-42", "", "abc", "1.5", "1e3", "1 2", "0x10", " 3"])
    def test_rejects_everything_else(self, subject: str) -> None:
        assert not is_id(subject)

    def test_id_and_nickname_shapes_do_not_overlap_for_digits(self) -> None:
        assert is_id("5")
        assert not is_nickname("5")

    def test_largest_storable_id(self) -> None:
        assert is_id("9223372036854775807")

    @pytest.mark.parametrize("subject", ["9223372036854775808", "99999999999999999999"])
    def test_rejects_ids_past_sqlite_integer_range(self, subject: str) -> None:
        assert not is_id(subject)


class TestLooksLikeId:
    @pytest.mark.parametrize("subject", ["7", "+7", "0", "99999999999999999999", "+1x"])
    def test_digit_prefixes(self, subject: str) -> None:
        assert looks_like_id(subject)

    @pytest.mark.parametrize("subject", ["home", "+x", "-7", "", "+"])
    def test_other_prefixes(self, subject: str) -> None:
        assert not looks_like_id(subject)


# ---------------------------------------------------------------------------
# validate_args
# ---------------------------------------------------------------------------

class TestValidateArgs:
    def test_returns_pairs_without_marker(self) -> None:
        pairs = validate_args(["-host", "10.0.0.1", "-user", "me"], CONNECTION_FLAGS)
        assert pairs == {"host": "10.0.0.1", "user": "me"}

    def test_preserves_order(self) -> None:
        pairs = validate_args(["-user", "me", "-host", "h"], CONNECTION_FLAGS)
        assert list(pairs) == ["user", "host"]

    def test_last_duplicate_wins(self) -> None:
        pairs = validate_args(["-user", "a", "-user", "b"], CONNECTION_FLAGS)
        assert pairs == {"user": "b"}

    def test_empty_is_ok(self) -> None:
        assert validate_args([], DEF_FLAGS) == {}

    def test_odd_count_rejected(self) -> None:
        with pytest.raises(OddArgumentCountError):
            validate_args(["-host"], CONNECTION_FLAGS)

    def test_unknown_flag_rejected(self) -> None:
        with pytest.raises(UnrecognizedArgumentError) as exc_info:
            validate_args(["-port", "22"], CONNECTION_FLAGS)
        assert exc_info.value.name == "-port"

    def test_flag_without_marker_rejected(self) -> None:
        with pytest.raises(UnrecognizedArgumentError):
            validate_args(["host", "h"], CONNECTION_FLAGS)

    def test_def_does_not_accept_host(self) -> None:
        with pytest.raises(UnrecognizedArgumentError):
            validate_args(["-host", "h"], DEF_FLAGS)

    def test_values_may_look_like_flags(self) -> None:
        pairs = validate_args(["-args", "-p 2222"], CONNECTION_FLAGS)
        assert pairs == {"args": "-p 2222"}


class TestFlagTables:
    def test_def_flags(self) -> None:
        assert DEF_FLAGS == {"user", "args", "identity", "command", "binary"}

    def test_connection_flags(self) -> None:
        assert CONNECTION_FLAGS == {
            "id", "nickname", "host", "user", "description",
            "args", "identity", "command", "binary",
        }

    def test_strip_marker(self) -> None:
        assert strip_marker("-host") == "host"
        assert strip_marker("--host") == "host"
