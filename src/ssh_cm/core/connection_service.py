"""Core connection service — every command that reads or edits profiles.

The service depends on a :class:`~ssh_cm.core.protocols.ConnectionStore`
injected at construction time (dependency inversion), keeping the core
free of any SQLite imports.

Guarantees
----------
* No ``print()`` — outcomes and warnings are returned to the caller.
* Arguments are fully validated before the store is written, so a
  rejected command never leaves a half-updated row.
* Only :class:`~ssh_cm.exceptions.SshCmError` subclasses escape.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from ssh_cm.core import csv_codec
from ssh_cm.core.models import (
    OPTIONAL_COLUMNS,
    SEARCH_ALL_COLUMNS,
    AddOutcome,
    ConnectionProfile,
    DefaultsReport,
    EffectiveConnection,
    ImportReport,
    ImportRowOutcome,
)
from ssh_cm.core.protocols import ConnectionStore, Environment
from ssh_cm.core.resolver import BUILTIN_DEFAULTS, DB_SOURCED_KEYS, get_connection
from ssh_cm.core.validator import (
    CONNECTION_FLAGS,
    DEF_FLAGS,
    is_id,
    is_nickname,
    looks_like_id,
    validate_args,
)
from ssh_cm.exceptions import (
    AmbiguousIdentifierError,
    ArgumentError,
    IdCollisionError,
    InvalidIdentifierError,
    InvalidNicknameError,
    MalformedCsvLineError,
    MissingRequiredFieldError,
    NicknameInUseError,
    NotFoundError,
    SshCmError,
)


def _null_if_empty(value: str) -> str | None:
    return value if value else None


def _check_nickname(nickname: str) -> None:
    if not nickname:
        raise InvalidNicknameError("Nickname must not be empty.")
    if looks_like_id(nickname):
        raise InvalidNicknameError(
            f"Nickname '{nickname}' cannot start with a number.",
            hint="Names like 7 or +7 are always read as IDs.",
        )
    if not is_nickname(nickname):
        raise InvalidNicknameError(
            f"Nickname '{nickname}' must not contain spaces or tabs.",
        )


def _parse_id(value: str) -> int:
    if not is_id(value):
        raise InvalidIdentifierError(
            f"'{value}' is not a valid connection ID.",
            hint="IDs are whole numbers from 1 to 9223372036854775807.",
        )
    return int(value)


class ConnectionService:
    """Stateless facade over the store for all profile commands.

    Parameters
    ----------
    store:
        Any object satisfying the :class:`ConnectionStore` protocol.
    environ:
        Environment used for the ``USER`` resolution layer.
    """

    def __init__(self, store: ConnectionStore, environ: Environment) -> None:
        self._store: ConnectionStore = store
        self._environ: Environment = environ

    # ------------------------------------------------------------------
    # Identifier resolution
    # ------------------------------------------------------------------

    def resolve_identifier(self, token: str) -> int:
        """Turn an ID or nickname token into an existing connection ID.

        ID-shaped tokens are always treated as IDs first.

        Raises
        ------
        NotFoundError
            If the ID or nickname does not exist.
        AmbiguousIdentifierError
            If *token* is shaped like neither.
        """
        if is_id(token):
            connection_id = int(token)
            if not self._store.id_exists(connection_id):
                raise NotFoundError(f"Connection ID {connection_id} does not exist.")
            return connection_id

        if is_nickname(token):
            found = self._store.id_for_nickname(token)
            if found is None:
                raise NotFoundError(f"Connection nickname '{token}' does not exist.")
            return found

        raise AmbiguousIdentifierError(
            f"Got an invalid ID or nickname: '{token}'.",
            hint="Use a positive ID number or a nickname without spaces.",
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add(self, nickname: str, tokens: Sequence[str]) -> AddOutcome:
        """Insert a new connection named *nickname*.

        A requested ``-id`` is best-effort: when it is already taken the
        row is inserted under a store-assigned ID and the request is
        reported back in :attr:`AddOutcome.dropped_id`.
        """
        pairs = validate_args(tokens, CONNECTION_FLAGS)
        _check_nickname(nickname)

        flagged = pairs.pop("nickname", nickname)
        if flagged != nickname:
            raise ArgumentError(
                f"Conflicting nicknames '{nickname}' and '{flagged}'.",
                hint="Give the nickname once, as the first argument.",
            )

        if self._store.id_for_nickname(nickname) is not None:
            raise NicknameInUseError(f"Nickname '{nickname}' already in use!")

        host = pairs.pop("host", None)
        if not host:
            raise MissingRequiredFieldError(
                "You must specify a host.",
                hint=f"ssh-cm add {nickname} -host 127.0.0.1",
            )

        requested_id: int | None = None
        dropped_id: int | None = None
        if "id" in pairs:
            requested_id = _parse_id(pairs.pop("id"))
            if self._store.id_exists(requested_id):
                dropped_id, requested_id = requested_id, None

        values: dict[str, str | None] = {"nickname": nickname, "host": host}
        for column in OPTIONAL_COLUMNS:
            if column in pairs:
                values[column] = _null_if_empty(pairs[column])

        connection_id = self._store.insert_profile(values, requested_id=requested_id)
        return AddOutcome(
            connection_id=connection_id,
            nickname=nickname,
            dropped_id=dropped_id,
        )

    def update(self, identifier: str, tokens: Sequence[str]) -> int:
        """Apply flag/value changes to an existing connection.

        Empty values null the column.  Returns the (possibly new) ID.

        Raises
        ------
        IdCollisionError
            If ``-id`` names another existing connection.
        """
        connection_id = self.resolve_identifier(identifier)
        pairs = validate_args(tokens, CONNECTION_FLAGS)
        if not pairs:
            raise MissingRequiredFieldError(
                "Nothing to change.",
                hint=f"ssh-cm set {identifier} -command tmux",
            )

        changes: dict[str, str | int | None] = {}
        target_id = connection_id
        for column, value in pairs.items():
            if column == "id":
                new_id = _parse_id(value)
                if new_id != connection_id and self._store.id_exists(new_id):
                    raise IdCollisionError(
                        f"Can't change connection ID to {new_id}, as one already exists.",
                    )
                changes["id"] = target_id = new_id
            elif column == "nickname":
                _check_nickname(value)
                owner = self._store.id_for_nickname(value)
                if owner is not None and owner != connection_id:
                    raise NicknameInUseError(f"Nickname '{value}' already in use!")
                changes["nickname"] = value
            elif column == "host":
                if not value:
                    raise MissingRequiredFieldError("A connection's host cannot be unset.")
                changes["host"] = value
            else:
                changes[column] = _null_if_empty(value)

        self._store.update_profile(connection_id, changes)
        return target_id

    def remove(self, identifier: str) -> int:
        """Delete a connection by ID or nickname; return rows removed.

        A well-formed identifier that matches nothing removes zero rows
        and is not an error.
        """
        if is_id(identifier):
            return self._store.delete_by_id(int(identifier))
        if is_nickname(identifier):
            return self._store.delete_by_nickname(identifier)
        raise InvalidIdentifierError(
            f"Got an invalid ID or nickname: '{identifier}'.",
        )

    def set_defaults(self, tokens: Sequence[str]) -> dict[str, str | None]:
        """Update stored defaults; an empty value nulls the setting."""
        pairs = validate_args(tokens, DEF_FLAGS)
        changes = {name: _null_if_empty(value) for name, value in pairs.items()}
        if changes:
            self._store.set_defaults(changes)
        return changes

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_connection(self, connection_id: int) -> EffectiveConnection:
        return get_connection(self._store, connection_id, self._environ)

    def list_connections(self) -> list[EffectiveConnection]:
        """Resolve every stored connection, in ID order."""
        return [self.get_connection(p.id) for p in self._store.list_profiles()]

    def search(self, tokens: Sequence[str]) -> list[EffectiveConnection]:
        """Find connections by substring.

        A single token is matched against nickname, host, user and
        description with OR.  Flag/value pairs are matched column by
        column with AND.
        """
        if len(tokens) == 1:
            terms = {column: tokens[0] for column in SEARCH_ALL_COLUMNS}
            ids = self._store.search(terms, match_any=True)
        else:
            pairs = validate_args(tokens, CONNECTION_FLAGS)
            if not pairs:
                return []
            ids = self._store.search(pairs, match_any=False)
        return [self.get_connection(connection_id) for connection_id in ids]

    def defaults(self) -> DefaultsReport:
        stored = sorted(self._store.get_defaults().items())
        builtin = sorted(
            (key, value)
            for key, value in BUILTIN_DEFAULTS.items()
            if key not in DB_SOURCED_KEYS
        )
        return DefaultsReport(stored=tuple(stored), builtin=tuple(builtin))

    def export_profiles(self) -> list[ConnectionProfile]:
        """Return raw stored profiles for CSV export."""
        return self._store.list_profiles()

    # ------------------------------------------------------------------
    # CSV import
    # ------------------------------------------------------------------

    def import_csv(self, lines: Iterable[str]) -> ImportReport:
        """Add or update connections from CSV *lines*, in order.

        The first line is the header.  A row whose nickname already
        exists updates that connection with its non-empty columns;
        any other row is added.  A quoted value may span several lines.
        Failures are recorded per record and never stop the ones that
        follow.

        Raises
        ------
        MissingHeaderError
            If the input is empty.
        """
        physical = list(lines)
        header = csv_codec.parse_header(physical[0] if physical else None)

        outcomes: list[ImportRowOutcome] = []
        for line_number, text in csv_codec.group_records(physical[1:], first_line=2):
            if not text.strip():
                continue
            try:
                record = csv_codec.parse_line(text, line_number, header)
            except MalformedCsvLineError as exc:
                outcomes.append(
                    ImportRowOutcome(line_number, "skipped", str(exc)),
                )
                continue
            outcomes.append(self._import_record(record))

        return ImportReport(rows=tuple(outcomes), ignored_columns=header.ignored)

    def _import_record(self, record: csv_codec.CsvRecord) -> ImportRowOutcome:
        line_number = record.line_number
        nickname = record.get("nickname").strip()
        if not nickname:
            return ImportRowOutcome(
                line_number,
                "skipped",
                f"Line {line_number}: nickname is missing.",
            )

        tokens: list[str] = []
        for column, value in record.values.items():
            if column in ("id", "nickname") or not value:
                continue
            tokens.extend((f"-{column}", value))

        try:
            if self._store.id_for_nickname(nickname) is not None:
                if tokens:
                    self.update(nickname, tokens)
                return ImportRowOutcome(
                    line_number,
                    "updated",
                    f"Updated '{nickname}'.",
                    nickname=nickname,
                )

            requested = record.get("id").strip()
            if requested:
                tokens.extend(("-id", requested))
            outcome = self.add(nickname, tokens)
        except SshCmError as exc:
            return ImportRowOutcome(
                line_number,
                "skipped",
                f"Line {line_number}: {exc}",
                nickname=nickname,
            )

        warnings: tuple[str, ...] = ()
        if outcome.dropped_id is not None:
            warnings = (f"Requested ID {outcome.dropped_id} not available.",)
        return ImportRowOutcome(
            line_number,
            "added",
            f"Added '{nickname}' with ID {outcome.connection_id}.",
            nickname=nickname,
            warnings=warnings,
        )
