"""CSV serialisation of connection rows.

Export writes raw stored values (no resolution); ``None`` becomes an
empty field.  Import is record-oriented: a quoted value may span several
physical lines, but a quote that never closes only costs the line it
starts on, so one malformed line never derails the ones after it.

Guarantees
----------
* No filesystem access — callers hand in streams or line iterables.
* Column order on import is taken from the header, not assumed.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import TextIO

from ssh_cm.core.models import CONNECTION_COLUMNS, ConnectionProfile
from ssh_cm.exceptions import MalformedCsvLineError, MissingHeaderError


EXPORT_HEADER: tuple[str, ...] = CONNECTION_COLUMNS


# ---------------------------------------------------------------------------
# Parsed structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CsvHeader:
    """Column layout of an import stream.

    ``columns`` has one entry per header field; unrecognised names are
    ``None`` so their positions are still skipped correctly.
    """

    columns: tuple[str | None, ...]
    ignored: tuple[str, ...] = ()

    def __contains__(self, name: object) -> bool:
        return name in self.columns


@dataclass(frozen=True, slots=True)
class CsvRecord:
    """One data line mapped to recognised column names."""

    line_number: int
    values: dict[str, str]

    def get(self, column: str) -> str:
        return self.values.get(column, "")


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def _join(fields: Iterable[object]) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(fields)
    return buffer.getvalue()


def format_rows(profiles: Iterable[ConnectionProfile]) -> Iterator[str]:
    """Yield the header line followed by one line per profile."""
    yield _join(EXPORT_HEADER)
    for profile in profiles:
        row = profile.as_dict()
        yield _join("" if row[col] is None else row[col] for col in EXPORT_HEADER)


def write_csv(profiles: Iterable[ConnectionProfile], stream: TextIO) -> int:
    """Write *profiles* to *stream*; return the number of data rows."""
    count = -1
    for count, line in enumerate(format_rows(profiles)):
        stream.write(line)
    return count


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------

def split_line(text: str, line_number: int) -> list[str]:
    """Split one record with strict CSV quoting rules.

    *text* may hold several physical lines when a quoted field contains
    a line break.

    Raises
    ------
    MalformedCsvLineError
        On unbalanced quotes, stray characters after a closing quote,
        or text holding more than one record.
    """
    try:
        rows = list(csv.reader(io.StringIO(text), strict=True))
    except csv.Error as exc:
        raise MalformedCsvLineError(line_number, str(exc)) from exc
    if len(rows) > 1:
        raise MalformedCsvLineError(line_number, "expected a single record")
    return rows[0] if rows else []


def _parses(text: str) -> bool:
    try:
        split_line(text, 0)
    except MalformedCsvLineError:
        return False
    return True


def group_records(
    lines: Sequence[str],
    first_line: int = 1,
) -> Iterator[tuple[int, str]]:
    """Yield ``(line number, text)`` for each record in *lines*.

    A line with an odd number of quote characters opens a field that
    continues onto the following lines until the quotes balance again.
    When they never balance, or the joined text is not one valid
    record, the line is yielded on its own and grouping resumes on the
    next line.
    """
    index = 0
    while index < len(lines):
        start = index
        text = lines[index]
        index += 1

        quotes = text.count('"')
        if quotes % 2:
            end = index
            while end < len(lines) and quotes % 2:
                quotes += lines[end].count('"')
                end += 1
            if quotes % 2 == 0:
                joined = "".join(
                    line if line.endswith("\n") else line + "\n"
                    for line in lines[start:end]
                )
                if _parses(joined):
                    text, index = joined, end

        yield first_line + start, text


def parse_header(line: str | None) -> CsvHeader:
    """Build a :class:`CsvHeader` from the first input line.

    Raises
    ------
    MissingHeaderError
        If there is no first line or it holds no column names.
    """
    if line is None or not line.strip():
        raise MissingHeaderError(
            "You must pass CSV content to stdin.",
            hint="Example: ssh-cm import < connections.csv",
        )

    try:
        names = split_line(line, 1)
    except MalformedCsvLineError as exc:
        raise MissingHeaderError(f"Unreadable CSV header: {exc.reason}") from exc

    columns: list[str | None] = []
    ignored: list[str] = []
    for raw in names:
        name = raw.strip().lower()
        if name in CONNECTION_COLUMNS:
            columns.append(name)
        else:
            columns.append(None)
            ignored.append(raw)
    return CsvHeader(columns=tuple(columns), ignored=tuple(ignored))


def parse_line(line: str, line_number: int, header: CsvHeader) -> CsvRecord:
    """Map one data line onto *header*.

    Short lines are padded with empty values; lines with more fields
    than the header are rejected.
    """
    fields = split_line(line, line_number)
    if len(fields) > len(header.columns):
        raise MalformedCsvLineError(
            line_number,
            f"expected at most {len(header.columns)} fields, got {len(fields)}",
        )

    values: dict[str, str] = {}
    for column, value in zip(header.columns, fields):
        if column is not None:
            values[column] = value
    return CsvRecord(line_number=line_number, values=values)
