"""Location list storage.

The list is a plain comma-separated file whose first line names the columns
(``city``, ``country`` and optionally ``type`` and ``filename``, in any
order). Values never contain commas, so rows are split on the delimiter
without any quoting rules. Unknown columns are kept as they are, and a
rewritten file keeps its original line endings (``\r\n`` or ``\n``).
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from pathlib import Path

from photo_picker.errors import StoreIOError
from photo_picker.models import Record

LOGGER = logging.getLogger(__name__)

DELIMITER = ","


class MatchStatus(str, Enum):
    NOT_FOUND = "not_found"
    FOUND_EMPTY = "found_empty"
    FOUND_FILLED = "found_filled"


def _split(line: str) -> list[str]:
    return line.split(DELIMITER)


def _join(fields: list[str]) -> str:
    return DELIMITER.join(fields)


def _field(fields: list[str], index: int | None) -> str:
    if index is None or index >= len(fields):
        return ""
    return fields[index].strip()


def _pad(fields: list[str], width: int) -> list[str]:
    return fields + [""] * (width - len(fields))


def _column_index(names: list[str], column: str) -> int | None:
    try:
        return names.index(column)
    except ValueError:
        return None


class _Table:
    """Header plus raw row lines, as read from disk."""

    def __init__(self, lines: list[str], newline: str, trailing_newline: bool) -> None:
        self.header = _split(lines[0])
        self.rows = lines[1:]
        self.newline = newline
        self.trailing_newline = trailing_newline

        names = [h.strip().lower() for h in self.header]
        # Files without named key columns are matched positionally.
        city_idx = _column_index(names, "city")
        country_idx = _column_index(names, "country")
        self.city_idx = 0 if city_idx is None else city_idx
        self.country_idx = 1 if country_idx is None else country_idx
        self.type_idx = _column_index(names, "type")
        self.filename_idx = _column_index(names, "filename")

    def ensure_filename_column(self) -> int:
        if self.filename_idx is not None:
            return self.filename_idx

        self.header.append("filename")
        self.filename_idx = len(self.header) - 1
        width = len(self.header)
        self.rows = [_join(_pad(_split(raw), width)) if raw.strip() else raw for raw in self.rows]
        return self.filename_idx

    def scan(self, city: str, country: str) -> tuple[MatchStatus, int]:
        """Return the match status and the row position it applies to.

        For NOT_FOUND the position is just past the last non-blank row, where
        a new row goes.
        """
        first_match: int | None = None
        end = 0
        for pos, raw in enumerate(self.rows):
            if not raw.strip():
                continue
            end = pos + 1
            fields = _split(raw)
            if _field(fields, self.city_idx) != city or _field(fields, self.country_idx) != country:
                continue
            if not _field(fields, self.filename_idx):
                return MatchStatus.FOUND_EMPTY, pos
            if first_match is None:
                first_match = pos

        if first_match is None:
            return MatchStatus.NOT_FOUND, end
        return MatchStatus.FOUND_FILLED, first_match

    def fill_row(self, pos: int, city: str, country: str, filename: str) -> None:
        fields = _pad(_split(self.rows[pos]), len(self.header))
        fields[self.filename_idx] = filename
        self.rows[pos] = _join(fields)

    def append_row(self, pos: int, city: str, country: str, filename: str) -> None:
        fields = [""] * len(self.header)
        fields[self.city_idx] = city
        fields[self.country_idx] = country
        fields[self.filename_idx] = filename
        # Trailing blank lines are dropped so the new row follows the last one.
        self.rows[pos:] = [_join(fields)]

    def render(self) -> str:
        text = self.newline.join([_join(self.header), *self.rows])
        return text + self.newline if self.trailing_newline else text


# What set_filename does for each scan outcome.
_UPDATE_ACTIONS = {
    MatchStatus.FOUND_EMPTY: _Table.fill_row,
    MatchStatus.FOUND_FILLED: _Table.fill_row,
    MatchStatus.NOT_FOUND: _Table.append_row,
}


class RecordStore:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read_table(self) -> _Table | None:
        try:
            with self.path.open(encoding="utf-8", newline="") as fh:
                text = fh.read()
        except OSError as exc:
            raise StoreIOError(str(self.path), f"Cannot read location list ({exc.strerror or exc})") from exc

        lines = text.splitlines()
        if not lines or not lines[0].strip():
            return None
        newline = "\r\n" if "\r\n" in text else "\n"
        return _Table(lines, newline=newline, trailing_newline=text.endswith(("\n", "\r")))

    def _write_table(self, table: _Table) -> None:
        tmp_path = self.path.with_name(f".{self.path.name}.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8", newline="") as fh:
                fh.write(table.render())
            os.replace(tmp_path, self.path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StoreIOError(str(self.path), f"Cannot write location list ({exc.strerror or exc})") from exc

    def load_all(self) -> list[Record]:
        table = self._read_table()
        if table is None:
            return []

        records: list[Record] = []
        for raw in table.rows:
            if not raw.strip():
                continue
            fields = _split(raw)
            city = _field(fields, table.city_idx)
            country = _field(fields, table.country_idx)
            if not city or not country:
                continue
            records.append(
                Record(
                    city=city,
                    country=country,
                    type=_field(fields, table.type_idx) if table.type_idx is not None else None,
                    filename=_field(fields, table.filename_idx) if table.filename_idx is not None else None,
                )
            )
        LOGGER.debug("Loaded %d records from %s", len(records), self.path)
        return records

    def load_pending(self) -> list[Record]:
        return [r for r in self.load_all() if not r.is_done]

    def find_row_status(self, city: str, country: str) -> MatchStatus:
        table = self._read_table()
        if table is None:
            return MatchStatus.NOT_FOUND
        status, _ = table.scan(city.strip(), country.strip())
        return status

    def set_filename(self, city: str, country: str, filename: str) -> MatchStatus:
        """Record ``filename`` for the row keyed by ``(city, country)``.

        The first matching row with an empty filename is filled. If every
        match already has one, the first match is overwritten. With no match
        a new row is appended. Returns which of the three cases applied.
        """
        table = self._read_table()
        if table is None:
            raise StoreIOError(str(self.path), "Location list is empty")

        city, country = city.strip(), country.strip()
        table.ensure_filename_column()
        status, pos = table.scan(city, country)
        _UPDATE_ACTIONS[status](table, pos, city, country, filename)
        self._write_table(table)

        LOGGER.info("Set filename for %s, %s -> %s (%s)", city, country, filename, status.value)
        return status
