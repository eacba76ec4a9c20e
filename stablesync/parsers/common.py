"""Shared table helpers for TJK pages.

The source reorders and renames columns over time, so every parser maps
header text to column indices instead of trusting fixed positions.
"""

import re
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date

from bs4 import BeautifulSoup, Tag

from stablesync.exceptions import DateParseFailure, SchemaDrift

DATE_PATTERN = re.compile(r"(\d{2})\.(\d{2})\.(\d{4})")

# A finish time such as "1.33.94" or "1:33.94"
TIME_MARKERS = (".", ":")

DEFAULT_POSITION_INDEX = 5


@dataclass(frozen=True)
class ColumnRule:
    """Maps a semantic column to header substrings."""

    key: str
    includes: tuple[str, ...]
    excludes: tuple[str, ...] = ()

    def matches(self, header: str) -> bool:
        if any(word in header for word in self.excludes):
            return False
        return any(word in header for word in self.includes)


def make_soup(html: str) -> BeautifulSoup:
    """Parse a rendered document."""
    return BeautifulSoup(html, "lxml")


def clean_text(value: str | None) -> str:
    """Strip and collapse internal whitespace."""
    if not value:
        return ""
    return " ".join(value.split())


def cell_text(cell: Tag | None) -> str:
    """Visible text of a cell, preferring its first link's text."""
    if cell is None:
        return ""
    link = cell.find("a")
    if link is not None:
        text = clean_text(link.get_text(" "))
        if text:
            return text
    return clean_text(cell.get_text(" "))


def normalize_header(text: str) -> str:
    """Lower-case a header for substring matching (Turkish aware)."""
    return clean_text(text).replace("İ", "i").lower()


def parse_tr_date(text: str) -> date:
    """
    Parse a ``DD.MM.YYYY`` date.

    Raises:
        DateParseFailure: the text holds no valid date
    """
    match = DATE_PATTERN.search(text or "")
    if not match:
        raise DateParseFailure(f"Not a DD.MM.YYYY date: {text!r}")
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateParseFailure(f"Invalid date {text!r}: {e}") from e


def parse_tr_number(text: str | None) -> float | None:
    """Parse a Turkish formatted amount such as ``757.300,50 t``."""
    if not text:
        return None
    match = re.search(r"[\d.,]+", text)
    if not match:
        return None
    raw = match.group(0).replace(".", "").replace(",", ".")
    try:
        return float(raw)
    except ValueError:
        return None


def parse_int(text: str | None) -> int | None:
    """Leading integer of a cell, e.g. ``"1400"`` or ``"56 kg"``."""
    if not text:
        return None
    match = re.match(r"\s*(\d+)", text)
    return int(match.group(1)) if match else None


def parse_float(text: str | None) -> float | None:
    """Leading decimal of a cell, accepting ``57,5`` and ``57.5``."""
    if not text:
        return None
    match = re.match(r"\s*(\d+(?:[.,]\d+)?)", text)
    if not match:
        return None
    return float(match.group(1).replace(",", "."))


def query_param(href: str | None, name: str) -> str | None:
    """Numeric query parameter value from a link."""
    if not href:
        return None
    match = re.search(rf"{re.escape(name)}=(\d+)", href)
    return match.group(1) if match else None


def find_table(
    soup: BeautifulSoup,
    required: Sequence[str] = (),
    any_of: Sequence[Sequence[str]] = (),
    page_kind: str | None = None,
) -> Tag:
    """
    Locate the first table whose text contains all ``required`` markers,
    or all markers of any group in ``any_of``.

    Raises:
        SchemaDrift: no table matched
    """
    groups = [tuple(required)] if required else []
    groups.extend(tuple(group) for group in any_of)

    for table in soup.find_all("table"):
        text = table.get_text(" ")
        if any(all(marker in text for marker in group) for group in groups):
            return table

    raise SchemaDrift(f"No table with markers {groups}", page_kind=page_kind)


def header_cells(table: Tag) -> list[str]:
    """Header texts from ``thead tr`` or, failing that, the first row."""
    row = table.select_one("thead tr") or table.find("tr")
    if row is None:
        return []
    return [clean_text(cell.get_text(" ")) for cell in row.find_all(["th", "td"])]


def body_rows(table: Tag, min_cells: int) -> Iterator[list[Tag]]:
    """Yield ``td`` lists of rows that are wide enough to hold data."""
    for row in table.find_all("tr"):
        cells = row.find_all("td")
        if len(cells) >= min_cells:
            yield cells


def map_headers(
    headers: Iterable[str],
    rules: Sequence[ColumnRule],
    defaults: dict[str, int] | None = None,
) -> dict[str, int]:
    """
    Build a column-key -> index map.

    Each header is assigned to the first rule it matches. When two headers
    match the same rule, the first one wins. Keys with no matching header
    take their index from ``defaults``.
    """
    mapping: dict[str, int] = {}
    for index, header in enumerate(headers):
        text = normalize_header(header)
        if not text:
            continue
        for rule in rules:
            if rule.matches(text):
                mapping.setdefault(rule.key, index)
                break

    for key, index in (defaults or {}).items():
        mapping.setdefault(key, index)
    return mapping


def cell_at(cells: Sequence[Tag], index: int | None) -> Tag | None:
    if index is None or index < 0 or index >= len(cells):
        return None
    return cells[index]


def looks_like_time(text: str) -> bool:
    return any(marker in text for marker in TIME_MARKERS)


def position_columns(headers: Sequence[str]) -> tuple[int | None, int | None]:
    """
    Find the finish-position and race-time columns.

    Returns:
        (index of the header exactly "S", index of the first "Derece" header)
    """
    position_index = None
    time_index = None
    for index, header in enumerate(headers):
        text = normalize_header(header)
        if "derece" in text:
            if time_index is None:
                time_index = index
            continue
        if text == "s" and position_index is None:
            position_index = index
    return position_index, time_index


def _to_position(text: str) -> int | None:
    text = clean_text(text)
    if not text or looks_like_time(text):
        return None
    return int(text) if text.isdigit() else None


def position_from_row(
    headers: Sequence[str],
    cells: Sequence[str],
    default_index: int = DEFAULT_POSITION_INDEX,
) -> int | None:
    """
    Read the finish position of a race row.

    The position column ("S") sits next to the race time column ("Derece")
    and the two are easy to confuse. Resolution order:

    1. the column headed exactly "S" (never a header containing "derece");
    2. if that cell holds a time, or there is no "S" header, the column
       immediately before "Derece";
    3. with neither header present, ``default_index``.

    A time string is never returned as a position: such a cell yields None.

    Args:
        headers: header row texts
        cells: body row texts

    Returns:
        Finishing position, or None when the row has none (e.g. not run yet)
    """
    position_index, time_index = position_columns(headers)

    def text_at(index: int | None) -> str:
        if index is None or index < 0 or index >= len(cells):
            return ""
        return clean_text(cells[index])

    if position_index is None and time_index is None:
        return _to_position(text_at(default_index))

    if position_index is not None:
        value = text_at(position_index)
        if not looks_like_time(value):
            return _to_position(value)

    if time_index is not None and time_index > 0:
        return _to_position(text_at(time_index - 1))
    return None
