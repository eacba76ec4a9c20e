"""Parser for the training statistics (idman) page."""

import logging
import re
from datetime import date, timedelta

from stablesync.exceptions import DateParseFailure, SchemaDrift
from stablesync.fetchers.base import GallopItem, PageKind
from stablesync.parsers.common import (
    ColumnRule,
    body_rows,
    cell_at,
    cell_text,
    find_table,
    header_cells,
    make_soup,
    map_headers,
    parse_tr_date,
)

logger = logging.getLogger(__name__)

MIN_GALLOP_ROW_CELLS = 5

DISTANCE_HEADER = re.compile(r"(\d+)\s*m", re.IGNORECASE)
GALLOP_TIME = re.compile(r"\d+\.\d+\.\d+")

GALLOP_COLUMN_RULES = (
    ColumnRule("date", ("tarih",)),
    ColumnRule("status", ("durum",)),
    ColumnRule("racecourse", ("i. hip", "hipodrom")),
    ColumnRule("surface", ("pist",)),
    ColumnRule("jockey", ("jokey",)),
)


def distance_columns(headers: list[str]) -> dict[str, int]:
    """Map ``"1400"`` style distances to the index of their ``1400m`` header."""
    columns: dict[str, int] = {}
    for index, header in enumerate(headers):
        match = DISTANCE_HEADER.fullmatch(header.strip())
        if match:
            columns.setdefault(match.group(1), index)
    return columns


def parse_gallops(
    html: str,
    today: date | None = None,
    lookback_days: int | None = None,
) -> list[GallopItem]:
    """
    Parse the gallop table.

    Only ``d.dd.dd`` shaped times are kept; a row with no timed distance is
    not a gallop and is skipped.

    Args:
        html: rendered page
        today: reference day for ``lookback_days``
        lookback_days: drop gallops older than this many days

    Returns:
        List of GallopItem

    Raises:
        SchemaDrift: table, date column or distance columns are missing
    """
    soup = make_soup(html)
    table = find_table(
        soup,
        any_of=(("İ. Tarihi",), ("1400m", "1200m")),
        page_kind=PageKind.GALLOPS.value,
    )

    headers = header_cells(table)
    distances = distance_columns(headers)
    columns = map_headers(
        [h if not DISTANCE_HEADER.fullmatch(h.strip()) else "" for h in headers],
        GALLOP_COLUMN_RULES,
    )
    if "date" not in columns or not distances:
        raise SchemaDrift("Gallop table has no date or distance columns", page_kind=PageKind.GALLOPS.value)

    cutoff = None
    if lookback_days is not None:
        cutoff = (today or date.today()) - timedelta(days=lookback_days)

    gallops: list[GallopItem] = []
    for cells in body_rows(table, MIN_GALLOP_ROW_CELLS):
        first = cell_text(cells[0])
        if not first or "At Adı" in first:
            continue

        try:
            gallop_date = parse_tr_date(cell_text(cell_at(cells, columns["date"])))
        except DateParseFailure as e:
            logger.debug(f"Skipping gallop row: {e}")
            continue

        if cutoff is not None and gallop_date < cutoff:
            continue

        times: dict[str, str] = {}
        for distance, index in distances.items():
            text = cell_text(cell_at(cells, index))
            if GALLOP_TIME.search(text):
                times[distance] = text
        if not times:
            continue

        gallops.append(
            GallopItem(
                gallop_date=gallop_date,
                distances=times,
                status=cell_text(cell_at(cells, columns.get("status"))) or None,
                racecourse=cell_text(cell_at(cells, columns.get("racecourse"))) or None,
                surface=cell_text(cell_at(cells, columns.get("surface"))) or None,
                jockey_name=cell_text(cell_at(cells, columns.get("jockey"))) or None,
            )
        )

    return gallops
