"""Parser for the four-generation pedigree page."""

import logging

from bs4 import Tag

from stablesync.exceptions import SchemaDrift
from stablesync.fetchers.base import PageKind, PedigreeInfo
from stablesync.models.horse import PEDIGREE_SLOTS
from stablesync.parsers.common import cell_text, clean_text, make_soup

logger = logging.getLogger(__name__)

PEDIGREE_TABLE_ID = "tblPedigri"

# Slot -> (row, column), 1-based, in #tblPedigri
SLOT_POSITIONS: dict[str, tuple[int, int]] = {
    "sire_name": (1, 2),
    "dam_name": (2, 2),
    "sire_sire": (1, 3),
    "sire_dam": (2, 3),
    "dam_sire": (3, 3),
    "dam_dam": (4, 3),
    "sire_sire_sire": (1, 4),
    "sire_sire_dam": (2, 4),
    "sire_dam_sire": (3, 4),
    "sire_dam_dam": (4, 4),
    "dam_sire_sire": (5, 4),
    "dam_sire_dam": (6, 4),
    "dam_dam_sire": (7, 4),
    "dam_dam_dam": (8, 4),
}

GRANDPARENT_SLOTS = ("sire_sire", "sire_dam", "dam_sire", "dam_dam")


def _positional_slots(table: Tag) -> dict[str, str]:
    rows = [row.find_all("td", recursive=False) for row in table.find_all("tr")]
    slots: dict[str, str] = {}
    for slot, (row_number, column_number) in SLOT_POSITIONS.items():
        if row_number > len(rows):
            continue
        cells = rows[row_number - 1]
        if column_number > len(cells):
            continue
        name = cell_text(cells[column_number - 1])
        if name:
            slots[slot] = name
    return slots


def _linked_names(table: Tag) -> list[str]:
    """Horse names from pedigree links, in document order (subject first)."""
    names = []
    for link in table.find_all("a", href=True):
        href = link["href"]
        if "AtId" not in href and "Atkodu" not in href:
            continue
        name = clean_text(link.get_text(" "))
        if len(name) > 2 and "http" not in name and "." not in name:
            names.append(name)
    return names


def _slots_from_links(names: list[str]) -> dict[str, str]:
    """
    Assign ordered link names to slots.

    names[0] is the horse itself, then sire and dam, then the four
    grandparents and the eight great-grandparents. A generation is only
    filled when every name in it is present.
    """
    slots: dict[str, str] = {}
    for size, first, last in ((3, 1, 2), (7, 3, 6), (15, 7, 14)):
        if len(names) < size:
            break
        for offset in range(first, last + 1):
            slots[PEDIGREE_SLOTS[offset - 1]] = names[offset]
    return slots


def parse_pedigree(html: str) -> PedigreeInfo:
    """
    Parse ``#tblPedigri``.

    Cells are read by position; when no grandparent could be read that way
    the ordered horse links in the table are used instead.

    Raises:
        SchemaDrift: the pedigree table is missing
    """
    soup = make_soup(html)
    table = soup.find("table", id=PEDIGREE_TABLE_ID)
    if table is None:
        raise SchemaDrift("Pedigree table not found", page_kind=PageKind.PEDIGREE.value)

    slots = _positional_slots(table)
    if not any(slot in slots for slot in GRANDPARENT_SLOTS):
        logger.debug("Pedigree cells not positional, falling back to links")
        for slot, name in _slots_from_links(_linked_names(table)).items():
            slots.setdefault(slot, name)

    return PedigreeInfo(slots=slots)
