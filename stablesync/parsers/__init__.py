"""HTML table parsers for TJK pages."""

from stablesync.parsers.common import position_from_row
from stablesync.parsers.gallops import parse_gallops
from stablesync.parsers.pedigree import parse_pedigree
from stablesync.parsers.races import parse_race_page

__all__ = [
    "parse_race_page",
    "parse_gallops",
    "parse_pedigree",
    "position_from_row",
]
