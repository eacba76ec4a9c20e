"""Natural keys for records that have no stable id at the source.

Every reconciliation decision goes through these functions. A key must be
the same for two reads of the same fact even when spacing or letter case
differ, and must differ for two distinct facts.
"""

import enum
from datetime import date
from typing import Any

KEY_SEPARATOR = "|"


class RecordType(str, enum.Enum):
    """Record kinds reconciled per horse."""

    RACE = "RACE"
    REGISTRATION = "REGISTRATION"
    GALLOP = "GALLOP"


def normalize_part(value: Any) -> str:
    """Canonical text form of one key component."""
    if value is None:
        return ""
    if isinstance(value, date):
        return value.isoformat()
    return " ".join(str(value).split()).casefold()


def _join(horse_id: int, *parts: Any) -> str:
    return KEY_SEPARATOR.join([str(horse_id), *(normalize_part(p) for p in parts)])


def race_key(horse_id: int, record: Any) -> str:
    """(horse, race date, race name, city)"""
    return _join(horse_id, record.race_date, record.race_name, record.city)


def registration_key(horse_id: int, record: Any) -> str:
    """(horse, race date, city, distance)"""
    return _join(horse_id, record.race_date, record.city, record.distance)


def gallop_key(horse_id: int, record: Any) -> str:
    """(horse, gallop date, racecourse)"""
    return _join(horse_id, record.gallop_date, record.racecourse)


KEY_FUNCTIONS = {
    RecordType.RACE: race_key,
    RecordType.REGISTRATION: registration_key,
    RecordType.GALLOP: gallop_key,
}


def natural_key(record_type: RecordType, horse_id: int, record: Any) -> str:
    """
    Key of a parsed item or stored row.

    Works on both because parsed items and model rows share attribute names.
    """
    return KEY_FUNCTIONS[record_type](horse_id, record)
