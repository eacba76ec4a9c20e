"""Per-slot merge rule for pedigree names."""

from collections.abc import Mapping

MIN_REPLACEMENT_LENGTH = 3


def should_replace(stored: str | None, fresh: str | None) -> bool:
    """
    Decide whether a freshly read ancestor name replaces the stored one.

    A fresh value wins when the slot is empty, or when it has at least
    ``MIN_REPLACEMENT_LENGTH`` characters and is strictly longer than the
    stored value. Shorter reads are treated as truncated, not as
    corrections.
    """
    fresh = (fresh or "").strip()
    stored = (stored or "").strip()
    if not fresh:
        return False
    if not stored:
        return True
    return len(fresh) >= MIN_REPLACEMENT_LENGTH and len(fresh) > len(stored)


def merge_slots(stored: Mapping[str, str | None], fresh: Mapping[str, str | None]) -> dict[str, str]:
    """Slots whose fresh value should be written, per ``should_replace``."""
    return {
        slot: value.strip()
        for slot, value in fresh.items()
        if value and should_replace(stored.get(slot), value)
    }
