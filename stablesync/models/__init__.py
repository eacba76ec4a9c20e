"""SQLAlchemy models."""

from stablesync.models.gallop import HorseGallop
from stablesync.models.horse import PEDIGREE_SLOTS, SUMMARY_FIELDS, Horse, HorseStatus
from stablesync.models.race_history import HorseRaceHistory
from stablesync.models.registration import HorseRegistration, RegistrationType
from stablesync.models.stablemate import DataFetchStatus, Stablemate, can_transition

__all__ = [
    "Stablemate",
    "Horse",
    "HorseRaceHistory",
    "HorseRegistration",
    "HorseGallop",
    "DataFetchStatus",
    "HorseStatus",
    "RegistrationType",
    "PEDIGREE_SLOTS",
    "SUMMARY_FIELDS",
    "can_transition",
]
