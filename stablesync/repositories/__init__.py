"""Data access repositories."""

from stablesync.repositories.base import BaseRepository
from stablesync.repositories.gallop_repository import GallopRepository
from stablesync.repositories.horse_repository import ExternalRefAlreadySet, HorseRepository
from stablesync.repositories.race_history_repository import RaceHistoryRepository
from stablesync.repositories.registration_repository import RegistrationRepository
from stablesync.repositories.stablemate_repository import StablemateRepository

__all__ = [
    "BaseRepository",
    "StablemateRepository",
    "HorseRepository",
    "RaceHistoryRepository",
    "RegistrationRepository",
    "GallopRepository",
    "ExternalRefAlreadySet",
]
