"""Test data factories."""

from datetime import date
from typing import Any

from stablesync.fetchers.base import GallopItem, RaceHistoryItem, RegistrationItem
from stablesync.models import (
    DataFetchStatus,
    Horse,
    HorseGallop,
    HorseRaceHistory,
    HorseRegistration,
    HorseStatus,
    RegistrationType,
    Stablemate,
)
from stablesync.services.matching import RecordType, natural_key


def create_stablemate(
    name: str = "Test Eküri",
    status: DataFetchStatus = DataFetchStatus.IDLE,
    **kwargs: Any,
) -> Stablemate:
    """Create a Stablemate instance."""
    return Stablemate(name=name, data_fetch_status=status.value, **kwargs)


def create_horse(
    stablemate_id: int,
    name: str = "KARAYEL",
    external_ref: str | None = "100001",
    status: HorseStatus = HorseStatus.ACTIVE,
    **kwargs: Any,
) -> Horse:
    """Create a Horse instance."""
    return Horse(
        stablemate_id=stablemate_id,
        name=name,
        external_ref=external_ref,
        status=status.value,
        **kwargs,
    )


def race_item(
    race_date: date | None = None,
    city: str = "İstanbul",
    race_name: str = "ŞARTLI 3",
    position: int | None = 1,
    distance: int = 1400,
    surface: str = "Çim",
    **kwargs: Any,
) -> RaceHistoryItem:
    """Create a parsed race history item."""
    return RaceHistoryItem(
        race_date=race_date or date(2024, 5, 12),
        city=city,
        race_name=race_name,
        position=position,
        distance=distance,
        surface=surface,
        **kwargs,
    )


def registration_item(
    race_date: date | None = None,
    city: str = "Ankara",
    distance: int = 1600,
    type: RegistrationType = RegistrationType.KAYIT,
    jockey_name: str | None = None,
    **kwargs: Any,
) -> RegistrationItem:
    """Create a parsed registration item."""
    return RegistrationItem(
        race_date=race_date or date(2099, 6, 1),
        type=type.value,
        city=city,
        distance=distance,
        jockey_name=jockey_name,
        **kwargs,
    )


def gallop_item(
    gallop_date: date | None = None,
    racecourse: str = "Veliefendi",
    distances: dict[str, str] | None = None,
    **kwargs: Any,
) -> GallopItem:
    """Create a parsed gallop item."""
    return GallopItem(
        gallop_date=gallop_date or date(2024, 5, 1),
        racecourse=racecourse,
        distances=distances or {"800": "0.52.10", "600": "0.38.50"},
        **kwargs,
    )


def create_registration(horse_id: int, item: RegistrationItem | None = None) -> HorseRegistration:
    """Create a stored registration row from a parsed item."""
    item = item or registration_item()
    return HorseRegistration(
        horse_id=horse_id,
        natural_key=natural_key(RecordType.REGISTRATION, horse_id, item),
        race_date=item.race_date,
        city=item.city,
        distance=item.distance,
        type=item.type,
        jockey_name=item.jockey_name,
        jockey_id=item.jockey_id,
    )


def create_race_history(horse_id: int, item: RaceHistoryItem | None = None) -> HorseRaceHistory:
    """Create a stored race row from a parsed item."""
    item = item or race_item()
    return HorseRaceHistory(
        horse_id=horse_id,
        natural_key=natural_key(RecordType.RACE, horse_id, item),
        race_date=item.race_date,
        city=item.city,
        race_name=item.race_name,
        position=item.position,
    )


def create_gallop(horse_id: int, item: GallopItem | None = None) -> HorseGallop:
    """Create a stored gallop row from a parsed item."""
    item = item or gallop_item()
    return HorseGallop(
        horse_id=horse_id,
        natural_key=natural_key(RecordType.GALLOP, horse_id, item),
        gallop_date=item.gallop_date,
        racecourse=item.racecourse,
        distances=item.distances,
    )
