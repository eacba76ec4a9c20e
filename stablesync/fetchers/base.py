"""Base data fetcher and records read from the external source."""

import enum
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date

from stablesync.config import Settings, get_settings


class PageKind(str, enum.Enum):
    """Kinds of pages fetched per horse."""

    RACES = "RACES"  # summary, race history, registrations, sire/dam
    GALLOPS = "GALLOPS"
    PEDIGREE = "PEDIGREE"


@dataclass(frozen=True)
class FetchTarget:
    """One page to fetch for one horse."""

    external_ref: str
    page_kind: PageKind


@dataclass
class RenderedDocument:
    """HTML captured from the browser after rendering."""

    target: FetchTarget
    url: str
    html: str
    partial: bool = False  # timeout or missing selector; DOM as far as it got


@dataclass
class RaceHistoryItem:
    """Completed race row from the horse's race page."""

    race_date: date
    city: str | None = None
    distance: int | None = None
    surface: str | None = None
    surface_type: str | None = None
    position: int | None = None
    finish_time: str | None = None
    weight: float | None = None
    jockey_name: str | None = None
    jockey_id: str | None = None
    race_number: int | None = None
    race_name: str | None = None
    race_type: str | None = None
    trainer_name: str | None = None
    trainer_id: str | None = None
    handicap_points: int | None = None
    prize_money: float | None = None
    video_url: str | None = None
    photo_url: str | None = None


@dataclass
class RegistrationItem:
    """Upcoming race entry row (KAYIT or DEKLARE)."""

    race_date: date
    type: str
    city: str | None = None
    distance: int | None = None
    surface: str | None = None
    surface_type: str | None = None
    race_type: str | None = None
    jockey_name: str | None = None
    jockey_id: str | None = None


@dataclass
class GallopItem:
    """Training session row."""

    gallop_date: date
    distances: dict[str, str] = field(default_factory=dict)  # metres -> time
    status: str | None = None
    racecourse: str | None = None
    surface: str | None = None
    jockey_name: str | None = None


@dataclass
class HorseSummary:
    """Aggregated statistics shown on the race page."""

    handicap_points: int | None = None
    total_earnings: float | None = None
    prize_money: float | None = None
    owner_premium: float | None = None
    breeder_premium: float | None = None
    total_races: int | None = None
    first_places: int | None = None
    second_places: int | None = None
    third_places: int | None = None
    fourth_places: int | None = None
    fifth_places: int | None = None
    turf_races: int | None = None
    turf_firsts: int | None = None
    turf_earnings: float | None = None
    dirt_races: int | None = None
    dirt_firsts: int | None = None
    dirt_earnings: float | None = None
    synthetic_races: int | None = None
    synthetic_firsts: int | None = None
    synthetic_earnings: float | None = None


@dataclass
class PedigreeInfo:
    """Ancestor names keyed by pedigree slot (see ``PEDIGREE_SLOTS``)."""

    slots: dict[str, str] = field(default_factory=dict)


@dataclass
class RacePage:
    """Everything parsed from one RACES document."""

    summary: HorseSummary
    races: list[RaceHistoryItem]
    registrations: list[RegistrationItem]
    pedigree: PedigreeInfo


class DataFetcher(ABC):
    """Base class for external page fetchers.

    A fetcher is an async context manager scoped to one run: the expensive
    resource (browser, HTTP client) is acquired on enter and released on exit.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self.delay = self.settings.scraping_delay

    async def start(self) -> None:
        """Acquire run-scoped resources."""

    async def close(self) -> None:
        """Release run-scoped resources."""

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    @abstractmethod
    async def fetch(self, target: FetchTarget) -> RenderedDocument:
        """Fetch one rendered page.

        Raises:
            NetworkFailure: navigation failed (DNS, reset, hard timeout).
            BotBlocked: the source refused the automated client.
        """
        pass
