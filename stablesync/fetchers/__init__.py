"""External data fetchers."""

from stablesync.fetchers.base import (
    DataFetcher,
    FetchTarget,
    GallopItem,
    HorseSummary,
    PageKind,
    PedigreeInfo,
    RaceHistoryItem,
    RacePage,
    RegistrationItem,
    RenderedDocument,
)
from stablesync.fetchers.tjk import TJKFetcher

__all__ = [
    "DataFetcher",
    "FetchTarget",
    "PageKind",
    "RenderedDocument",
    "RaceHistoryItem",
    "RegistrationItem",
    "GallopItem",
    "HorseSummary",
    "PedigreeInfo",
    "RacePage",
    "TJKFetcher",
]
