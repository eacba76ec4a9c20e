"""Synchronization run schemas (progress events and reports)."""

from datetime import datetime

from pydantic import Field

from stablesync.models import DataFetchStatus
from stablesync.schemas.common import BaseSchema, HorseSyncStatusEnum


class ReconcileCounts(BaseSchema):
    """Rows written for one record type."""

    inserted: int = 0
    updated: int = 0
    deleted: int = 0


class HorseSyncResult(BaseSchema):
    """A horse that was reconciled (possibly with degraded page kinds)."""

    horse_id: int
    horse_name: str
    races: ReconcileCounts = Field(default_factory=ReconcileCounts)
    registrations: ReconcileCounts = Field(default_factory=ReconcileCounts)
    gallops: ReconcileCounts = Field(default_factory=ReconcileCounts)
    pedigree_updated: list[str] = Field(default_factory=list)
    summary_updated: bool = False
    warnings: list[str] = Field(default_factory=list)


class HorseSyncError(BaseSchema):
    """A horse whose sync failed."""

    horse_id: int
    horse_name: str
    error: str


class ProgressEvent(BaseSchema):
    """Emitted once per horse as the run advances."""

    current: int
    total: int
    horse_id: int
    horse_name: str
    status: HorseSyncStatusEnum
    error: str | None = None


class RunReport(BaseSchema):
    """Terminal event of a run."""

    done: bool = True
    stablemate_id: int | None = None
    status: DataFetchStatus
    results: list[HorseSyncResult] = Field(default_factory=list)
    errors: list[HorseSyncError] = Field(default_factory=list)
    error: str | None = None  # run-level failure (horse list or browser setup)


class SyncHorsesRequest(BaseSchema):
    """Optional horse selection for a stablemate run."""

    horse_ids: list[int] | None = None


class SyncStartedResponse(BaseSchema):
    """Response of the background trigger."""

    stablemate_id: int
    message: str


class StatusResponse(BaseSchema):
    """Current import status of a stablemate."""

    stablemate_id: int
    status: DataFetchStatus
    started_at: datetime | None = None
    completed_at: datetime | None = None
