"""Pydantic schemas."""

from stablesync.schemas.common import BaseSchema, HorseSyncStatusEnum
from stablesync.schemas.sync import (
    HorseSyncError,
    HorseSyncResult,
    ProgressEvent,
    ReconcileCounts,
    RunReport,
    StatusResponse,
    SyncHorsesRequest,
    SyncStartedResponse,
)

__all__ = [
    "BaseSchema",
    "HorseSyncStatusEnum",
    "ReconcileCounts",
    "HorseSyncResult",
    "HorseSyncError",
    "ProgressEvent",
    "RunReport",
    "SyncHorsesRequest",
    "SyncStartedResponse",
    "StatusResponse",
]
