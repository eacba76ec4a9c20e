"""Sync trigger API routes (streamed, background, single horse, status)."""

import asyncio
import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from stablesync.database import AsyncSessionLocal, get_db
from stablesync.exceptions import NetworkFailure
from stablesync.models import DataFetchStatus
from stablesync.repositories import StablemateRepository
from stablesync.schemas import (
    ProgressEvent,
    RunReport,
    StatusResponse,
    SyncHorsesRequest,
    SyncStartedResponse,
)
from stablesync.services import SyncOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sync", tags=["sync"])


def get_orchestrator() -> SyncOrchestrator:
    """Orchestrator bound to the application database."""
    return SyncOrchestrator(AsyncSessionLocal)


async def _require_stablemate(db: AsyncSession, stablemate_id: int):
    stablemate = await StablemateRepository(db).get(stablemate_id)
    if not stablemate:
        raise HTTPException(status_code=404, detail="Stablemate not found")
    return stablemate


def _sse(payload: str) -> str:
    return f"data: {payload}\n\n"


@router.post("/stablemates/{stablemate_id}/stream")
async def stream_stablemate_sync(
    stablemate_id: int,
    request: SyncHorsesRequest | None = None,
    db: AsyncSession = Depends(get_db),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """
    Sync a stablemate and stream progress as Server-Sent Events.

    One event per horse (``current``, ``total``, ``horse_name``, ``status``)
    and a terminal event with ``done``, ``results`` and ``errors``.
    """
    await _require_stablemate(db, stablemate_id)
    horse_ids = request.horse_ids if request else None

    queue: asyncio.Queue[ProgressEvent | RunReport | None] = asyncio.Queue()

    async def on_progress(event: ProgressEvent | RunReport) -> None:
        await queue.put(event)

    task = asyncio.create_task(
        orchestrator.sync_stablemate(stablemate_id, horse_ids=horse_ids, progress=on_progress)
    )
    task.add_done_callback(lambda _: queue.put_nowait(None))

    async def event_stream():
        while True:
            event = await queue.get()
            if event is None:
                break
            yield _sse(event.model_dump_json())

        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Streamed sync for stablemate {stablemate_id} crashed: {task.exception()}")
            report = RunReport(
                stablemate_id=stablemate_id,
                status=DataFetchStatus.FAILED,
                error=str(task.exception()),
            )
            yield _sse(report.model_dump_json())

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.post(
    "/stablemates/{stablemate_id}/background",
    response_model=SyncStartedResponse,
    status_code=202,
)
async def start_background_sync(
    stablemate_id: int,
    background_tasks: BackgroundTasks,
    request: SyncHorsesRequest | None = None,
    db: AsyncSession = Depends(get_db),
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Start a sync and return immediately; poll the status endpoint."""
    stablemate = await _require_stablemate(db, stablemate_id)
    horse_ids = request.horse_ids if request else None

    background_tasks.add_task(orchestrator.sync_stablemate, stablemate_id, horse_ids)
    return SyncStartedResponse(
        stablemate_id=stablemate_id,
        message=f"Sync started for '{stablemate.name}'",
    )


@router.post("/horses/{horse_id}", response_model=RunReport)
async def sync_horse(
    horse_id: int,
    orchestrator: SyncOrchestrator = Depends(get_orchestrator),
):
    """Sync one horse now, whatever its status."""
    try:
        return await orchestrator.sync_horse(horse_id)
    except LookupError:
        raise HTTPException(status_code=404, detail="Horse not found")
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except NetworkFailure as e:
        raise HTTPException(status_code=503, detail=f"Source unavailable: {e}")


@router.get("/stablemates/{stablemate_id}/status", response_model=StatusResponse)
async def get_sync_status(
    stablemate_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Current import status of a stablemate."""
    stablemate = await _require_stablemate(db, stablemate_id)
    return StatusResponse(
        stablemate_id=stablemate.id,
        status=DataFetchStatus(stablemate.data_fetch_status),
        started_at=stablemate.data_fetch_started_at,
        completed_at=stablemate.data_fetch_completed_at,
    )
