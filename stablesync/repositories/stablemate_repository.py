"""Stablemate repository."""

from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from stablesync.exceptions import InvalidStatusTransition
from stablesync.models import DataFetchStatus, Stablemate, can_transition
from stablesync.repositories.base import BaseRepository


class StablemateRepository(BaseRepository[Stablemate]):
    """Repository for Stablemate model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Stablemate, session)

    async def set_fetch_status(self, stablemate_id: int, status: DataFetchStatus) -> Stablemate | None:
        """
        Move the import status machine.

        Entering IN_PROGRESS stamps the start time and clears the completion
        time; COMPLETED and FAILED stamp the completion time.

        Raises:
            InvalidStatusTransition: the change is not in the transition table,
                or the stored status is not a known state
        """
        stablemate = await self.get(stablemate_id)
        if stablemate is None:
            return None

        try:
            current = DataFetchStatus(stablemate.data_fetch_status)
        except ValueError as e:
            raise InvalidStatusTransition(
                f"Stablemate {stablemate_id}: stored status {stablemate.data_fetch_status!r} is unknown"
            ) from e
        if not can_transition(current, status):
            raise InvalidStatusTransition(
                f"Stablemate {stablemate_id}: {current.value} -> {status.value} not allowed"
            )

        now = datetime.now(timezone.utc)
        data: dict = {"data_fetch_status": status.value}
        if status == DataFetchStatus.IN_PROGRESS:
            data["data_fetch_started_at"] = now
            data["data_fetch_completed_at"] = None
        else:
            data["data_fetch_completed_at"] = now
        return await self.update(stablemate_id, data)

    async def list_ids(self) -> list[int]:
        """IDs of every stablemate, oldest first."""
        return [s.id for s in await self.find_many(order_by="id")]
