"""Race history repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from stablesync.models import HorseRaceHistory
from stablesync.repositories.base import BaseRepository


class RaceHistoryRepository(BaseRepository[HorseRaceHistory]):
    """Repository for HorseRaceHistory model (append-only)."""

    def __init__(self, session: AsyncSession):
        super().__init__(HorseRaceHistory, session)

    async def get_by_horse(self, horse_id: int) -> list[HorseRaceHistory]:
        """All stored races of a horse, oldest first."""
        return await self.find_many({"horse_id": horse_id}, order_by="race_date")
