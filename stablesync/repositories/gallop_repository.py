"""Gallop repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from stablesync.models import HorseGallop
from stablesync.repositories.base import BaseRepository


class GallopRepository(BaseRepository[HorseGallop]):
    """Repository for HorseGallop model (append-only)."""

    def __init__(self, session: AsyncSession):
        super().__init__(HorseGallop, session)

    async def get_by_horse(self, horse_id: int) -> list[HorseGallop]:
        """All stored gallops of a horse, oldest first."""
        return await self.find_many({"horse_id": horse_id}, order_by="gallop_date")
