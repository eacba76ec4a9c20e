"""Registration repository."""

from sqlalchemy.ext.asyncio import AsyncSession

from stablesync.models import HorseRegistration
from stablesync.repositories.base import BaseRepository


class RegistrationRepository(BaseRepository[HorseRegistration]):
    """Repository for HorseRegistration model."""

    def __init__(self, session: AsyncSession):
        super().__init__(HorseRegistration, session)

    async def get_by_horse(self, horse_id: int) -> list[HorseRegistration]:
        """Pending entries of a horse, soonest first."""
        return await self.find_many({"horse_id": horse_id}, order_by="race_date")
