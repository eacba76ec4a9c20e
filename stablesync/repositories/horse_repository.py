"""Horse repository."""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from stablesync.models import PEDIGREE_SLOTS, SUMMARY_FIELDS, Horse, HorseStatus
from stablesync.repositories.base import BaseRepository


class ExternalRefAlreadySet(ValueError):
    """A horse's external reference cannot be changed once assigned."""


class HorseRepository(BaseRepository[Horse]):
    """Repository for Horse model."""

    def __init__(self, session: AsyncSession):
        super().__init__(Horse, session)

    async def get_syncable(self, stablemate_id: int, include_inactive: bool = True) -> list[Horse]:
        """
        Horses of a stablemate that can be fetched from the source.

        Horses without an external reference were never imported and are
        skipped. ``include_inactive=False`` also skips retired and dead
        horses (nightly batch).
        """
        query = (
            select(Horse)
            .where(Horse.stablemate_id == stablemate_id)
            .where(Horse.external_ref.is_not(None))
            .where(Horse.external_ref != "")
            .order_by(Horse.id)
        )
        if not include_inactive:
            query = query.where(Horse.status == HorseStatus.ACTIVE.value)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_ids(self, stablemate_id: int, horse_ids: list[int]) -> list[Horse]:
        """Selected horses of a stablemate that have an external reference."""
        result = await self.session.execute(
            select(Horse)
            .where(Horse.stablemate_id == stablemate_id)
            .where(Horse.id.in_(horse_ids))
            .where(Horse.external_ref.is_not(None))
            .where(Horse.external_ref != "")
            .order_by(Horse.id)
        )
        return list(result.scalars().all())

    async def update_summary(self, horse_id: int, summary: dict) -> Horse | None:
        """
        Replace the summary snapshot and mark the fetch successful.

        Only summary fields are written; identity fields are never touched
        from the sync path.
        """
        data = {field: summary.get(field) for field in SUMMARY_FIELDS}
        data["data_fetched_at"] = datetime.now(timezone.utc)
        data["data_fetch_error"] = None
        return await self.update(horse_id, data)

    async def update_pedigree(self, horse_id: int, slots: dict[str, str]) -> Horse | None:
        """Write pedigree slots. Unknown slot names are rejected."""
        unknown = set(slots) - set(PEDIGREE_SLOTS)
        if unknown:
            raise ValueError(f"Unknown pedigree slots: {sorted(unknown)}")
        if not slots:
            return await self.get(horse_id)
        return await self.update(horse_id, slots)

    async def record_fetch_error(self, horse_id: int, message: str) -> Horse | None:
        """Store the last fetch error; summary and timestamp stay as they were."""
        return await self.update(horse_id, {"data_fetch_error": message})

    async def assign_external_ref(self, horse_id: int, external_ref: str) -> Horse | None:
        """
        Link a horse to its source record.

        Raises:
            ExternalRefAlreadySet: the horse already has a different reference
        """
        horse = await self.get(horse_id)
        if horse is None:
            return None
        if horse.external_ref and horse.external_ref != external_ref:
            raise ExternalRefAlreadySet(
                f"Horse {horse_id} already linked to {horse.external_ref}"
            )
        if horse.external_ref == external_ref:
            return horse
        return await self.update(horse_id, {"external_ref": external_ref})
