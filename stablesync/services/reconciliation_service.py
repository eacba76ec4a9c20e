"""Reconciliation of freshly parsed records against stored rows."""

import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from stablesync.fetchers.base import GallopItem, HorseSummary, RaceHistoryItem, RegistrationItem
from stablesync.models import PEDIGREE_SLOTS, RegistrationType
from stablesync.repositories import (
    BaseRepository,
    GallopRepository,
    HorseRepository,
    RaceHistoryRepository,
    RegistrationRepository,
)
from stablesync.schemas import ReconcileCounts
from stablesync.services.matching import RecordType, natural_key
from stablesync.services.pedigree_policy import merge_slots

logger = logging.getLogger(__name__)


@dataclass
class Delta:
    """Rows written for one record type of one horse."""

    inserted: list[dict[str, Any]] = field(default_factory=list)
    updated: list[int] = field(default_factory=list)
    deleted: list[int] = field(default_factory=list)

    def counts(self) -> ReconcileCounts:
        return ReconcileCounts(
            inserted=len(self.inserted),
            updated=len(self.updated),
            deleted=len(self.deleted),
        )


class ReconciliationService:
    """
    Computes and applies insert/update/delete deltas for one horse.

    All writes are keyed by natural key so overlapping runs converge on the
    same rows. The caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.horse_repo = HorseRepository(session)
        self.race_repo = RaceHistoryRepository(session)
        self.registration_repo = RegistrationRepository(session)
        self.gallop_repo = GallopRepository(session)

    async def reconcile(self, record_type: RecordType, horse_id: int, fresh: Sequence[Any]) -> Delta:
        """Apply the policy of ``record_type`` to a fresh snapshot."""
        if record_type == RecordType.RACE:
            return await self.reconcile_races(horse_id, fresh)
        if record_type == RecordType.GALLOP:
            return await self.reconcile_gallops(horse_id, fresh)
        if record_type == RecordType.REGISTRATION:
            return await self.reconcile_registrations(horse_id, fresh)
        raise ValueError(f"Unknown record type: {record_type}")

    async def _insert_new(self, repo: BaseRepository, rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        Insert rows, skipping natural keys stored meanwhile by another run.

        Returns only the rows this call actually wrote.
        """
        written = set(await repo.create_many(rows, skip_duplicates=True, returning="natural_key"))
        skipped = len(rows) - len(written)
        if skipped:
            logger.debug(f"{skipped} {repo.model.__tablename__} rows were already stored")
        return [row for row in rows if row["natural_key"] in written]

    async def _append_only(
        self,
        repo: BaseRepository,
        record_type: RecordType,
        horse_id: int,
        fresh: Sequence[Any],
    ) -> Delta:
        """Insert records whose key is not stored yet; never touch stored rows."""
        existing = await repo.find_many({"horse_id": horse_id})
        seen = {row.natural_key for row in existing}

        rows = []
        for item in fresh:
            key = natural_key(record_type, horse_id, item)
            if key in seen:
                continue
            seen.add(key)
            rows.append({**asdict(item), "horse_id": horse_id, "natural_key": key})

        return Delta(inserted=await self._insert_new(repo, rows))

    async def reconcile_races(self, horse_id: int, fresh: Sequence[RaceHistoryItem]) -> Delta:
        """Race history is append-only."""
        return await self._append_only(self.race_repo, RecordType.RACE, horse_id, fresh)

    async def reconcile_gallops(self, horse_id: int, fresh: Sequence[GallopItem]) -> Delta:
        """Gallops are append-only."""
        return await self._append_only(self.gallop_repo, RecordType.GALLOP, horse_id, fresh)

    async def reconcile_registrations(self, horse_id: int, fresh: Sequence[RegistrationItem]) -> Delta:
        """
        Full sync of pending entries against one fresh snapshot.

        - stored keys missing from ``fresh`` are deleted (race run or withdrawn)
        - KAYIT rows seen as DEKLARE are updated in place (type and jockey)
        - new keys are inserted

        DEKLARE -> KAYIT is never applied; the row is left as it is.
        """
        existing = {row.natural_key: row for row in await self.registration_repo.get_by_horse(horse_id)}

        fresh_by_key: dict[str, RegistrationItem] = {}
        for item in fresh:
            fresh_by_key.setdefault(natural_key(RecordType.REGISTRATION, horse_id, item), item)

        delta = Delta()
        stale_ids = [row.id for key, row in existing.items() if key not in fresh_by_key]

        new_rows = []
        for key, item in fresh_by_key.items():
            row = existing.get(key)
            if row is None:
                new_rows.append({**asdict(item), "horse_id": horse_id, "natural_key": key})
                continue
            if row.type == RegistrationType.KAYIT.value and item.type == RegistrationType.DEKLARE.value:
                await self.registration_repo.update(
                    row.id,
                    {
                        "type": RegistrationType.DEKLARE.value,
                        "jockey_name": item.jockey_name,
                        "jockey_id": item.jockey_id,
                    },
                )
                delta.updated.append(row.id)
            elif row.type == RegistrationType.DEKLARE.value and item.type == RegistrationType.KAYIT.value:
                logger.debug(f"Ignoring DEKLARE -> KAYIT for horse {horse_id} ({key})")

        await self.registration_repo.delete_many(stale_ids)
        delta.deleted = stale_ids
        delta.inserted = await self._insert_new(self.registration_repo, new_rows)
        return delta

    async def merge_pedigree(self, horse_id: int, fresh: dict[str, str]) -> list[str]:
        """
        Merge ancestor names slot by slot.

        Heuristic only: a name is replaced when the stored slot is empty or
        the fresh name is at least three characters and longer, on the
        assumption that shorter reads are truncated. It cannot tell a real
        correction from a truncation.

        Returns:
            Names of the slots that were written
        """
        horse = await self.horse_repo.get(horse_id)
        if horse is None:
            raise LookupError(f"Horse {horse_id} not found")

        stored = {slot: getattr(horse, slot) for slot in PEDIGREE_SLOTS}
        updates = merge_slots(stored, {k: v for k, v in fresh.items() if k in stored})
        if updates:
            await self.horse_repo.update_pedigree(horse_id, updates)
        return sorted(updates)

    async def overwrite_summary(self, horse_id: int, summary: HorseSummary) -> None:
        """Replace the summary snapshot with the latest read."""
        await self.horse_repo.update_summary(horse_id, asdict(summary))
