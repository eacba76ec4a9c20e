"""Tests for reconciliation service."""

from datetime import date
from unittest.mock import AsyncMock

import pytest

from stablesync.fetchers.base import HorseSummary
from stablesync.models import RegistrationType
from stablesync.repositories import (
    GallopRepository,
    HorseRepository,
    RaceHistoryRepository,
    RegistrationRepository,
)
from stablesync.services.matching import RecordType
from stablesync.services.reconciliation_service import ReconciliationService

from tests.fixtures.factories import (
    create_registration,
    gallop_item,
    race_item,
    registration_item,
)


class TestAppendOnly:
    """Race history and gallops are only ever inserted."""

    @pytest.mark.asyncio
    async def test_second_identical_pass_inserts_nothing(self, db_session, test_horse):
        """Reconciling the same snapshot twice inserts N rows, then 0."""
        service = ReconciliationService(db_session)
        fresh = [
            race_item(race_date=date(2024, 5, 12)),
            race_item(race_date=date(2024, 4, 20), race_name="MAIDEN", city="Bursa"),
        ]

        first = await service.reconcile_races(test_horse.id, fresh)
        second = await service.reconcile_races(test_horse.id, fresh)

        assert first.counts().inserted == 2
        assert second.counts().inserted == 0
        assert len(await RaceHistoryRepository(db_session).get_by_horse(test_horse.id)) == 2

    @pytest.mark.asyncio
    async def test_duplicate_rows_in_snapshot_insert_once(self, db_session, test_horse):
        service = ReconciliationService(db_session)

        delta = await service.reconcile_races(test_horse.id, [race_item(), race_item(race_name=" şartlı 3 ")])

        assert delta.counts().inserted == 1

    @pytest.mark.asyncio
    async def test_stored_race_is_never_modified(self, db_session, test_horse):
        """A later read with a different position does not touch the stored row."""
        service = ReconciliationService(db_session)
        await service.reconcile_races(test_horse.id, [race_item(position=3)])

        delta = await service.reconcile_races(test_horse.id, [race_item(position=1)])

        stored = await RaceHistoryRepository(db_session).get_by_horse(test_horse.id)
        assert delta.counts().updated == 0
        assert stored[0].position == 3

    @pytest.mark.asyncio
    async def test_missing_race_is_not_deleted(self, db_session, test_horse):
        service = ReconciliationService(db_session)
        await service.reconcile_races(test_horse.id, [race_item()])

        delta = await service.reconcile_races(test_horse.id, [])

        assert delta.counts().deleted == 0
        assert len(await RaceHistoryRepository(db_session).get_by_horse(test_horse.id)) == 1

    @pytest.mark.asyncio
    async def test_gallops_are_append_only(self, db_session, test_horse):
        service = ReconciliationService(db_session)

        first = await service.reconcile(RecordType.GALLOP, test_horse.id, [gallop_item()])
        second = await service.reconcile(
            RecordType.GALLOP,
            test_horse.id,
            [gallop_item(), gallop_item(gallop_date=date(2024, 5, 8))],
        )

        stored = await GallopRepository(db_session).get_by_horse(test_horse.id)
        assert first.counts().inserted == 1
        assert second.counts().inserted == 1
        assert [g.gallop_date for g in stored] == [date(2024, 5, 1), date(2024, 5, 8)]
        assert stored[0].distances == {"800": "0.52.10", "600": "0.38.50"}

    @pytest.mark.asyncio
    async def test_row_stored_by_concurrent_run_is_not_reported(self, db_session, test_horse):
        """A key written between the read and the insert is neither counted nor returned."""
        service = ReconciliationService(db_session)
        await service.reconcile_races(test_horse.id, [race_item()])
        # Reads as if the other run had not committed yet.
        service.race_repo.find_many = AsyncMock(return_value=[])

        delta = await service.reconcile_races(test_horse.id, [race_item()])

        assert delta.inserted == []
        assert delta.counts().inserted == 0
        assert len(await RaceHistoryRepository(db_session).get_by_horse(test_horse.id)) == 1


class TestReconcileRegistrations:
    """Registrations are fully synchronized against each snapshot."""

    @pytest.mark.asyncio
    async def test_new_registration_is_inserted(self, db_session, test_horse):
        service = ReconciliationService(db_session)

        delta = await service.reconcile_registrations(test_horse.id, [registration_item()])

        stored = await RegistrationRepository(db_session).get_by_horse(test_horse.id)
        assert delta.counts().inserted == 1
        assert stored[0].type == RegistrationType.KAYIT.value

    @pytest.mark.asyncio
    async def test_kayit_to_deklare_updates_in_place(self, db_session, test_horse):
        """Exactly one update, same row id, jockey filled in."""
        stored = create_registration(test_horse.id)
        db_session.add(stored)
        await db_session.flush()
        original_id = stored.id

        service = ReconciliationService(db_session)
        delta = await service.reconcile_registrations(
            test_horse.id,
            [registration_item(type=RegistrationType.DEKLARE, jockey_name="AHMET ÇELİK", jockey_id="501")],
        )

        rows = await RegistrationRepository(db_session).get_by_horse(test_horse.id)
        assert delta.counts().model_dump() == {"inserted": 0, "updated": 1, "deleted": 0}
        assert delta.updated == [original_id]
        assert len(rows) == 1
        assert rows[0].id == original_id
        assert rows[0].type == RegistrationType.DEKLARE.value
        assert rows[0].jockey_name == "AHMET ÇELİK"
        assert rows[0].jockey_id == "501"

    @pytest.mark.asyncio
    async def test_deklare_never_goes_back_to_kayit(self, db_session, test_horse):
        stored = create_registration(
            test_horse.id,
            registration_item(type=RegistrationType.DEKLARE, jockey_name="AHMET ÇELİK"),
        )
        db_session.add(stored)
        await db_session.flush()

        service = ReconciliationService(db_session)
        delta = await service.reconcile_registrations(test_horse.id, [registration_item()])

        rows = await RegistrationRepository(db_session).get_by_horse(test_horse.id)
        assert delta.counts().updated == 0
        assert rows[0].type == RegistrationType.DEKLARE.value
        assert rows[0].jockey_name == "AHMET ÇELİK"

    @pytest.mark.asyncio
    async def test_disappeared_registration_is_deleted(self, db_session, test_horse):
        kept = create_registration(test_horse.id, registration_item(city="Ankara"))
        gone = create_registration(test_horse.id, registration_item(city="İzmir"))
        db_session.add_all([kept, gone])
        await db_session.flush()
        gone_id = gone.id

        service = ReconciliationService(db_session)
        delta = await service.reconcile_registrations(test_horse.id, [registration_item(city="Ankara")])

        rows = await RegistrationRepository(db_session).get_by_horse(test_horse.id)
        assert delta.deleted == [gone_id]
        assert [r.city for r in rows] == ["Ankara"]

    @pytest.mark.asyncio
    async def test_empty_snapshot_clears_registrations(self, db_session, test_horse):
        db_session.add(create_registration(test_horse.id))
        await db_session.flush()

        service = ReconciliationService(db_session)
        delta = await service.reconcile(RecordType.REGISTRATION, test_horse.id, [])

        assert delta.counts().deleted == 1
        assert await RegistrationRepository(db_session).get_by_horse(test_horse.id) == []

    @pytest.mark.asyncio
    async def test_unchanged_snapshot_is_a_no_op(self, db_session, test_horse):
        service = ReconciliationService(db_session)
        await service.reconcile_registrations(test_horse.id, [registration_item()])

        delta = await service.reconcile_registrations(test_horse.id, [registration_item()])

        assert delta.counts().model_dump() == {"inserted": 0, "updated": 0, "deleted": 0}

    @pytest.mark.asyncio
    async def test_concurrent_registration_is_not_reported(self, db_session, test_horse):
        service = ReconciliationService(db_session)
        await service.reconcile_registrations(test_horse.id, [registration_item()])
        service.registration_repo.get_by_horse = AsyncMock(return_value=[])

        delta = await service.reconcile_registrations(test_horse.id, [registration_item()])

        assert delta.counts().inserted == 0
        assert len(await RegistrationRepository(db_session).get_by_horse(test_horse.id)) == 1


class TestMergePedigree:
    @pytest.mark.asyncio
    async def test_fills_empty_and_keeps_longer(self, db_session, test_horse):
        await HorseRepository(db_session).update_pedigree(
            test_horse.id, {"sire_name": "DANZIG", "dam_name": "RAZ"}
        )
        service = ReconciliationService(db_session)

        written = await service.merge_pedigree(
            test_horse.id,
            {"sire_name": "DANZ", "dam_name": "RAZYANA", "sire_sire": "NORTHERN DANCER"},
        )

        horse = await HorseRepository(db_session).get(test_horse.id)
        assert written == ["dam_name", "sire_sire"]
        assert horse.sire_name == "DANZIG"
        assert horse.dam_name == "RAZYANA"
        assert horse.sire_sire == "NORTHERN DANCER"

    @pytest.mark.asyncio
    async def test_unknown_horse_raises(self, db_session):
        service = ReconciliationService(db_session)

        with pytest.raises(LookupError):
            await service.merge_pedigree(99999, {"sire_name": "DANZIG"})


class TestOverwriteSummary:
    @pytest.mark.asyncio
    async def test_summary_is_replaced(self, db_session, test_horse):
        service = ReconciliationService(db_session)
        await service.overwrite_summary(test_horse.id, HorseSummary(handicap_points=55, total_races=10))

        await service.overwrite_summary(test_horse.id, HorseSummary(handicap_points=62))

        horse = await HorseRepository(db_session).get(test_horse.id)
        assert horse.handicap_points == 62
        assert horse.total_races is None
        assert horse.data_fetched_at is not None
