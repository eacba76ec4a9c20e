"""Run orchestration: per-stablemate status machine and per-horse isolation."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from stablesync.config import Settings, get_settings
from stablesync.exceptions import (
    BotBlocked,
    InvalidStatusTransition,
    NetworkFailure,
    SchemaDrift,
    StatusUpdateUnsupported,
    StorageWriteFailure,
)
from stablesync.fetchers import (
    DataFetcher,
    FetchTarget,
    GallopItem,
    PageKind,
    RacePage,
    RenderedDocument,
    TJKFetcher,
)
from stablesync.models import DataFetchStatus, Horse, Stablemate
from stablesync.parsers import parse_gallops, parse_pedigree, parse_race_page
from stablesync.repositories import HorseRepository, StablemateRepository
from stablesync.schemas import (
    HorseSyncError,
    HorseSyncResult,
    HorseSyncStatusEnum,
    ProgressEvent,
    RunReport,
)
from stablesync.services.notifications import Notifier, build_notifier
from stablesync.services.reconciliation_service import ReconciliationService

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent | RunReport], Awaitable[None]]


@dataclass(frozen=True)
class HorseRef:
    """Detached view of a horse, safe to use across sessions."""

    id: int
    name: str
    external_ref: str

    @classmethod
    def from_model(cls, horse: Horse) -> "HorseRef":
        return cls(id=horse.id, name=horse.name, external_ref=horse.external_ref)


@dataclass
class FetchedPages:
    """Parsed pages of one horse. None means the page kind is skipped."""

    race_page: RacePage | None = None
    gallops: list[GallopItem] | None = None
    pedigree: dict[str, str] | None = None
    race_page_error: str | None = None
    warnings: list[str] = field(default_factory=list)


class SyncOrchestrator:
    """
    Drives fetch -> parse -> reconcile for horses of a stablemate.

    One fetcher (one browser) is opened per run and horses are processed
    sequentially with ``delay`` seconds between them. Network fetches happen
    outside any storage transaction; each horse is then reconciled in its
    own transaction. An error on one horse is recorded on that horse and the
    run continues.

    The streamed, background and nightly triggers all call this class and
    differ only in how they consume ``progress``.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        fetcher_factory: Callable[[], DataFetcher] | None = None,
        notifier: Notifier | None = None,
        settings: Settings | None = None,
        delay: float | None = None,
    ):
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.fetcher_factory = fetcher_factory or (lambda: TJKFetcher(self.settings))
        self.notifier = notifier or build_notifier(self.settings)
        self.delay = self.settings.scraping_delay if delay is None else delay

    # Status machine

    async def _set_status(self, stablemate_id: int, status: DataFetchStatus) -> None:
        """Write the stablemate status. Failures are logged, never raised."""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await StablemateRepository(session).set_fetch_status(stablemate_id, status)
        except (SQLAlchemyError, InvalidStatusTransition, ValueError) as e:
            error = StatusUpdateUnsupported(f"Could not set stablemate {stablemate_id} to {status.value}: {e}")
            logger.warning(str(error))

    async def _load_horses(
        self,
        stablemate_id: int,
        horse_ids: list[int] | None,
        include_inactive: bool,
    ) -> list[HorseRef]:
        async with self.session_factory() as session:
            stablemate = await session.get(Stablemate, stablemate_id)
            if stablemate is None:
                raise LookupError(f"Stablemate {stablemate_id} not found")
            repo = HorseRepository(session)
            if horse_ids:
                horses = await repo.get_by_ids(stablemate_id, horse_ids)
            else:
                horses = await repo.get_syncable(stablemate_id, include_inactive=include_inactive)
            return [HorseRef.from_model(h) for h in horses]

    # Per horse

    async def _fetch_pages(self, fetcher: DataFetcher, horse: HorseRef) -> FetchedPages:
        """
        Fetch and parse every page kind of one horse.

        The race page is primary: a network failure there fails the horse.
        Gallop and pedigree failures only skip that record type.
        """
        pages = FetchedPages()

        document = await fetcher.fetch(FetchTarget(horse.external_ref, PageKind.RACES))
        self._note_partial(pages, horse, document)
        try:
            pages.race_page = parse_race_page(document.html)
        except SchemaDrift as e:
            pages.race_page_error = f"SchemaDrift: {e}"
            pages.warnings.append(f"{PageKind.RACES.value}: {e}")
            logger.warning(f"Race page layout not recognised for {horse.name}: {e}")

        try:
            document = await fetcher.fetch(FetchTarget(horse.external_ref, PageKind.GALLOPS))
            self._note_partial(pages, horse, document)
            pages.gallops = parse_gallops(document.html, lookback_days=self.settings.gallop_lookback_days)
        except (NetworkFailure, SchemaDrift) as e:
            pages.warnings.append(f"{PageKind.GALLOPS.value}: {e}")
            logger.warning(f"Gallops skipped for {horse.name}: {e}")

        try:
            document = await fetcher.fetch(FetchTarget(horse.external_ref, PageKind.PEDIGREE))
            self._note_partial(pages, horse, document)
            pages.pedigree = parse_pedigree(document.html).slots
        except (NetworkFailure, SchemaDrift) as e:
            pages.warnings.append(f"{PageKind.PEDIGREE.value}: {e}")
            logger.warning(f"Pedigree skipped for {horse.name}: {e}")

        return pages

    @staticmethod
    def _note_partial(pages: FetchedPages, horse: HorseRef, document: RenderedDocument) -> None:
        """Record a page that was read before its data finished loading."""
        if document.partial:
            kind = document.target.page_kind.value
            pages.warnings.append(f"{kind}: page was read before it finished loading")
            logger.warning(f"Partial {kind} page for {horse.name} ({document.url})")

    async def _reconcile(self, horse: HorseRef, pages: FetchedPages) -> tuple[HorseSyncResult, list[dict]]:
        """Write one horse in a single transaction."""
        result = HorseSyncResult(horse_id=horse.id, horse_name=horse.name, warnings=pages.warnings)
        new_races: list[dict] = []

        try:
            async with self.session_factory() as session:
                async with session.begin():
                    service = ReconciliationService(session)
                    fresh_pedigree: dict[str, str] = {}

                    if pages.race_page is not None:
                        await service.overwrite_summary(horse.id, pages.race_page.summary)
                        result.summary_updated = True

                        races = await service.reconcile_races(horse.id, pages.race_page.races)
                        result.races = races.counts()
                        new_races = races.inserted

                        registrations = await service.reconcile_registrations(
                            horse.id, pages.race_page.registrations
                        )
                        result.registrations = registrations.counts()
                        fresh_pedigree.update(pages.race_page.pedigree.slots)
                    elif pages.race_page_error:
                        await service.horse_repo.record_fetch_error(horse.id, pages.race_page_error)

                    if pages.gallops is not None:
                        gallops = await service.reconcile_gallops(horse.id, pages.gallops)
                        result.gallops = gallops.counts()

                    if pages.pedigree is not None:
                        fresh_pedigree.update(pages.pedigree)
                    if fresh_pedigree:
                        result.pedigree_updated = await service.merge_pedigree(horse.id, fresh_pedigree)
        except SQLAlchemyError as e:
            raise StorageWriteFailure(f"Storage write failed for horse {horse.id}: {e}") from e

        return result, new_races

    async def _notify_new_races(self, horse: HorseRef, rows: list[dict]) -> None:
        for row in rows:
            payload = {
                "horse_id": horse.id,
                "record_summary": {
                    "horse_name": horse.name,
                    "race_date": row["race_date"].isoformat(),
                    "city": row.get("city"),
                    "race_name": row.get("race_name"),
                    "position": row.get("position"),
                },
            }
            try:
                await self.notifier.notify(payload)
            except Exception as e:
                logger.warning(f"Notifier raised for horse {horse.id}: {e}")

    async def _record_error(self, horse: HorseRef, message: str) -> None:
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    await HorseRepository(session).record_fetch_error(horse.id, message)
        except SQLAlchemyError as e:
            logger.error(f"Could not store fetch error for horse {horse.id}: {e}")

    async def sync_one(self, fetcher: DataFetcher, horse: HorseRef) -> HorseSyncResult:
        """
        Fetch, parse and reconcile one horse.

        Raises:
            NetworkFailure: the race page could not be fetched
            StorageWriteFailure: the reconciliation transaction failed
        """
        pages = await self._fetch_pages(fetcher, horse)
        result, new_races = await self._reconcile(horse, pages)
        await self._notify_new_races(horse, new_races)
        logger.info(
            f"Synced {horse.name}: {result.races.inserted} races, "
            f"{result.gallops.inserted} gallops, registrations "
            f"+{result.registrations.inserted}/~{result.registrations.updated}/-{result.registrations.deleted}"
        )
        return result

    async def _run_horses(
        self,
        fetcher: DataFetcher,
        horses: list[HorseRef],
        report: RunReport,
        progress: ProgressCallback | None,
    ) -> None:
        total = len(horses)
        for index, horse in enumerate(horses, start=1):
            error_message = None
            try:
                report.results.append(await self.sync_one(fetcher, horse))
            except Exception as e:
                if isinstance(e, BotBlocked):
                    logger.warning(f"BOT BLOCKED while syncing {horse.name} ({horse.external_ref}): {e}")
                else:
                    logger.error(f"Error syncing {horse.name} ({horse.id}): {e}", exc_info=True)
                error_message = f"{type(e).__name__}: {e}"
                report.errors.append(HorseSyncError(horse_id=horse.id, horse_name=horse.name, error=error_message))
                await self._record_error(horse, error_message)

            if progress is not None:
                await progress(
                    ProgressEvent(
                        current=index,
                        total=total,
                        horse_id=horse.id,
                        horse_name=horse.name,
                        status=HorseSyncStatusEnum.ERROR if error_message else HorseSyncStatusEnum.SUCCESS,
                        error=error_message,
                    )
                )

            if index < total and self.delay > 0:
                await asyncio.sleep(self.delay)

    # Entry points

    async def sync_stablemate(
        self,
        stablemate_id: int,
        horse_ids: list[int] | None = None,
        include_inactive: bool = True,
        progress: ProgressCallback | None = None,
    ) -> RunReport:
        """
        Sync the horses of one stablemate.

        The status goes IN_PROGRESS, then FAILED if the horse list or the
        browser could not be set up, otherwise COMPLETED however many horses
        errored. A terminal RunReport is always sent to ``progress``.

        Args:
            stablemate_id: stablemate to sync
            horse_ids: restrict to these horses
            include_inactive: also sync retired and dead horses
            progress: awaited with one ProgressEvent per horse, then the report

        Returns:
            RunReport
        """
        logger.info(f"Starting sync for stablemate {stablemate_id}")
        await self._set_status(stablemate_id, DataFetchStatus.IN_PROGRESS)
        report = RunReport(stablemate_id=stablemate_id, status=DataFetchStatus.IN_PROGRESS)

        try:
            horses = await self._load_horses(stablemate_id, horse_ids, include_inactive)
            logger.info(f"Stablemate {stablemate_id}: {len(horses)} horses to sync")
            async with self.fetcher_factory() as fetcher:
                await self._run_horses(fetcher, horses, report, progress)
            report.status = DataFetchStatus.COMPLETED
        except (SQLAlchemyError, LookupError, NetworkFailure) as e:
            logger.error(f"Sync setup failed for stablemate {stablemate_id}: {e}")
            report.status = DataFetchStatus.FAILED
            report.error = str(e)
        except BaseException:
            await self._set_status(stablemate_id, DataFetchStatus.FAILED)
            raise

        await self._set_status(stablemate_id, report.status)
        logger.info(
            f"Stablemate {stablemate_id} finished {report.status.value}: "
            f"{len(report.results)} ok, {len(report.errors)} errors"
        )
        if progress is not None:
            await progress(report)
        return report

    async def sync_horse(self, horse_id: int) -> RunReport:
        """
        Sync a single horse on demand.

        Retired and dead horses are included. The stablemate status is not
        touched.

        Raises:
            LookupError: no such horse
            ValueError: the horse has no external reference
        """
        async with self.session_factory() as session:
            horse = await session.get(Horse, horse_id)
            if horse is None:
                raise LookupError(f"Horse {horse_id} not found")
            if not horse.external_ref:
                raise ValueError(f"Horse {horse_id} has no external reference")
            ref = HorseRef.from_model(horse)

        report = RunReport(status=DataFetchStatus.COMPLETED)
        async with self.fetcher_factory() as fetcher:
            await self._run_horses(fetcher, [ref], report, progress=None)
        return report

    async def run_all(self) -> list[RunReport]:
        """Nightly batch: every stablemate, active horses only."""
        async with self.session_factory() as session:
            stablemate_ids = await StablemateRepository(session).list_ids()

        logger.info(f"Nightly run over {len(stablemate_ids)} stablemates")
        reports = []
        for stablemate_id in stablemate_ids:
            reports.append(await self.sync_stablemate(stablemate_id, include_inactive=False))
        return reports
