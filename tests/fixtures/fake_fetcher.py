"""In-memory fetcher returning canned pages."""

from stablesync.config import Settings
from stablesync.exceptions import NetworkFailure
from stablesync.fetchers.base import DataFetcher, FetchTarget, PageKind, RenderedDocument

from tests.fixtures.html import gallops_page_html, gallop_row, pedigree_page_html, race_page_html, race_row


class FakeFetcher(DataFetcher):
    """
    Serves ``pages[(external_ref, page_kind)]``.

    A value that is an exception instance is raised instead; a missing
    page raises NetworkFailure. Keys listed in ``partial`` come back
    flagged as read before loading finished.
    """

    def __init__(self, pages: dict[tuple[str, PageKind], str | Exception] | None = None):
        super().__init__(Settings(scraping_delay=0))
        self.pages = pages or {}
        self.calls: list[FetchTarget] = []
        self.partial: set[tuple[str, PageKind]] = set()
        self.started = 0
        self.closed = 0

    async def start(self) -> None:
        self.started += 1

    async def close(self) -> None:
        self.closed += 1

    async def fetch(self, target: FetchTarget) -> RenderedDocument:
        self.calls.append(target)
        page = self.pages.get((target.external_ref, target.page_kind))
        if page is None:
            raise NetworkFailure(f"No page for {target.external_ref}/{target.page_kind.value}")
        if isinstance(page, Exception):
            raise page
        return RenderedDocument(
            target=target,
            url=f"fake://{target.external_ref}/{target.page_kind.value}",
            html=page,
            partial=(target.external_ref, target.page_kind) in self.partial,
        )

    def add_horse(
        self,
        external_ref: str,
        races: str | Exception | None = None,
        gallops: str | Exception | None = None,
        pedigree: str | Exception | None = None,
    ) -> None:
        """Register the three pages of one horse, with sensible defaults."""
        self.pages[(external_ref, PageKind.RACES)] = (
            races if races is not None else race_page_html([race_row()])
        )
        self.pages[(external_ref, PageKind.GALLOPS)] = (
            gallops if gallops is not None else gallops_page_html([gallop_row()])
        )
        self.pages[(external_ref, PageKind.PEDIGREE)] = (
            pedigree if pedigree is not None else pedigree_page_html({"sire_sire": "GRAND SIRE"})
        )
