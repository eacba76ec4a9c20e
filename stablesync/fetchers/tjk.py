"""TJK (tjk.org) page fetcher driven by a headless browser."""

import logging

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from stablesync.exceptions import BotBlocked, NetworkFailure
from stablesync.fetchers.base import DataFetcher, FetchTarget, PageKind, RenderedDocument

logger = logging.getLogger(__name__)

BLOCKED_STATUS_CODES = frozenset({403, 429, 503})

# Text found on the source's anti-automation interstitials
BLOCK_PAGE_MARKERS = (
    "Request unsuccessful. Incapsula incident",
    "Access Denied",
    "captcha",
    "Bot Protection",
)


def is_bot_blocked(status: int | None, html: str) -> bool:
    """Return True if a response looks like an anti-automation block."""
    if status in BLOCKED_STATUS_CODES:
        return True
    lowered = html.lower()
    return any(marker.lower() in lowered for marker in BLOCK_PAGE_MARKERS)


class TJKFetcher(DataFetcher):
    """
    Fetcher for tjk.org horse pages.

    The source blocks plain HTTP clients, so pages are rendered in Chromium.
    One browser and one browser context live for the whole run; every fetch
    opens and closes its own page. Navigation goes straight to the data
    endpoints instead of driving the search UI.
    """

    PAGE_PATHS = {
        PageKind.RACES: "/TR/YarisSever/Query/ConnectedPage/AtKosuBilgileri?1=1&QueryParameter_AtId={ref}",
        PageKind.GALLOPS: "/TR/YarisSever/Query/Page/IdmanIstatistikleri?QueryParameter_AtId={ref}",
        PageKind.PEDIGREE: "/TR/YarisSever/Query/Pedigri/Pedigri?Atkodu={ref}",
    }

    READY_SELECTORS = {
        PageKind.RACES: "table",
        PageKind.GALLOPS: "table",
        PageKind.PEDIGREE: "#tblPedigri",
    }

    def __init__(self, settings=None):
        super().__init__(settings)
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    def url_for(self, target: FetchTarget) -> str:
        """Build the data endpoint URL for a target."""
        path = self.PAGE_PATHS[target.page_kind].format(ref=target.external_ref)
        return f"{self.settings.tjk_base_url.rstrip('/')}{path}"

    def _launch_options(self) -> dict:
        options: dict = {
            "headless": self.settings.browser_headless,
            "args": ["--no-sandbox", "--disable-setuid-sandbox"],
        }
        if self.settings.browser_proxy_server:
            proxy = {"server": self.settings.browser_proxy_server}
            if self.settings.browser_proxy_username:
                proxy["username"] = self.settings.browser_proxy_username
            if self.settings.browser_proxy_password:
                proxy["password"] = self.settings.browser_proxy_password.get_secret_value()
            options["proxy"] = proxy
        return options

    async def start(self) -> None:
        """Start Playwright, then launch or connect to a browser."""
        self._playwright = await async_playwright().start()
        try:
            if self.settings.browser_ws_endpoint:
                logger.info("Connecting to remote browser")
                self._browser = await self._playwright.chromium.connect_over_cdp(
                    self.settings.browser_ws_endpoint
                )
            else:
                self._browser = await self._playwright.chromium.launch(**self._launch_options())
            self._context = await self._browser.new_context(
                user_agent=self.settings.user_agent,
                locale=self.settings.browser_locale,
            )
        except PlaywrightError as e:
            await self.close()
            raise NetworkFailure(f"Could not start browser: {e}") from e

    async def close(self) -> None:
        """Close context, browser and Playwright, in that order."""
        try:
            if self._context is not None:
                await self._context.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser context: {e}")
        finally:
            self._context = None

        try:
            if self._browser is not None:
                await self._browser.close()
        except PlaywrightError as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self._browser = None

        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def fetch(self, target: FetchTarget) -> RenderedDocument:
        """
        Render one page and return its HTML.

        A navigation timeout or a missing ready selector does not raise: the
        DOM rendered so far is returned with ``partial=True``.

        Args:
            target: horse external reference and page kind

        Returns:
            RenderedDocument
        """
        if self._context is None:
            raise RuntimeError("TJKFetcher used outside of 'async with'")

        url = self.url_for(target)
        try:
            page = await self._context.new_page()
        except PlaywrightError as e:
            raise NetworkFailure(f"Could not open page for {url}: {e}", url=url) from e

        partial = False
        status = None

        try:
            logger.debug(f"Fetching {target.page_kind.value} for {target.external_ref}: {url}")
            try:
                response = await page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=self.settings.fetch_timeout_ms,
                )
                status = response.status if response else None
            except PlaywrightTimeoutError:
                logger.warning(f"Navigation timeout for {url}, keeping partial DOM")
                partial = True
            except PlaywrightError as e:
                raise NetworkFailure(f"Navigation failed for {url}: {e}", url=url) from e

            if not partial:
                try:
                    await page.wait_for_selector(
                        self.READY_SELECTORS[target.page_kind],
                        timeout=self.settings.selector_timeout_ms,
                    )
                except PlaywrightTimeoutError:
                    logger.info(f"Selector not found on {url}, keeping partial DOM")
                    partial = True
                except PlaywrightError as e:
                    raise NetworkFailure(f"Page failed while waiting for data on {url}: {e}", url=url) from e

            try:
                html = await page.content()
            except PlaywrightError as e:
                raise NetworkFailure(f"Could not read page content for {url}: {e}", url=url) from e

            if is_bot_blocked(status, html):
                logger.warning(f"BOT BLOCKED by source (status={status}) for {url}")
                raise BotBlocked(f"Blocked by source (status={status})", url=url)

            return RenderedDocument(target=target, url=url, html=html, partial=partial)

        finally:
            try:
                await page.close()
            except PlaywrightError as e:
                logger.debug(f"Error closing page {url}: {e}")
