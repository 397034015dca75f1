"""
Crawl manager - runs one catalog crawl end to end.

Stages run strictly in sequence on a single browser:

1. Load the listing page and wait for the first product card
2. Expand the listing until "load more" is exhausted
3. Extract product summaries
4. Enrich summaries from their detail pages, batch by batch
5. Drop duplicate products
"""

from datetime import datetime, timezone
from typing import Callable, List, Optional
import logging

from .base import Colors, CrawlResult, EnrichedItem, ItemSummary, ListingUnavailableError
from .config import CrawlSettings, SiteConfig, get_site_config
from .crawlers.base import PageAccessor, PageFactory
from .crawlers.browser import BrowserCrawler
from .dedup import dedup
from .enricher import DetailEnricher
from .listing import ListingExtractor
from .pagination import PaginationExpander
from .progress import ProgressReporter

logger = logging.getLogger(__name__)

# Returns an async context manager that yields a PageFactory
BrowserFactory = Callable[[CrawlSettings], object]


def default_browser_factory(settings: CrawlSettings) -> BrowserCrawler:
    return BrowserCrawler(headless=settings.headless)


class CrawlManager:
    """
    Orchestrates the crawl stages for a single listing URL.

    Usage:
        manager = CrawlManager(settings, reporter=ProgressReporter())
        items = await manager.crawl('https://www.takealot.com/all?qsearch=kettle')

        # Stats for the last run
        manager.result.to_dict()
    """

    def __init__(
        self,
        settings: Optional[CrawlSettings] = None,
        reporter: Optional[ProgressReporter] = None,
        browser_factory: Optional[BrowserFactory] = None,
        site: Optional[SiteConfig] = None
    ):
        """
        Initialize the crawl manager.

        Args:
            settings: Crawl tuning constants
            reporter: Progress reporter for this crawl (one is created if omitted)
            browser_factory: Builds the browser; defaults to a Playwright BrowserCrawler
            site: Selector profile; picked from the URL when omitted
        """
        self.settings = settings or CrawlSettings()
        self.reporter = reporter or ProgressReporter()
        self.browser_factory = browser_factory or default_browser_factory
        self.site = site
        self.result: Optional[CrawlResult] = None

    async def _load_listing(self, page: PageAccessor, url: str, site: SiteConfig):
        """
        Open the listing page and wait for the first product card.

        Raises:
            ListingUnavailableError: If navigation fails or no card appears
        """
        try:
            await page.goto(url, wait_until='networkidle', timeout_ms=int(self.settings.listing_timeout * 1000))
            await page.wait_for_selector(
                site.listing.item,
                timeout_ms=int(self.settings.listing_ready_timeout * 1000)
            )
        except Exception as e:
            raise ListingUnavailableError(f"Listing page did not load: {e}") from e

    async def _read_listing(self, browser: PageFactory, url: str, site: SiteConfig) -> List[ItemSummary]:
        """Load, expand and extract the listing page, which is closed afterwards."""
        page = await browser.new_page()
        try:
            await self._load_listing(page, url, site)
            self.reporter.report(self.settings.progress_listing_loaded)

            logger.info("Starting to load all products...")
            await PaginationExpander(site.listing, self.settings).expand(page)
            self.reporter.report(self.settings.progress_listing_expanded)

            logger.info("Extracting product data...")
            try:
                summaries = await ListingExtractor(site.listing).extract(page)
            except Exception as e:
                raise ListingUnavailableError(f"Listing page could not be read: {e}") from e
        finally:
            try:
                await page.close()
            except Exception as e:
                logger.warning(f"Error closing listing page: {e}")

        self.reporter.report(self.settings.progress_enrich_start)
        return summaries

    async def crawl(self, url: str) -> Optional[List[EnrichedItem]]:
        """
        Crawl a listing URL into unique enriched items.

        Args:
            url: Listing page URL

        Returns:
            Unique items in listing order, an empty list if the listing had
            no products, or None if the listing page could not be loaded or
            read. Progress ends at 100 on every exit path.

        Raises:
            Exception: Unexpected faults (e.g. the browser failing to start)
        """
        site = self.site or get_site_config(url)
        site_logger = logging.getLogger(f"crawler.{site.short_name}")
        self.result = CrawlResult(url=url, site=site.short_name, started_at=datetime.now(timezone.utc))
        self.reporter.report(0)

        site_logger.info(f"Starting crawl of {Colors.bold(url)}")

        try:
            async with self.browser_factory(self.settings) as browser:
                self.reporter.report(self.settings.progress_browser_ready)

                summaries = await self._read_listing(browser, url, site)
                self.result.listed = len(summaries)
                site_logger.info(f"Found {len(summaries)} products, getting seller information...")

                enricher = DetailEnricher(browser, site.detail, self.settings, self.reporter)
                enriched = await enricher.enrich(summaries)
                self.result.enriched = len(enriched)
                self.result.degraded = enricher.failed

        except ListingUnavailableError as e:
            return self._abort(site_logger, e)
        except Exception as e:
            self.result.error_details.append({'error': str(e)})
            self.result.completed_at = datetime.now(timezone.utc)
            site_logger.error(f"Error during scraping: {e}")
            self.reporter.report(100)
            raise

        items = dedup(enriched)
        self.result.unique = len(items)
        self.result.completed_at = datetime.now(timezone.utc)
        self.reporter.report(100)

        duration = self.result.duration_seconds or 0
        site_logger.info(
            f"✅ Crawl complete in {duration:.1f}s: {Colors.green(f'{self.result.unique} unique')}, "
            f"{self.result.listed} listed, {Colors.red(f'{self.result.degraded} degraded')}"
        )
        return items

    def _abort(self, site_logger: logging.Logger, error: Exception) -> None:
        self.result.aborted = True
        self.result.error_details.append({'error': str(error)})
        self.result.completed_at = datetime.now(timezone.utc)
        site_logger.error(f"Crawl aborted: {error}")
        self.reporter.report(100)
        return None
