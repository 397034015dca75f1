"""
Detail page enricher.

Visits each product's detail page to read seller, brand, description,
additional-seller count and list price. Products are processed in small
fixed-size batches: every product in a batch gets its own page and runs
concurrently, and the next batch starts only once the whole batch has
settled. This bounds the number of open tabs while still overlapping
network latency.

Failures never abort a batch. A field that cannot be read gets its
"not found" placeholder; a page that cannot be loaded at all gets the
"error" placeholders for every field.
"""

import asyncio
import math
from typing import Callable, Dict, List, Optional
from bs4 import BeautifulSoup
import logging

from .base import ItemSummary, ItemDetail, EnrichedItem, NOT_FOUND, merge_item
from .config import CrawlSettings, DetailSelectors
from .crawlers.base import PageAccessor, PageFactory
from .progress import ProgressReporter, interpolate_progress
from .utils import select_text, clean_description, extract_offer_count

logger = logging.getLogger(__name__)


class DetailEnricher:
    """
    Enriches listing summaries with detail page fields.

    Usage:
        enricher = DetailEnricher(browser, site.detail, settings, reporter)
        items = await enricher.enrich(summaries)
    """

    def __init__(
        self,
        browser: PageFactory,
        selectors: DetailSelectors,
        settings: Optional[CrawlSettings] = None,
        reporter: Optional[ProgressReporter] = None
    ):
        """
        Initialize the enricher.

        Args:
            browser: Factory for the short-lived detail pages
            selectors: Detail page selectors of the target site
            settings: Timeouts, batch size and progress bounds
            reporter: Receives a progress estimate after every batch
        """
        self.browser = browser
        self.selectors = selectors
        self.settings = settings or CrawlSettings()
        self.reporter = reporter
        self.failed = 0

    def _race_waits(self) -> Dict[str, float]:
        """Selectors that signal a usable detail page, with their timeouts."""
        return {
            self.selectors.seller: self.settings.seller_wait,
            self.selectors.brand: self.settings.brand_wait,
            self.selectors.description_ready: self.settings.description_wait,
        }

    async def _wait_for_any(self, page: PageAccessor) -> Optional[str]:
        """
        Wait until the first of the race selectors appears.

        Returns:
            The selector that appeared first, or None if every wait timed
            out (extraction then proceeds with whatever is present)
        """
        tasks = {
            asyncio.ensure_future(page.wait_for_selector(selector, int(timeout * 1000))): selector
            for selector, timeout in self._race_waits().items()
        }
        pending = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                appeared = [task for task in done if task.exception() is None]
                if appeared:
                    return tasks[appeared[0]]
            logger.debug(f"No detail selector appeared on {page.url}, extracting what is present")
            return None
        finally:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

    def _read_field(self, name: str, reader: Callable[[], Optional[str]]) -> str:
        try:
            value = reader()
        except Exception as e:
            logger.debug(f"Could not read {name}: {e}")
            value = None
        return value or NOT_FOUND[name]

    def _description(self, soup: BeautifulSoup) -> Optional[str]:
        element = soup.select_one(self.selectors.description)
        if element is None:
            return None
        return clean_description(element.get_text(' '))

    def parse(self, html: str) -> ItemDetail:
        """
        Read detail fields from rendered product page HTML.

        Args:
            html: Detail page HTML

        Returns:
            ItemDetail with placeholders for anything missing
        """
        soup = BeautifulSoup(html, 'html.parser')
        return ItemDetail(
            seller=self._read_field('seller', lambda: select_text(soup, self.selectors.seller)),
            brand=self._read_field('brand', lambda: select_text(soup, self.selectors.brand)),
            description=self._read_field('description', lambda: self._description(soup)),
            additional_seller_count=self._read_field(
                'additional_seller_count',
                lambda: extract_offer_count(select_text(soup, self.selectors.offers)),
            ),
            list_price=self._read_field('list_price', lambda: select_text(soup, self.selectors.list_price)),
        )

    async def fetch_detail(self, page: PageAccessor, url: str) -> ItemDetail:
        """
        Load a product page and read its detail fields.

        Never raises: navigation or evaluation faults produce an
        ItemDetail filled with the error placeholders.
        """
        try:
            await page.goto(url, wait_until='networkidle', timeout_ms=int(self.settings.detail_timeout * 1000))
            await self._wait_for_any(page)
            html = await page.content()
            return self.parse(html)
        except Exception as e:
            logger.error(f"Error fetching product info for {url}: {e}")
            return ItemDetail.error()

    async def _release(self, page: PageAccessor):
        try:
            await page.close()
        except Exception as e:
            logger.warning(f"Error closing page: {e}")

    async def _enrich_one(self, summary: ItemSummary) -> EnrichedItem:
        try:
            page = await self.browser.new_page()
        except Exception as e:
            logger.error(f"Could not open page for {summary.detail_url}: {e}")
            detail = ItemDetail.error()
        else:
            try:
                detail = await self.fetch_detail(page, summary.detail_url)
            finally:
                await self._release(page)

        if detail.failed:
            self.failed += 1
        return merge_item(summary, detail)

    async def process_batch(self, batch: List[ItemSummary]) -> List[EnrichedItem]:
        """
        Enrich one batch concurrently.

        Returns once every item has settled, in the same order as batch.
        """
        return list(await asyncio.gather(*(self._enrich_one(summary) for summary in batch)))

    async def enrich(self, summaries: List[ItemSummary], batch_size: Optional[int] = None) -> List[EnrichedItem]:
        """
        Enrich all summaries, one batch at a time.

        Args:
            summaries: Listing summaries in page order
            batch_size: Items per batch, defaults to settings.batch_size

        Returns:
            Enriched items in the same order as summaries
        """
        batch_size = batch_size if batch_size is not None else self.settings.batch_size
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        total = len(summaries)
        total_batches = math.ceil(total / batch_size)
        enriched: List[EnrichedItem] = []
        self.failed = 0

        for batch_number, start in enumerate(range(0, total, batch_size), 1):
            batch = summaries[start:start + batch_size]
            logger.info(f"Processing batch {batch_number}/{total_batches}")
            enriched.extend(await self.process_batch(batch))

            if self.reporter is not None:
                self.reporter.report(interpolate_progress(
                    start + len(batch),
                    total,
                    self.settings.progress_enrich_start,
                    self.settings.progress_enrich_end,
                ))

        return enriched
