"""
Listing pagination expander.

Drives a listing page through repeated "load more" cycles until the
catalog stops growing. The loop is a timed-polling state machine:

    GROWING   -- the last click revealed new product cards
    STALLING  -- the last click(s) revealed nothing new
    EXHAUSTED -- no visible "load more" control, too many stalls, or a
                 runtime fault; the listing is as complete as it gets
"""

import asyncio
from enum import Enum
from typing import Optional
import logging

from .config import CrawlSettings, ListingSelectors
from .crawlers.base import PageAccessor

logger = logging.getLogger(__name__)


COUNT_ITEMS_JS = "(selector) => document.querySelectorAll(selector).length"

SCROLL_TO_BOTTOM_JS = "() => window.scrollTo(0, document.body.scrollHeight)"

# The control must be fully inside the viewport, not merely in the DOM
CONTROL_IN_VIEW_JS = """
(selector) => {
    const button = document.querySelector(selector);
    if (!button) return false;
    const rect = button.getBoundingClientRect();
    return rect.top >= 0 && rect.bottom <= window.innerHeight;
}
"""


class ExpansionState(Enum):
    GROWING = "growing"
    STALLING = "stalling"
    EXHAUSTED = "exhausted"


class PaginationExpander:
    """
    Reveals every product card on an infinite-scroll listing page.

    Usage:
        expander = PaginationExpander(site.listing, settings)
        count = await expander.expand(page)
    """

    def __init__(self, selectors: ListingSelectors, settings: Optional[CrawlSettings] = None):
        self.selectors = selectors
        self.settings = settings or CrawlSettings()
        self.state = ExpansionState.GROWING
        self.item_count = 0
        self.clicks = 0
        self.stall_count = 0

    async def _count_items(self, page: PageAccessor) -> int:
        return int(await page.evaluate(COUNT_ITEMS_JS, self.selectors.item))

    async def _reveal_more(self, page: PageAccessor) -> bool:
        """
        Scroll to the bottom and click "load more" if it is in view.

        Returns:
            False when there is no visible control to click
        """
        await page.evaluate(SCROLL_TO_BOTTOM_JS)
        await asyncio.sleep(self.settings.scroll_settle_seconds)

        visible = await page.evaluate(CONTROL_IN_VIEW_JS, self.selectors.load_more)
        if not visible:
            return False

        await page.click(self.selectors.load_more)
        self.clicks += 1
        logger.debug("Clicked load more button")
        await asyncio.sleep(self.settings.click_settle_seconds)
        return True

    def _observe(self, before: int, after: int) -> None:
        """Advance the state machine with the item counts around one click."""
        self.item_count = after
        if after == before:
            self.stall_count += 1
            self.state = ExpansionState.STALLING
            if self.stall_count >= self.settings.max_stall_attempts:
                logger.info(
                    f"No new products after {self.stall_count} attempts, stopping at {after} items"
                )
                self.state = ExpansionState.EXHAUSTED
        else:
            self.stall_count = 0
            self.state = ExpansionState.GROWING

    async def expand(self, page: PageAccessor) -> int:
        """
        Click "load more" until the listing is exhausted.

        Faults while revealing end the loop instead of propagating; a
        partial listing is still worth extracting.

        Args:
            page: Listing page, already loaded

        Returns:
            Number of product cards present when expansion stopped
        """
        self.state = ExpansionState.GROWING
        self.clicks = 0
        self.stall_count = 0

        try:
            self.item_count = await self._count_items(page)
        except Exception as e:
            logger.warning(f"Could not count products: {e}")
            self.state = ExpansionState.EXHAUSTED
            return self.item_count

        while self.state != ExpansionState.EXHAUSTED:
            logger.info(f"Current product count: {self.item_count}")
            try:
                if not await self._reveal_more(page):
                    logger.info("Load more button not found or not visible")
                    self.state = ExpansionState.EXHAUSTED
                    break
                new_count = await self._count_items(page)
            except Exception as e:
                logger.warning(f"Error while loading more products: {e}")
                self.state = ExpansionState.EXHAUSTED
                break

            self._observe(self.item_count, new_count)

        logger.info(f"Listing exhausted with {self.item_count} products after {self.clicks} clicks")
        return self.item_count
