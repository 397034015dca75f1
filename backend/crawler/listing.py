"""
Listing extractor.

Reads every product card from an expanded listing page into
ItemSummary records. Works on the serialized DOM, so it never
navigates or mutates the page.
"""

from typing import List, Optional
from bs4 import BeautifulSoup, Tag
import logging

from .base import ItemSummary, NOT_FOUND
from .config import ListingSelectors
from .crawlers.base import PageAccessor
from .utils import select_text, page_origin, resolve_url

logger = logging.getLogger(__name__)


class ListingExtractor:
    """Turns product cards into ItemSummary records."""

    def __init__(self, selectors: ListingSelectors):
        self.selectors = selectors
        self.skipped = 0

    def _parse_card(self, card: Tag, origin: str) -> Optional[ItemSummary]:
        """Parse one product card, or None if it lacks the link or body."""
        link = card.select_one(self.selectors.link)
        content = card.select_one(self.selectors.content)
        if link is None or content is None:
            return None

        image = content.select_one(self.selectors.image)
        image_src = image.get('src') if image is not None else None

        return ItemSummary(
            title=select_text(content, self.selectors.title) or '',
            price=select_text(content, self.selectors.price) or '',
            list_price=select_text(content, self.selectors.list_price) or NOT_FOUND['list_price'],
            image_url=resolve_url(origin, image_src),
            detail_url=resolve_url(origin, link.get('href')),
        )

    def parse(self, html: str, page_url: str) -> List[ItemSummary]:
        """
        Extract summaries from listing page HTML.

        Cards without a title or a resolvable detail URL are dropped.
        A card that fails to parse is logged and skipped.

        Args:
            html: Rendered listing page HTML
            page_url: URL the HTML was loaded from, used to resolve links

        Returns:
            Summaries in page order
        """
        soup = BeautifulSoup(html, 'html.parser')
        origin = page_origin(page_url)
        items: List[ItemSummary] = []
        self.skipped = 0

        for index, card in enumerate(soup.select(self.selectors.item)):
            try:
                summary = self._parse_card(card, origin)
            except Exception as e:
                logger.warning(f"Error processing product card {index}: {e}")
                self.skipped += 1
                continue

            if summary is None or not summary.is_valid:
                self.skipped += 1
                continue
            items.append(summary)

        if self.skipped:
            logger.debug(f"Skipped {self.skipped} product cards without title or link")
        return items

    async def extract(self, page: PageAccessor) -> List[ItemSummary]:
        """Read all product cards currently present on the page."""
        html = await page.content()
        return self.parse(html, page.url)
