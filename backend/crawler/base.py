"""
Core data structures for the catalog crawler.

This module defines the records that flow through a crawl
(summary -> detail -> enriched item), the run statistics object
and the exceptions raised by the crawl stages.
"""

from typing import List, Dict, Optional
from dataclasses import dataclass, field, asdict
from datetime import datetime


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    GREEN = '\033[92m'
    RED = '\033[91m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def bold(text):
        return f"{Colors.BOLD}{text}{Colors.RESET}"


# Placeholder values written when a detail field cannot be read
NOT_FOUND = {
    'seller': 'No seller name found',
    'brand': 'No brand found',
    'description': 'No description found',
    'additional_seller_count': 'No additional sellers',
    'list_price': 'N/A',
}

# Placeholder values written when the whole detail fetch failed
FETCH_ERROR = {
    'seller': 'Error fetching seller',
    'brand': 'Error fetching brand',
    'description': 'Error fetching description',
    'additional_seller_count': 'Error fetching additional sellers',
    'list_price': 'Error fetching list price',
}


class CrawlError(Exception):
    """Base class for crawl failures."""


class ListingUnavailableError(CrawlError):
    """The listing page could not be loaded, so there is nothing to crawl."""


class ExportError(CrawlError):
    """The crawl result could not be written to disk."""


@dataclass
class ItemSummary:
    """A single product card read from the listing page."""
    title: str
    price: str
    detail_url: str
    list_price: str = NOT_FOUND['list_price']
    image_url: str = ''

    @property
    def is_valid(self) -> bool:
        return bool(self.title) and bool(self.detail_url)


@dataclass
class ItemDetail:
    """Supplementary fields read from a product's detail page."""
    seller: str = NOT_FOUND['seller']
    brand: str = NOT_FOUND['brand']
    description: str = NOT_FOUND['description']
    additional_seller_count: str = NOT_FOUND['additional_seller_count']
    list_price: str = NOT_FOUND['list_price']

    @classmethod
    def not_found(cls) -> 'ItemDetail':
        return cls(**NOT_FOUND)

    @classmethod
    def error(cls) -> 'ItemDetail':
        """Detail used when the page could not be fetched at all."""
        return cls(**FETCH_ERROR)

    @property
    def failed(self) -> bool:
        return asdict(self) == FETCH_ERROR

    @property
    def has_list_price(self) -> bool:
        return self.list_price not in (NOT_FOUND['list_price'], FETCH_ERROR['list_price'])


@dataclass
class EnrichedItem:
    """Listing summary merged with its detail page fields."""
    title: str
    price: str
    list_price: str
    image_url: str
    detail_url: str
    seller: str
    brand: str
    description: str
    additional_seller_count: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def merge_item(summary: ItemSummary, detail: ItemDetail) -> EnrichedItem:
    """
    Merge a listing summary with the fields read from its detail page.

    The detail page list price wins over the one shown on the product card,
    unless the detail page had no list price to offer.

    Args:
        summary: Item as read from the listing page
        detail: Fields read from the item's detail page

    Returns:
        EnrichedItem combining both records
    """
    list_price = detail.list_price if detail.has_list_price else summary.list_price
    return EnrichedItem(
        title=summary.title,
        price=summary.price,
        list_price=list_price,
        image_url=summary.image_url,
        detail_url=summary.detail_url,
        seller=detail.seller,
        brand=detail.brand,
        description=detail.description,
        additional_seller_count=detail.additional_seller_count,
    )


@dataclass
class CrawlResult:
    """Statistics for a single crawl run."""
    url: str
    site: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    listed: int = 0
    enriched: int = 0
    degraded: int = 0
    unique: int = 0
    aborted: bool = False
    error_details: List[Dict] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.aborted and self.unique > 0

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict:
        return {
            'url': self.url,
            'site': self.site,
            'started_at': self.started_at.isoformat(),
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
            'duration_seconds': self.duration_seconds,
            'listed': self.listed,
            'enriched': self.enriched,
            'degraded': self.degraded,
            'unique': self.unique,
            'aborted': self.aborted,
            'error_details': self.error_details[:10],  # Limit error details
            'success': self.success,
        }
