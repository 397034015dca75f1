"""
Crawl tuning constants and site selector profiles.

Each supported storefront has a SiteConfig that defines:
- CSS selectors for product cards on the listing page
- CSS selectors for the fields read from a product detail page
- The host names it is used for

CrawlSettings holds every delay, timeout and threshold the engine uses,
so none of them are hardcoded in the crawl stages.
"""

from dataclasses import dataclass
from typing import Dict, List
from urllib.parse import urlparse
import logging

logger = logging.getLogger(__name__)


@dataclass
class CrawlSettings:
    """Timing, concurrency and progress constants for one crawl."""
    # Detail pages fetched concurrently per batch
    batch_size: int = 2
    headless: bool = True

    # Listing page
    listing_timeout: float = 30.0          # Initial navigation
    listing_ready_timeout: float = 10.0    # First product card must appear
    scroll_settle_seconds: float = 1.0     # Wait after scrolling to the bottom
    click_settle_seconds: float = 2.0      # Wait after clicking "load more"
    max_stall_attempts: int = 5            # Consecutive clicks without new items

    # Detail pages
    detail_timeout: float = 20.0
    seller_wait: float = 4.0
    brand_wait: float = 2.0
    description_wait: float = 5.0

    # Progress milestones (percent)
    progress_browser_ready: int = 10
    progress_listing_loaded: int = 20
    progress_listing_expanded: int = 50
    progress_enrich_start: int = 70
    progress_enrich_end: int = 95

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")
        if self.max_stall_attempts < 1:
            raise ValueError(f"max_stall_attempts must be at least 1, got {self.max_stall_attempts}")
        if not 0 <= self.progress_enrich_start <= self.progress_enrich_end <= 100:
            raise ValueError("Enrichment progress bounds must satisfy 0 <= start <= end <= 100")


@dataclass
class ListingSelectors:
    """Selectors for product cards on the listing page."""
    item: str                   # One element per product card
    load_more: str              # "Load more" button
    link: str                   # Anchor holding the relative detail URL
    content: str                # Card body holding title/price/image
    title: str
    price: str
    list_price: str
    image: str = 'img'


@dataclass
class DetailSelectors:
    """Selectors for the fields on a product detail page."""
    seller: str
    brand: str
    description: str
    description_ready: str      # Container that signals the description rendered
    offers: str                 # "N offers from ..." block
    list_price: str


@dataclass
class SiteConfig:
    """Selector profile for one storefront."""
    name: str                           # Display name
    short_name: str                     # Logger suffix and identifier
    domains: List[str]                  # Host names this profile applies to
    listing: ListingSelectors
    detail: DetailSelectors
    enabled: bool = True

    def matches_host(self, host: str) -> bool:
        host = host.lower()
        return any(host == d or host.endswith('.' + d) for d in self.domains)


# ============================================================
# SITE CONFIGURATIONS
# ============================================================

SITES: Dict[str, SiteConfig] = {
    'takealot': SiteConfig(
        name='Takealot',
        short_name='takealot',
        domains=['takealot.com'],
        listing=ListingSelectors(
            item='article.product-card-module_product-card_fdqa8',
            load_more='.search-listings-module_load-more_OwyvW',
            link='a.product-card-module_link-underlay_3sfaA',
            content='.grid-y.gap-2.product-card-module_product-card-content_1LFYj',
            title='.product-card-module_product-title_16xh8',
            price='.currency',
            list_price='.product-card-price-module_list-price_om_3Y .currency',
        ),
        detail=DetailSelectors(
            seller='.seller-information a',
            brand='.title-content-list .brand-link a',
            description='.product-description.product-description-module_product-description_3bMdX',
            description_ready='.description-card-module_description-card_m9PqC',
            offers='.more-buying-choices-module_offer_34xYl',
            list_price='.buybox-offer-module_list-price_2GEsn .currency',
        ),
    ),
}

DEFAULT_SITE = 'takealot'


def get_site_config(url: str) -> SiteConfig:
    """
    Pick the selector profile for a listing URL.

    Falls back to the default profile when no enabled profile claims the
    URL's host, since storefronts built on the same platform share markup.

    Args:
        url: Listing page URL

    Returns:
        SiteConfig for the URL
    """
    host = urlparse(url).hostname or ''
    for config in SITES.values():
        if config.enabled and config.matches_host(host):
            return config

    logger.warning(f"No site profile for host '{host}', using '{DEFAULT_SITE}' selectors")
    return SITES[DEFAULT_SITE]


def list_sites() -> List[Dict]:
    """Summaries of all configured site profiles."""
    return [
        {
            'key': key,
            'name': config.name,
            'domains': list(config.domains),
            'enabled': config.enabled,
        }
        for key, config in SITES.items()
    ]
