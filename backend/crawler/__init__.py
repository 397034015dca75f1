"""
Catalog crawler engine.

This package crawls "load more" e-commerce listing pages:
- PaginationExpander reveals every product card
- ListingExtractor reads the cards into summaries
- DetailEnricher visits product pages in small concurrent batches
- dedup() collapses repeated products
- ProgressReporter tells observers how far the crawl has got
"""

from .base import (
    ItemSummary,
    ItemDetail,
    EnrichedItem,
    CrawlResult,
    CrawlError,
    ListingUnavailableError,
    ExportError,
    merge_item,
)
from .config import CrawlSettings, SiteConfig, SITES, get_site_config, list_sites
from .dedup import dedup
from .enricher import DetailEnricher
from .export import export_to_excel
from .listing import ListingExtractor
from .manager import CrawlManager
from .pagination import PaginationExpander, ExpansionState
from .progress import ProgressReporter, interpolate_progress

__all__ = [
    'ItemSummary',
    'ItemDetail',
    'EnrichedItem',
    'CrawlResult',
    'CrawlError',
    'ListingUnavailableError',
    'ExportError',
    'merge_item',
    'CrawlSettings',
    'SiteConfig',
    'SITES',
    'get_site_config',
    'list_sites',
    'dedup',
    'DetailEnricher',
    'export_to_excel',
    'ListingExtractor',
    'CrawlManager',
    'PaginationExpander',
    'ExpansionState',
    'ProgressReporter',
    'interpolate_progress',
]
