"""Shared utilities for the crawl stages."""

from .normalizers import (
    normalize_text,
    clean_description,
    host_slug,
)
from .extractors import (
    select_text,
    extract_offer_count,
    page_origin,
    resolve_url,
)

__all__ = [
    'normalize_text',
    'clean_description',
    'host_slug',
    'select_text',
    'extract_offer_count',
    'page_origin',
    'resolve_url',
]
