"""
Text normalization utilities for scraped values.

These functions clean up text read from rendered pages so that
records compare and export consistently.
"""

import re
from typing import Optional
from urllib.parse import urlparse


def normalize_text(text: Optional[str]) -> str:
    """
    Collapse runs of whitespace to single spaces and trim.

    Examples:
        "  R 1,299 " -> "R 1,299"
        "Line one\\n\\n  line two" -> "Line one line two"
    """
    if not text:
        return ''
    return re.sub(r'\s+', ' ', text).strip()


def clean_description(text: Optional[str]) -> Optional[str]:
    """
    Normalize a product description block.

    Returns None for blocks that are empty once whitespace is removed,
    so callers can fall back to a placeholder.
    """
    cleaned = normalize_text(text)
    return cleaned or None


def host_slug(url: str) -> str:
    """
    Filesystem-safe version of a URL's host name.

    Examples:
        https://www.takealot.com/all?q=x -> www_takealot_com
        not a url -> unknown
    """
    host = urlparse(url).hostname or ''
    slug = re.sub(r'[^a-z0-9]', '_', host, flags=re.IGNORECASE)
    return slug or 'unknown'
