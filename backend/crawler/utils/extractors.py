"""
Data extraction utilities for rendered pages.

These functions pull values out of BeautifulSoup nodes and raw text.
"""

import re
from typing import Optional
from urllib.parse import urlparse, urljoin
from bs4 import Tag

from .normalizers import normalize_text


def select_text(node: Tag, selector: str) -> Optional[str]:
    """
    Text of the first element matching selector, whitespace-normalized.

    Args:
        node: Element to search within
        selector: CSS selector

    Returns:
        Text or None if no element matches or it is empty
    """
    element = node.select_one(selector)
    if element is None:
        return None
    return normalize_text(element.get_text(' ')) or None


def extract_offer_count(text: Optional[str]) -> Optional[str]:
    """
    Extract the number of other sellers from an offers banner.

    Examples:
        "3 offers from R 1,099" -> "3"
        "1 offer from R 99" -> "1"
        "See all offers" -> None
    """
    if not text:
        return None
    match = re.search(r'(\d+)\s+offer', text)
    if match:
        return match.group(1)
    return None


def page_origin(url: str) -> str:
    """
    Scheme and host of a URL.

    Examples:
        https://www.takealot.com/all?qsearch=tv -> https://www.takealot.com
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return ''
    return f"{parsed.scheme}://{parsed.netloc}"


def resolve_url(origin: str, href: Optional[str]) -> str:
    """Absolute URL for a link found on a page, or '' when there is no link."""
    if not href or not href.strip():
        return ''
    href = href.strip()
    if not origin:
        return href if href.startswith(('http://', 'https://')) else ''
    return urljoin(origin + '/', href)
