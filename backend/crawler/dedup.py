"""Collapse enriched items that describe the same product."""

from typing import Dict, List

from .base import EnrichedItem


def identity_key(item: EnrichedItem) -> str:
    """Two items with the same title and price are the same product."""
    return item.title + item.price


def dedup(items: List[EnrichedItem]) -> List[EnrichedItem]:
    """
    Keep the first occurrence of every identity key.

    Args:
        items: Enriched items in crawl order

    Returns:
        Unique items in first-seen order
    """
    unique: Dict[str, EnrichedItem] = {}
    for item in items:
        key = identity_key(item)
        if key not in unique:
            unique[key] = item
    return list(unique.values())
