"""Page accessor interface and the Playwright implementation."""

from .base import PageAccessor, PageFactory
from .browser import BrowserCrawler, BrowserPage

__all__ = ['PageAccessor', 'PageFactory', 'BrowserCrawler', 'BrowserPage']
