"""
Page accessor interface.

The crawl stages only talk to a rendered page through these two
abstract classes, so they never depend on a specific browser engine.
Tests drive the stages with an in-memory implementation.
"""

from abc import ABC, abstractmethod
from typing import Any


class PageAccessor(ABC):
    """A single rendering context (one browser tab)."""

    @property
    @abstractmethod
    def url(self) -> str:
        """URL currently loaded in the page."""
        pass

    @abstractmethod
    async def goto(self, url: str, wait_until: str = 'load', timeout_ms: int = 30000) -> None:
        """
        Navigate to a URL.

        Args:
            url: Page to load
            wait_until: Load state to wait for ('load', 'domcontentloaded', 'networkidle')
            timeout_ms: Navigation timeout in milliseconds

        Raises:
            Exception: On navigation failure or timeout
        """
        pass

    @abstractmethod
    async def wait_for_selector(self, selector: str, timeout_ms: int) -> None:
        """
        Wait until an element matching selector is attached.

        Raises:
            Exception: If the selector does not appear within timeout_ms
        """
        pass

    @abstractmethod
    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        """Evaluate a JavaScript function in the page and return its result."""
        pass

    @abstractmethod
    async def click(self, selector: str) -> None:
        pass

    @abstractmethod
    async def content(self) -> str:
        """Serialized HTML of the rendered DOM."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass


class PageFactory(ABC):
    """Something that can open fresh pages, e.g. a browser."""

    @abstractmethod
    async def new_page(self) -> PageAccessor:
        pass
