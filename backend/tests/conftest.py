"""
Pytest configuration and fixtures for catalog crawler tests.
"""

import pytest
from fastapi.testclient import TestClient

from api.main import app, get_crawl_runner, get_export_dir, get_progress_hub
from api.progress_stream import ProgressHub
from crawler.base import EnrichedItem, ItemSummary
from crawler.config import CrawlSettings, SITES


@pytest.fixture
def fast_settings():
    """Crawl settings without settle delays."""
    return CrawlSettings(
        batch_size=2,
        scroll_settle_seconds=0,
        click_settle_seconds=0,
        seller_wait=0.01,
        brand_wait=0.01,
        description_wait=0.01,
    )


@pytest.fixture
def site():
    return SITES['takealot']


@pytest.fixture
def sample_summaries():
    """Four listing summaries with distinct detail pages."""
    return [
        ItemSummary(
            title=f"Kettle {n}",
            price=f"R {n}99",
            detail_url=f"https://www.takealot.com/kettle-{n}/PLID{n}",
            image_url=f"https://media.takealot.com/kettle-{n}.jpg",
        )
        for n in range(1, 5)
    ]


@pytest.fixture
def sample_item():
    return EnrichedItem(
        title="Russell Hobbs Kettle",
        price="R 399",
        list_price="R 499",
        image_url="https://media.takealot.com/kettle.jpg",
        detail_url="https://www.takealot.com/russell-hobbs-kettle/PLID1",
        seller="Acme Store",
        brand="Russell Hobbs",
        description="1.7L cordless kettle",
        additional_seller_count="3",
    )


class FakeCrawlRunner:
    """Replaces the browser crawl behind POST /scrape."""

    def __init__(self):
        self.items = []
        self.error = None
        self.calls = []
        self.progress = []

    async def __call__(self, url, reporter):
        self.calls.append(url)
        reporter.report(50)
        self.progress.append(reporter.percent)
        if self.error is not None:
            raise self.error
        return self.items


@pytest.fixture
def crawl_runner():
    return FakeCrawlRunner()


@pytest.fixture
def progress_hub():
    return ProgressHub()


@pytest.fixture(scope="function")
def client(crawl_runner, progress_hub, tmp_path):
    """Create a test client with the crawl, export directory and hub overridden."""
    app.dependency_overrides[get_crawl_runner] = lambda: crawl_runner
    app.dependency_overrides[get_export_dir] = lambda: tmp_path
    app.dependency_overrides[get_progress_hub] = lambda: progress_hub

    # Use TestClient directly without context manager for compatibility
    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
