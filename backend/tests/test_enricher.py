"""
Tests for the detail page enricher.
"""

import asyncio

import pytest

from crawler.base import FETCH_ERROR, NOT_FOUND
from crawler.enricher import DetailEnricher
from crawler.progress import ProgressReporter
from fakes import FakeBrowser, detail_page_html


def full_detail(n):
    return detail_page_html(
        seller=f"Seller {n}",
        brand=f"Brand {n}",
        description=f"<p>Kettle   number {n}</p>\n<p>1.7L</p>",
        offers=f"{n} offers from R 399",
        list_price=f"R {n}50",
    )


@pytest.fixture
def detail_routes(sample_summaries):
    return {summary.detail_url: full_detail(n) for n, summary in enumerate(sample_summaries, 1)}


class TestDetailParsing:
    """Test reading fields from detail page HTML."""

    def test_parse_all_fields(self, site):
        enricher = DetailEnricher(FakeBrowser(), site.detail)

        detail = enricher.parse(full_detail(3))

        assert detail.seller == "Seller 3"
        assert detail.brand == "Brand 3"
        assert detail.description == "Kettle number 3 1.7L"
        assert detail.additional_seller_count == "3"
        assert detail.list_price == "R 350"

    def test_parse_missing_fields(self, site):
        enricher = DetailEnricher(FakeBrowser(), site.detail)

        detail = enricher.parse(detail_page_html(seller="Only Seller", offers="See all offers"))

        assert detail.seller == "Only Seller"
        assert detail.brand == NOT_FOUND['brand']
        assert detail.description == NOT_FOUND['description']
        assert detail.additional_seller_count == NOT_FOUND['additional_seller_count']
        assert detail.list_price == NOT_FOUND['list_price']


class TestEnrich:
    """Test batch enrichment against fake detail pages."""

    def test_order_and_fields(self, site, fast_settings, sample_summaries, detail_routes):
        browser = FakeBrowser(detail_pages=detail_routes, present=[site.detail.seller])
        enricher = DetailEnricher(browser, site.detail, fast_settings)

        items = asyncio.run(enricher.enrich(sample_summaries))

        assert [item.title for item in items] == [s.title for s in sample_summaries]
        assert [item.seller for item in items] == ["Seller 1", "Seller 2", "Seller 3", "Seller 4"]
        assert items[1].list_price == "R 250"
        assert enricher.failed == 0

    def test_order_kept_when_batch_settles_out_of_order(
        self, site, fast_settings, sample_summaries, detail_routes
    ):
        """The first item of each batch loads slowest; results still follow input order."""
        urls = [s.detail_url for s in sample_summaries]
        browser = FakeBrowser(
            detail_pages=detail_routes,
            present=[site.detail.seller],
            delays={urls[0]: 0.05, urls[2]: 0.05},
        )
        enricher = DetailEnricher(browser, site.detail, fast_settings)

        items = asyncio.run(enricher.enrich(sample_summaries, batch_size=2))

        assert browser.navigated == [urls[1], urls[0], urls[3], urls[2]]
        assert [item.title for item in items] == ["Kettle 1", "Kettle 2", "Kettle 3", "Kettle 4"]
        assert [item.seller for item in items] == ["Seller 1", "Seller 2", "Seller 3", "Seller 4"]

    def test_batches_bound_open_pages(self, site, fast_settings, sample_summaries, detail_routes):
        browser = FakeBrowser(detail_pages=detail_routes, present=[site.detail.seller])
        enricher = DetailEnricher(browser, site.detail, fast_settings)

        asyncio.run(enricher.enrich(sample_summaries, batch_size=2))

        assert browser.max_open == 2
        assert browser.open_pages == 0
        assert all(page.closed for page in browser.pages)

    def test_single_item_batches(self, site, fast_settings, sample_summaries, detail_routes):
        browser = FakeBrowser(detail_pages=detail_routes, present=[site.detail.seller])
        enricher = DetailEnricher(browser, site.detail, fast_settings)

        items = asyncio.run(enricher.enrich(sample_summaries, batch_size=1))

        assert len(items) == 4
        assert browser.max_open == 1

    def test_progress_after_each_batch(self, site, fast_settings, sample_summaries, detail_routes):
        """Four items in batches of two report 83 then 95."""
        reporter = ProgressReporter(70)
        seen = []
        reporter.subscribe(seen.append)
        browser = FakeBrowser(detail_pages=detail_routes, present=[site.detail.seller])
        enricher = DetailEnricher(browser, site.detail, fast_settings, reporter)

        asyncio.run(enricher.enrich(sample_summaries, batch_size=2))

        assert seen == [83, 95]

    def test_navigation_failure_degrades_items(self, site, fast_settings, sample_summaries, detail_routes):
        failing = {s.detail_url for s in sample_summaries}
        browser = FakeBrowser(detail_pages=detail_routes, fail_urls=failing)
        enricher = DetailEnricher(browser, site.detail, fast_settings)

        items = asyncio.run(enricher.enrich(sample_summaries))

        assert len(items) == len(sample_summaries)
        for item, summary in zip(items, sample_summaries):
            assert item.title == summary.title
            assert item.seller == FETCH_ERROR['seller']
            assert item.brand == FETCH_ERROR['brand']
            assert item.description == FETCH_ERROR['description']
            assert item.additional_seller_count == FETCH_ERROR['additional_seller_count']
            # Card list price is kept when the detail page offered none
            assert item.list_price == summary.list_price
        assert enricher.failed == 4
        assert all(page.closed for page in browser.pages)

    def test_one_failure_does_not_affect_batch(self, site, fast_settings, sample_summaries, detail_routes):
        browser = FakeBrowser(
            detail_pages=detail_routes,
            fail_urls=[sample_summaries[0].detail_url],
            present=[site.detail.seller],
        )
        enricher = DetailEnricher(browser, site.detail, fast_settings)

        items = asyncio.run(enricher.enrich(sample_summaries))

        assert items[0].seller == FETCH_ERROR['seller']
        assert items[1].seller == "Seller 2"
        assert enricher.failed == 1

    def test_page_open_failure(self, site, fast_settings, sample_summaries):
        browser = FakeBrowser(new_page_error=RuntimeError("Browser has been closed"))
        enricher = DetailEnricher(browser, site.detail, fast_settings)

        items = asyncio.run(enricher.enrich(sample_summaries[:1]))

        assert items[0].seller == FETCH_ERROR['seller']
        assert enricher.failed == 1

    def test_no_selector_appears(self, site, fast_settings, sample_summaries):
        """Every wait times out: fields present are read, the rest are not-found."""
        url = sample_summaries[0].detail_url
        browser = FakeBrowser(detail_pages={url: detail_page_html(brand="Late Brand")})
        enricher = DetailEnricher(browser, site.detail, fast_settings)

        items = asyncio.run(enricher.enrich(sample_summaries[:1]))

        assert items[0].brand == "Late Brand"
        assert items[0].seller == NOT_FOUND['seller']
        assert items[0].description == NOT_FOUND['description']
        assert enricher.failed == 0

    def test_empty_input(self, site, fast_settings):
        reporter = ProgressReporter()
        seen = []
        reporter.subscribe(seen.append)
        enricher = DetailEnricher(FakeBrowser(), site.detail, fast_settings, reporter)

        assert asyncio.run(enricher.enrich([])) == []
        assert seen == []

    def test_invalid_batch_size(self, site, fast_settings, sample_summaries):
        enricher = DetailEnricher(FakeBrowser(), site.detail, fast_settings)

        with pytest.raises(ValueError):
            asyncio.run(enricher.enrich(sample_summaries, batch_size=0))


class TestWaitForAny:
    """Test the selector race on detail pages."""

    def test_returns_selector_that_appeared(self, site, fast_settings):
        from fakes import FakePage

        page = FakePage(present=[site.detail.brand])
        enricher = DetailEnricher(FakeBrowser(), site.detail, fast_settings)

        assert asyncio.run(enricher._wait_for_any(page)) == site.detail.brand

    def test_returns_none_when_all_time_out(self, site, fast_settings):
        from fakes import FakePage

        enricher = DetailEnricher(FakeBrowser(), site.detail, fast_settings)

        assert asyncio.run(enricher._wait_for_any(FakePage())) is None
