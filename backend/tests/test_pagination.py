"""
Tests for the listing pagination expander.
"""

import asyncio

from crawler.pagination import PaginationExpander, ExpansionState
from fakes import FakePage


class TestPaginationExpander:
    """Test the load-more state machine."""

    def test_grows_then_stalls_out(self, fast_settings, site):
        """Counts 40 -> 80 -> 120 then five clicks without growth."""
        page = FakePage(counts=[40, 80, 120])
        expander = PaginationExpander(site.listing, fast_settings)

        count = asyncio.run(expander.expand(page))

        assert count == 120
        assert expander.state == ExpansionState.EXHAUSTED
        assert expander.clicks == 7
        assert expander.stall_count == fast_settings.max_stall_attempts
        assert page.clicked == [site.listing.load_more] * 7

    def test_stall_only(self, fast_settings, site):
        page = FakePage(counts=[10])
        expander = PaginationExpander(site.listing, fast_settings)

        count = asyncio.run(expander.expand(page))

        assert count == 10
        assert expander.clicks == 5

    def test_growth_resets_stall_count(self, fast_settings, site):
        page = FakePage(counts=[10, 10, 10, 20])
        expander = PaginationExpander(site.listing, fast_settings)

        asyncio.run(expander.expand(page))

        # Two stalls, one growth, then a full run of stalls
        assert expander.clicks == 3 + fast_settings.max_stall_attempts
        assert expander.item_count == 20

    def test_hidden_control_stops_immediately(self, fast_settings, site):
        page = FakePage(counts=[24], visible=False)
        expander = PaginationExpander(site.listing, fast_settings)

        count = asyncio.run(expander.expand(page))

        assert count == 24
        assert expander.clicks == 0
        assert expander.state == ExpansionState.EXHAUSTED

    def test_fault_ends_expansion(self, fast_settings, site):
        page = FakePage(counts=[10, RuntimeError("Execution context was destroyed")])
        expander = PaginationExpander(site.listing, fast_settings)

        count = asyncio.run(expander.expand(page))

        assert count == 10
        assert expander.clicks == 1
        assert expander.state == ExpansionState.EXHAUSTED

    def test_initial_count_failure(self, fast_settings, site):
        page = FakePage(counts=[RuntimeError("Target closed"), 5])
        expander = PaginationExpander(site.listing, fast_settings)

        count = asyncio.run(expander.expand(page))

        assert count == 0
        assert expander.clicks == 0
        assert expander.state == ExpansionState.EXHAUSTED

    def test_custom_stall_limit(self, site):
        from crawler.config import CrawlSettings

        settings = CrawlSettings(scroll_settle_seconds=0, click_settle_seconds=0, max_stall_attempts=2)
        page = FakePage(counts=[3])
        expander = PaginationExpander(site.listing, settings)

        asyncio.run(expander.expand(page))

        assert expander.clicks == 2
