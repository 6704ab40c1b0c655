"""Tests for ``scout.agent.runner.run_crawl``.

The browser is replaced by a ``browser_factory`` yielding a ``FakeFetcher``;
the store writes to ``tmp_path``.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from unittest.mock import patch

import pytest

from fakes import FakeFetcher, FakeSite, card, page_url, stale_card
from scout.agent.runner import run_crawl
from scout.errors import RecoverableFetchError, StoreWriteError
from scout.store.listings import load_listings, write_listings
from scout.scraper.models import PersistedListing


def _factory(site: FakeSite, events: list[str]):
    @contextmanager
    def factory(config):
        events.append("open")
        try:
            yield FakeFetcher(site)
        finally:
            events.append("close")

    return factory


@pytest.fixture
def site() -> FakeSite:
    site = FakeSite.paged([[card("a"), stale_card("b")], [card("c")]])
    site.add_detail("https://batdongsan.com.vn/cho-thue/a")
    site.add_detail("https://batdongsan.com.vn/cho-thue/c", profile="Xem thêm 8 tin khác")
    return site


class TestRunCrawl:
    def test_crawls_and_persists(self, site, cfg, no_sleep, tmp_path: Path) -> None:
        events: list[str] = []
        out = tmp_path / "out.xlsx"

        report = run_crawl(cfg, start_url=page_url(1), output_path=out,
                           browser_factory=_factory(site, events))

        assert events == ["open", "close"]
        assert report.crawl.pages_visited == 2
        assert report.new_listings == 1
        assert report.saved is not None and report.saved.added == 1
        assert [l.url for l in load_listings(out)] == ["https://batdongsan.com.vn/cho-thue/a"]

    def test_merges_with_existing_store(self, site, cfg, no_sleep, tmp_path: Path) -> None:
        out = tmp_path / "out.xlsx"
        old = PersistedListing("10/10/2026", "Ba Đình", "https://batdongsan.com.vn/old")
        write_listings(out, [old])

        report = run_crawl(cfg, start_url=page_url(1), output_path=out,
                           browser_factory=_factory(site, []))

        assert (report.saved.existing, report.saved.added) == (1, 1)
        assert load_listings(out)[0] == old

    def test_defaults_come_from_settings(self, site, cfg, no_sleep) -> None:
        cfg.start_url = page_url(1)
        report = run_crawl(cfg, browser_factory=_factory(site, []))

        assert report.output_path == cfg.workspace_dir / "valid_listings.xlsx"
        assert report.output_path.exists()

    def test_store_write_failure_is_reported_not_raised(self, site, cfg, no_sleep, tmp_path) -> None:
        with patch("scout.agent.runner.save_new_listings",
                   side_effect=StoreWriteError("disk full")):
            report = run_crawl(cfg, start_url=page_url(1), output_path=tmp_path / "x.xlsx",
                               browser_factory=_factory(site, []))

        assert report.saved is None
        assert report.store_error == "disk full"
        assert report.new_listings == 1

    def test_fatal_error_closes_browser_and_skips_store(self, cfg, no_sleep, tmp_path) -> None:
        site = FakeSite()  # start page does not exist
        events: list[str] = []
        out = tmp_path / "out.xlsx"

        with pytest.raises(RecoverableFetchError):
            run_crawl(cfg, start_url=page_url(1), output_path=out,
                      browser_factory=_factory(site, events))

        assert events == ["open", "close"]
        assert not out.exists()

    def test_unreadable_store_does_not_lose_the_crawl(self, site, cfg, no_sleep, tmp_path) -> None:
        out = tmp_path / "out.xlsx"
        out.write_bytes(b"PK\x03\x04 truncated")

        report = run_crawl(cfg, start_url=page_url(1), output_path=out,
                           browser_factory=_factory(site, []))

        assert report.store_error == ""
        assert (report.saved.existing, report.saved.added) == (0, 1)
        assert [l.url for l in load_listings(out)] == ["https://batdongsan.com.vn/cho-thue/a"]

    def test_unreachable_later_page_keeps_collected_listings(self, site, cfg, no_sleep, tmp_path) -> None:
        site.nav_failures[page_url(2)] = cfg.retry_max_attempts
        out = tmp_path / "out.xlsx"

        report = run_crawl(cfg, start_url=page_url(1), output_path=out,
                           browser_factory=_factory(site, []))

        assert report.crawl.pages_visited == 1
        assert [l.url for l in load_listings(out)] == ["https://batdongsan.com.vn/cho-thue/a"]
