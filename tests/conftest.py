from __future__ import annotations

from pathlib import Path

import pytest

from scout.config import Settings


@pytest.fixture
def cfg(tmp_path: Path) -> Settings:
    """Settings isolated from the environment, with no real delays."""
    return Settings(
        workspace_dir=tmp_path,
        output_override="",
        start_url="https://batdongsan.com.vn/cho-thue-nha-dat-ha-noi/p1",
        url_prefix="https://batdongsan.com.vn",
        headless=True,
        navigation_timeout_ms=1000,
        page_delay_ms=0,
        retry_max_attempts=3,
        retry_backoff_ms=2000,
        stale_page_limit=15,
        max_pages=0,
        agent_listing_ceiling=3,
        target_districts=["Cầu Giấy", "Đống Đa", "Tây Hồ", "Hà Đông"],
    )


@pytest.fixture
def no_sleep(monkeypatch):
    """Replace ``time.sleep`` and record every requested delay."""
    delays: list[float] = []
    monkeypatch.setattr("time.sleep", lambda seconds: delays.append(seconds))
    return delays
