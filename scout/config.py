"""Centralised settings for Rental Scout.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (two levels up from this file)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)

_DEFAULT_START_URL = "https://batdongsan.com.vn/cho-thue-nha-dat-ha-noi"

_DEFAULT_DISTRICTS = (
    "Cầu Giấy",
    "Đống Đa",
    "Ba Đình",
    "Bắc Từ Liêm",
    "Nam Từ Liêm",
    "Tây Hồ",
    "Hoàng Mai",
    "Hai Bà Trưng",
    "Thanh Xuân",
    "Hà Đông",
)


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_list(name: str, default: tuple[str, ...]) -> list[str]:
    raw = os.environ.get(name)
    if not raw:
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Workspace / storage
    # ------------------------------------------------------------------
    workspace_dir: Path = field(
        default_factory=lambda: Path(
            os.environ.get("SCOUT_WORKSPACE", Path.home() / ".rental_scout")
        )
    )
    output_override: str = field(
        default_factory=lambda: os.environ.get("SCOUT_OUTPUT_PATH", "")
    )

    @property
    def output_path(self) -> Path:
        """Absolute path to the persisted listings workbook."""
        if self.output_override:
            return Path(self.output_override).expanduser()
        return self.workspace_dir / "valid_listings.xlsx"

    # ------------------------------------------------------------------
    # Target site
    # ------------------------------------------------------------------
    start_url: str = field(
        default_factory=lambda: os.environ.get("SCOUT_START_URL", _DEFAULT_START_URL)
    )
    url_prefix: str = field(
        default_factory=lambda: os.environ.get(
            "SCOUT_URL_PREFIX", "https://batdongsan.com.vn"
        )
    )

    # ------------------------------------------------------------------
    # Browser
    # ------------------------------------------------------------------
    headless: bool = field(
        default_factory=lambda: _env_bool("SCOUT_HEADLESS", True)
    )
    navigation_timeout_ms: int = field(
        default_factory=lambda: int(os.environ.get("SCOUT_NAVIGATION_TIMEOUT_MS", "60000"))
    )
    page_delay_ms: int = field(
        default_factory=lambda: int(os.environ.get("SCOUT_PAGE_DELAY_MS", "2000"))
    )

    # ------------------------------------------------------------------
    # Retry
    # ------------------------------------------------------------------
    retry_max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("SCOUT_RETRY_MAX_ATTEMPTS", "3"))
    )
    retry_backoff_ms: int = field(
        default_factory=lambda: int(os.environ.get("SCOUT_RETRY_BACKOFF_MS", "2000"))
    )

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------
    stale_page_limit: int = field(
        default_factory=lambda: int(os.environ.get("SCOUT_STALE_PAGE_LIMIT", "15"))
    )
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("SCOUT_MAX_PAGES", "0"))
    )

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------
    agent_listing_ceiling: int = field(
        default_factory=lambda: int(os.environ.get("SCOUT_AGENT_LISTING_CEILING", "3"))
    )
    target_districts: list[str] = field(
        default_factory=lambda: _env_list("SCOUT_TARGET_DISTRICTS", _DEFAULT_DISTRICTS)
    )

    def ensure_workspace(self) -> None:
        """Create the workspace directory if it does not exist."""
        self.workspace_dir.mkdir(parents=True, exist_ok=True)


# Module-level singleton — import this everywhere:
#   from scout.config import settings
settings = Settings()
