"""
Crawler settings and configuration constants.

This module centralizes all configurable parameters for the crawler,
making it easy to adjust behavior without modifying core logic.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class CrawlerSettings:
    """Configuration settings for the TheOrg company directory crawler."""

    # Site configuration
    base_url: str = "https://theorg.com"
    companies_path: str = "/companies"
    user_agent: str = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36"

    # Concurrency settings
    concurrency_limit: int = 10

    # Transient network errors (timeouts, resets, DNS, 5xx).
    # None keeps retrying until the network comes back.
    request_timeout: int = 30
    transient_retry_delay: float = 30
    max_transient_retries: Optional[int] = None

    # Per-company retry settings
    item_max_retries: int = 3
    item_retry_delay: float = 30

    # HTML selectors
    listing_selector: str = "li.sc-2d41e6a8-7.EuiIB > a"
    homepage_selector: str = 'a[title="View the website"]'

    # Dedup key for processed companies: "name" or "url"
    dedup_by: str = "name"

    def validate(self) -> None:
        """Raise ValueError if any setting is out of range."""
        if self.concurrency_limit < 1:
            raise ValueError(f"concurrency_limit must be positive, got {self.concurrency_limit}")
        if self.item_max_retries < 0:
            raise ValueError(f"item_max_retries must not be negative, got {self.item_max_retries}")
        if self.max_transient_retries is not None and self.max_transient_retries < 0:
            raise ValueError(
                f"max_transient_retries must not be negative, got {self.max_transient_retries}"
            )
        if self.dedup_by not in ("name", "url"):
            raise ValueError(f"dedup_by must be 'name' or 'url', got {self.dedup_by!r}")


# Default settings instance
DEFAULT_SETTINGS = CrawlerSettings()
