"""Run statistics for a crawl."""

from dataclasses import dataclass


@dataclass
class CrawlStats:
    """Counters collected while crawling one partition."""

    start_page: int = 1
    pages: int = 0
    saved: int = 0
    not_found: int = 0
    skipped: int = 0  # already processed in an earlier run
    dropped: int = 0  # failed every retry, left for the next run
    last_page: int = 0
    stop_reason: str = ""
