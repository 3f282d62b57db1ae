"""Data models for TheOrg Crawler."""

from theorg_crawler.models.company import Company, CompanyRecord, NOT_FOUND
from theorg_crawler.models.fetch import FetchResult, FetchStatus
from theorg_crawler.models.stats import CrawlStats

__all__ = [
    "Company",
    "CompanyRecord",
    "NOT_FOUND",
    "FetchResult",
    "FetchStatus",
    "CrawlStats",
]
