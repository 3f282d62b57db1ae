"""Async HTTP fetchers for the TheOrg directory."""

from theorg_crawler.fetchers.base import ResilientFetcher, TransientFetchError, is_transient_error
from theorg_crawler.fetchers.company_fetcher import CompanyProcessor
from theorg_crawler.fetchers.retry import RetryPolicy, capped_retry, unbounded_transient_retry

__all__ = [
    # Base
    "ResilientFetcher",
    "TransientFetchError",
    "is_transient_error",
    # Retry policies
    "RetryPolicy",
    "capped_retry",
    "unbounded_transient_retry",
    # Company details
    "CompanyProcessor",
]
