"""
Company detail fetcher.

Fetches one company's detail page, extracts its homepage link and records
the result. Failures are retried a fixed number of times before the
company is reported back as failed.
"""

import asyncio
from typing import Optional

from theorg_crawler.config import CrawlerSettings, DEFAULT_SETTINGS
from theorg_crawler.fetchers.base import ResilientFetcher
from theorg_crawler.fetchers.retry import RetryPolicy, capped_retry
from theorg_crawler.models import Company, CompanyRecord, FetchStatus, NOT_FOUND
from theorg_crawler.parsers import CompanyParser
from theorg_crawler.storage import CsvRecordSink, Ledger
from theorg_crawler.utils.logging import get_logger

logger = get_logger()


class CompanyProcessor:
    """Per-company work: fetch, extract, append to the sink, mark processed."""

    def __init__(
        self,
        fetcher: ResilientFetcher,
        sink: CsvRecordSink,
        ledger: Ledger,
        settings: Optional[CrawlerSettings] = None,
        policy: Optional[RetryPolicy] = None
    ):
        self.fetcher = fetcher
        self.sink = sink
        self.ledger = ledger
        self.settings = settings or DEFAULT_SETTINGS
        self.policy = policy or capped_retry(
            max_retries=self.settings.item_max_retries,
            delay=self.settings.item_retry_delay,
        )
        self.parser = CompanyParser(self.settings)

        self.saved = 0
        self.not_found = 0

    @property
    def default_attempts(self) -> int:
        return self.policy.max_retries + 1

    async def process_company(
        self,
        company: Company,
        source_url: str,
        max_attempts: Optional[int] = None
    ) -> bool:
        """
        Process a single company.

        Args:
            company: Company from the listing page
            source_url: Listing page the company was found on
            max_attempts: Attempts before giving up. Defaults to one initial
                attempt plus the policy's retries.

        Returns:
            True if a record was written and the company marked processed,
            False if every attempt failed
        """
        attempts = self.default_attempts if max_attempts is None else max_attempts

        for attempt in range(1, attempts + 1):
            if attempt > 1:
                logger.info(f"Retrying company {company.name} (attempt {attempt}/{attempts})")
                await self._wait(self.policy.delay)

            if await self._attempt(company, source_url):
                return True

        logger.error(f"Failed to process company {company.name} after {attempts} attempts")
        return False

    async def _attempt(self, company: Company, source_url: str) -> bool:
        result = await self.fetcher.fetch(company.url)

        if result.status == FetchStatus.NOT_FOUND:
            if self._record(company, CompanyRecord(source_url, company.name, NOT_FOUND)):
                self.not_found += 1
                logger.info(f"Company {company.name} not found (404), skipping retries")
                return True
            return False

        if not result.has_content:
            logger.debug(f"No content for {company.name}: {result.error or 'empty body'}")
            return False

        homepage = self.parser.extract_homepage(result.body) or ""
        if self._record(company, CompanyRecord(source_url, company.name, homepage)):
            self.saved += 1
            logger.info(f"Saved: {company.name}")
            return True
        return False

    def _record(self, company: Company, record: CompanyRecord) -> bool:
        """Append the row, then mark the company processed. Never the other way round."""
        try:
            self.sink.append(record)
        except OSError as e:
            logger.error(f"Could not write record for {company.name}: {e}")
            return False
        self.ledger.mark_processed(company.identity)
        return True

    async def _wait(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
