"""
Concurrency-bounded batch scheduler.

Runs the per-company work for one listing page in consecutive groups of
at most `concurrency_limit` companies. A group runs concurrently and is
fully awaited before the next one starts, so no more than the limit of
detail requests are ever in flight. Companies that fail every retry get
one sequential follow-up sweep after their group.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Callable, Optional

from theorg_crawler.config import CrawlerSettings, DEFAULT_SETTINGS
from theorg_crawler.fetchers import CompanyProcessor
from theorg_crawler.models import Company
from theorg_crawler.storage import Ledger
from theorg_crawler.utils.logging import get_logger

logger = get_logger()


@dataclass
class BatchResult:
    """Outcome of processing one page's companies."""

    succeeded: list = field(default_factory=list)
    recovered: list = field(default_factory=list)  # succeeded in the follow-up sweep
    dropped: list = field(default_factory=list)


def chunked(items: list, size: int) -> list[list]:
    """Split `items` into consecutive groups of at most `size`, keeping order."""
    return [items[i:i + size] for i in range(0, len(items), size)]


class BatchScheduler:
    """Processes a page's companies in bounded concurrent groups."""

    def __init__(
        self,
        processor: CompanyProcessor,
        ledger: Ledger,
        settings: Optional[CrawlerSettings] = None,
        on_company_done: Optional[Callable[[Company, bool], None]] = None
    ):
        self.processor = processor
        self.ledger = ledger
        self.settings = settings or DEFAULT_SETTINGS
        self.concurrency_limit = self.settings.concurrency_limit
        self.on_company_done = on_company_done

    async def process(
        self,
        companies: list[Company],
        source_url: str,
        cursor: Optional[int] = None
    ) -> BatchResult:
        """
        Process companies found on one listing page.

        Args:
            companies: Companies not yet processed, in page order
            source_url: Listing page URL written into every record
            cursor: Page cursor to store with each checkpoint. Defaults to
                the ledger's current cursor.

        Returns:
            BatchResult listing succeeded, recovered and dropped companies
        """
        if cursor is None:
            cursor = self.ledger.cursor

        result = BatchResult()
        for group in chunked(companies, self.concurrency_limit):
            outcomes = await asyncio.gather(
                *(self.processor.process_company(company, source_url) for company in group)
            )

            failed = []
            for company, ok in zip(group, outcomes):
                if ok:
                    result.succeeded.append(company)
                    self._notify(company, True)
                else:
                    failed.append(company)

            if failed:
                logger.info(f"Retrying {len(failed)} failed companies...")
                await self._sweep(failed, source_url, cursor, result)

            self.ledger.save(cursor)

        return result

    async def _sweep(
        self,
        failed: list[Company],
        source_url: str,
        cursor: int,
        result: BatchResult
    ) -> None:
        """One sequential retry cycle for each company that failed in its group."""
        attempts = self.processor.policy.max_retries
        for company in failed:
            ok = attempts > 0 and await self.processor.process_company(
                company, source_url, max_attempts=attempts
            )
            if ok:
                result.recovered.append(company)
            else:
                result.dropped.append(company)
                logger.error(
                    f"Dropping company {company.name} for this run; "
                    f"it will be retried on the next start"
                )
            self._notify(company, ok)
            self.ledger.save(cursor)

    def _notify(self, company: Company, ok: bool) -> None:
        if self.on_company_done is not None:
            self.on_company_done(company, ok)
