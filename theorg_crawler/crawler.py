#!/usr/bin/env python3
"""
Resumable crawler for the TheOrg company directory.

Walks the listing pages of one partition (/companies/<partition>-<page>),
visits each company's detail page and appends its homepage URL to a CSV
file. Progress is checkpointed so the crawl can be stopped and resumed.

Usage:
    python main.py <partition> [options]

Examples:
    python main.py b
    python main.py 0-9 --concurrency 5
    python main.py --list-partitions
"""

import argparse
import asyncio
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Optional

import aiohttp
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn, MofNCompleteColumn

from theorg_crawler.config import (
    CrawlerSettings,
    DEFAULT_SETTINGS,
    PartitionConfig,
    get_partition_config,
    list_partitions,
)
from theorg_crawler.fetchers import CompanyProcessor, ResilientFetcher
from theorg_crawler.models import CrawlStats, FetchStatus
from theorg_crawler.parsers import ListingParser
from theorg_crawler.scheduler import BatchScheduler
from theorg_crawler.storage import CsvRecordSink, Ledger
from theorg_crawler.utils.logging import console, setup_logging, get_logger

logger = get_logger()


def create_progress() -> Progress:
    """Create a Rich progress bar with consistent styling"""
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(bar_width=40),
        MofNCompleteColumn(),
        TextColumn("•"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )


class TheOrgCrawler:
    """Crawler for one partition of the TheOrg company directory"""

    def __init__(
        self,
        config: PartitionConfig,
        settings: Optional[CrawlerSettings] = None,
        show_progress: bool = True
    ):
        self.config = config
        self.settings = settings or DEFAULT_SETTINGS
        self.settings.validate()
        self.show_progress = show_progress

        self.config.output_dir.mkdir(parents=True, exist_ok=True)

        self.ledger = Ledger(config.checkpoint_file)
        self.sink = CsvRecordSink(config.output_file)
        self.listing_parser = ListingParser(config.absolute_url, self.settings)

    async def crawl(self, session: Optional[aiohttp.ClientSession] = None) -> CrawlStats:
        """
        Crawl the partition from the last checkpoint until the listing runs out.

        Args:
            session: Optional aiohttp session. A new one is created (and
                closed afterwards) when not given.

        Returns:
            CrawlStats for this run
        """
        if session is not None:
            return await self._crawl(session)

        connector = ResilientFetcher.create_connector(self.settings.concurrency_limit)
        async with aiohttp.ClientSession(connector=connector) as session:
            return await self._crawl(session)

    async def _crawl(self, session: aiohttp.ClientSession) -> CrawlStats:
        self.ledger.load()
        self.sink.ensure_header()

        fetcher = ResilientFetcher(session, self.settings)
        processor = CompanyProcessor(fetcher, self.sink, self.ledger, self.settings)

        page = self.ledger.resume_page
        stats = CrawlStats(start_page=page)

        if self.show_progress:
            console.rule(f"[bold green]Crawling partition '{self.config.key}' from page {page}")

        with (create_progress() if self.show_progress else nullcontext()) as progress:
            while True:
                page_url = self.config.listing_url(page)
                logger.info(f"Fetching: {page_url}")
                result = await fetcher.fetch(page_url)

                if not result.has_content:
                    if result.status == FetchStatus.NOT_FOUND:
                        stats.stop_reason = "listing page not found"
                    else:
                        stats.stop_reason = "no content returned"
                    logger.info(f"No HTML returned for {page_url}. Stopping.")
                    break

                companies = self.listing_parser.extract_companies(result.body)
                if not companies:
                    stats.stop_reason = "no companies listed"
                    logger.info(f"No companies found on {page_url}. Stopping.")
                    break

                pending = [c for c in companies if not self.ledger.is_processed(c.identity)]
                stats.pages += 1
                stats.skipped += len(companies) - len(pending)
                logger.info(
                    f"Page {page}: {len(companies)} companies, "
                    f"{len(pending)} to process"
                )

                if pending:
                    with self.page_task(progress, page, len(pending)) as on_company_done:
                        scheduler = BatchScheduler(
                            processor,
                            self.ledger,
                            self.settings,
                            on_company_done=on_company_done,
                        )
                        batch = await scheduler.process(pending, page_url, cursor=page)
                    stats.dropped += len(batch.dropped)

                page += 1
                self.ledger.save(page)

        stats.saved = processor.saved
        stats.not_found = processor.not_found
        stats.last_page = page
        self._log_summary(stats)
        return stats

    @staticmethod
    @contextmanager
    def page_task(progress: Optional[Progress], page: int, total: int):
        """Progress task for one listing page, removed once the page is done."""
        if progress is None:
            yield None
            return
        task = progress.add_task(f"Page {page}", total=total)
        try:
            yield lambda company, ok: progress.advance(task)
        finally:
            progress.remove_task(task)

    def _log_summary(self, stats: CrawlStats) -> None:
        logger.info("#" * 60)
        logger.info("CRAWL COMPLETE")
        logger.info("#" * 60)
        logger.info(f"Partition: {self.config.key}")
        logger.info(f"Pages: {stats.start_page} -> {stats.last_page} ({stats.pages} crawled)")
        logger.info(f"Saved: {stats.saved}")
        logger.info(f"Not found: {stats.not_found}")
        logger.info(f"Already processed: {stats.skipped}")
        logger.info(f"Dropped: {stats.dropped}")
        logger.info(f"Stopped: {stats.stop_reason}")
        logger.info(f"Output: {self.config.output_file}")
        logger.info("#" * 60)


def build_settings(args: argparse.Namespace) -> CrawlerSettings:
    """Settings for a CLI run, starting from the defaults."""
    return CrawlerSettings(
        concurrency_limit=args.concurrency,
        max_transient_retries=args.max_transient_retries,
        dedup_by=args.dedup_by,
    )


def main():
    parser = argparse.ArgumentParser(
        description="Crawl the TheOrg company directory and record company homepages",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py b
  python main.py 0-9 --concurrency 5
  python main.py b --max-transient-retries 100
  python main.py --list-partitions
        """
    )

    parser.add_argument("partition", nargs="?", help="Directory partition (a-z or 0-9)")
    parser.add_argument("--list-partitions", action="store_true", help="List available partitions")
    parser.add_argument("--concurrency", type=int, default=DEFAULT_SETTINGS.concurrency_limit,
                        help=f"Simultaneous company page fetches (default: {DEFAULT_SETTINGS.concurrency_limit})")
    parser.add_argument("--output-dir", default="data", help="Output directory (default: data/)")
    parser.add_argument("--max-transient-retries", type=int, default=None,
                        help="Give up on a URL after N network/5xx retries (default: retry forever)")
    parser.add_argument("--dedup-by", choices=["name", "url"], default=DEFAULT_SETTINGS.dedup_by,
                        help="Key used to skip already processed companies (default: name)")
    parser.add_argument("--no-progress", action="store_true", help="Disable the progress bar")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging (debug level)")

    args = parser.parse_args()

    if args.list_partitions:
        print("\nAvailable partitions:")
        print(", ".join(list_partitions()))
        print("\nUsage: python main.py <partition>")
        return

    if not args.partition:
        parser.print_help()
        return

    try:
        settings = build_settings(args)
        settings.validate()
        config = get_partition_config(args.partition, args.output_dir, settings)
    except ValueError as e:
        print(f"Error: {e}")
        print("\nUse --list-partitions to see available partitions")
        return

    Path(args.output_dir).mkdir(parents=True, exist_ok=True)
    setup_logging(Path(args.output_dir), config.key, verbose=args.verbose)

    crawler = TheOrgCrawler(config, settings, show_progress=not args.no_progress)
    asyncio.run(crawler.crawl())


if __name__ == "__main__":
    main()
