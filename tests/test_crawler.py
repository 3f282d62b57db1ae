import csv
import io
import json

import aiohttp
import pytest
from rich.console import Console
from rich.progress import Progress

from theorg_crawler.config import CrawlerSettings, get_partition_config
from theorg_crawler.crawler import TheOrgCrawler
from theorg_crawler.storage import Ledger

from tests.fakes import FakeSession, company_html, listing_html


def make_crawler(partition, settings):
    return TheOrgCrawler(partition, settings, show_progress=False)


def read_rows(partition):
    with open(partition.output_file, newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def read_checkpoint(partition):
    return json.loads(partition.checkpoint_file.read_text(encoding="utf-8"))


def two_page_site(partition):
    """Pages 1 and 2 list companies, page 3 is empty."""
    return FakeSession({
        partition.listing_url(1): [(200, listing_html(("Acme", "/org/acme"), ("Beta", "/org/beta")))],
        partition.listing_url(2): [(200, listing_html(("Gamma", "/org/gamma")))],
        partition.listing_url(3): [(200, listing_html())],
        "https://theorg.com/org/acme": [(200, company_html("https://acme.example"))],
        "https://theorg.com/org/beta": [(404, "")],
        "https://theorg.com/org/gamma": [(200, company_html())],
    })


@pytest.mark.asyncio
async def test_page_with_two_companies_then_empty_page(partition, settings, waits):
    Ledger(partition.checkpoint_file).save(3)
    session = FakeSession({
        partition.listing_url(3): [(200, listing_html(("A", "/org/a"), ("B", "/org/b")))],
        partition.listing_url(4): [(200, listing_html())],
        "https://theorg.com/org/a": [(200, company_html())],
        "https://theorg.com/org/b": [(200, company_html())],
    })

    stats = await make_crawler(partition, settings).crawl(session)

    source = "https://theorg.com/companies/x-3"
    assert read_rows(partition) == [
        ["sourceurl", "company_name", "company_homepage_url"],
        [source, "A", ""],
        [source, "B", ""],
    ]
    checkpoint = read_checkpoint(partition)
    assert checkpoint["lastPageNum"] == 4
    assert sorted(checkpoint["processedCompanies"]) == ["A", "B"]
    assert stats.stop_reason == "no companies listed"
    assert stats.last_page == 4
    assert session.calls.get(partition.listing_url(5), 0) == 0


@pytest.mark.asyncio
async def test_full_crawl_writes_every_company_once(partition, settings, waits):
    session = two_page_site(partition)
    stats = await make_crawler(partition, settings).crawl(session)

    rows = read_rows(partition)[1:]
    assert rows == [
        ["https://theorg.com/companies/x-1", "Acme", "https://acme.example"],
        ["https://theorg.com/companies/x-1", "Beta", "NOT_FOUND"],
        ["https://theorg.com/companies/x-2", "Gamma", ""],
    ]
    assert stats.pages == 2
    assert stats.saved == 2
    assert stats.not_found == 1
    assert stats.dropped == 0
    assert read_checkpoint(partition)["lastPageNum"] == 3


@pytest.mark.asyncio
async def test_resume_appends_nothing_for_processed_companies(partition, settings, waits):
    await make_crawler(partition, settings).crawl(two_page_site(partition))
    rows_before = read_rows(partition)

    # Rewind the cursor so the listing pages are visited again
    ledger = Ledger(partition.checkpoint_file).load()
    ledger.save(1)

    session = two_page_site(partition)
    stats = await make_crawler(partition, settings).crawl(session)

    assert read_rows(partition) == rows_before
    assert stats.skipped == 3
    assert session.calls.get("https://theorg.com/org/acme", 0) == 0
    assert session.calls.get("https://theorg.com/org/gamma", 0) == 0


@pytest.mark.asyncio
async def test_rerun_after_completion_starts_at_saved_cursor(partition, settings, waits):
    await make_crawler(partition, settings).crawl(two_page_site(partition))

    session = two_page_site(partition)
    await make_crawler(partition, settings).crawl(session)

    assert session.requested == [partition.listing_url(3)]
    assert len(read_rows(partition)) == 4


@pytest.mark.asyncio
async def test_company_listed_on_two_pages_is_recorded_once(partition, settings, waits):
    session = FakeSession({
        partition.listing_url(1): [(200, listing_html(("Acme", "/org/acme")))],
        partition.listing_url(2): [(200, listing_html(("Acme", "/org/acme")))],
        partition.listing_url(3): [(200, listing_html())],
        "https://theorg.com/org/acme": [(200, company_html())],
    })

    await make_crawler(partition, settings).crawl(session)

    assert [row[1] for row in read_rows(partition)[1:]] == ["Acme"]
    assert session.calls["https://theorg.com/org/acme"] == 1


@pytest.mark.asyncio
async def test_connectivity_errors_then_success_records_once(partition, settings, waits):
    error = aiohttp.ServerDisconnectedError()
    session = FakeSession({
        partition.listing_url(1): [(200, listing_html(("C", "/org/c")))],
        partition.listing_url(2): [(200, listing_html())],
        "https://theorg.com/org/c": [error, error, (200, company_html("https://c.example"))],
    })

    stats = await make_crawler(partition, settings).crawl(session)

    assert read_rows(partition)[1:] == [["https://theorg.com/companies/x-1", "C", "https://c.example"]]
    assert waits == [30, 30]
    assert stats.dropped == 0


@pytest.mark.asyncio
async def test_listing_failure_stops_crawl(partition, settings, waits):
    session = FakeSession({partition.listing_url(1): [(403, "")]})

    stats = await make_crawler(partition, settings).crawl(session)

    assert stats.stop_reason == "no content returned"
    assert stats.pages == 0
    assert read_rows(partition) == [["sourceurl", "company_name", "company_homepage_url"]]


@pytest.mark.asyncio
async def test_listing_not_found_stops_crawl(partition, settings, waits):
    stats = await make_crawler(partition, settings).crawl(FakeSession())
    assert stats.stop_reason == "listing page not found"


@pytest.mark.asyncio
async def test_dropped_company_is_retried_on_next_run(partition, settings, waits):
    listing = [(200, listing_html(("Broken", "/org/broken")))]
    session = FakeSession({
        partition.listing_url(1): listing,
        partition.listing_url(2): [(200, listing_html())],
        "https://theorg.com/org/broken": [(403, "")],
    })

    stats = await make_crawler(partition, settings).crawl(session)

    assert stats.dropped == 1
    assert session.calls["https://theorg.com/org/broken"] == 7
    assert "Broken" not in read_checkpoint(partition)["processedCompanies"]

    Ledger(partition.checkpoint_file).load().save(1)
    session = FakeSession({
        partition.listing_url(1): listing,
        partition.listing_url(2): [(200, listing_html())],
        "https://theorg.com/org/broken": [(200, company_html("https://fixed.example"))],
    })
    await make_crawler(partition, settings).crawl(session)

    assert read_rows(partition)[1:] == [["https://theorg.com/companies/x-1", "Broken", "https://fixed.example"]]


@pytest.mark.asyncio
async def test_detail_fetches_respect_concurrency_limit(tmp_path, waits):
    settings = CrawlerSettings(concurrency_limit=10)
    partition = get_partition_config("x", output_dir=str(tmp_path), settings=settings)
    names = [(f"Company {i}", f"/org/c{i}") for i in range(25)]
    routes = {
        partition.listing_url(1): [(200, listing_html(*names))],
        partition.listing_url(2): [(200, listing_html())],
    }
    routes.update({f"https://theorg.com/org/c{i}": [(200, company_html())] for i in range(25)})
    session = FakeSession(routes, hold=5)

    stats = await make_crawler(partition, settings).crawl(session)

    assert stats.saved == 25
    assert session.max_in_flight == 10


def test_invalid_concurrency_is_rejected(partition):
    with pytest.raises(ValueError):
        TheOrgCrawler(partition, CrawlerSettings(concurrency_limit=0), show_progress=False)


def test_page_task_is_removed_when_page_finishes():
    progress = Progress(console=Console(file=io.StringIO()))

    with TheOrgCrawler.page_task(progress, 3, total=2) as on_company_done:
        assert len(progress.tasks) == 1
        on_company_done(None, True)
        assert progress.tasks[0].completed == 1

    assert progress.tasks == []


def test_page_task_without_progress_bar():
    with TheOrgCrawler.page_task(None, 1, total=5) as on_company_done:
        assert on_company_done is None


@pytest.mark.asyncio
async def test_progress_bar_holds_no_tasks_after_many_pages(partition, settings, waits, monkeypatch):
    import theorg_crawler.crawler as crawler_mod

    progress = Progress(console=Console(file=io.StringIO()))
    monkeypatch.setattr(crawler_mod, "create_progress", lambda: progress)
    monkeypatch.setattr(crawler_mod, "console", Console(file=io.StringIO()))

    routes = {partition.listing_url(n): [(200, listing_html((f"C{n}", f"/org/c{n}")))] for n in range(1, 6)}
    routes[partition.listing_url(6)] = [(200, listing_html())]
    routes.update({f"https://theorg.com/org/c{n}": [(200, company_html())] for n in range(1, 6)})

    stats = await TheOrgCrawler(partition, settings, show_progress=True).crawl(FakeSession(routes))

    assert stats.pages == 5
    assert progress.tasks == []
