# tests/conftest.py
import pytest

from theorg_crawler.config import CrawlerSettings, get_partition_config
from theorg_crawler.fetchers import CompanyProcessor, ResilientFetcher


@pytest.fixture
def settings():
    return CrawlerSettings(
        concurrency_limit=10,
        transient_retry_delay=30,
        item_retry_delay=30,
    )


@pytest.fixture
def partition(tmp_path, settings):
    return get_partition_config("x", output_dir=str(tmp_path), settings=settings)


@pytest.fixture
def waits(monkeypatch):
    """Record every retry delay instead of sleeping."""
    recorded = []

    async def fake_wait(self, seconds):
        recorded.append(seconds)

    monkeypatch.setattr(ResilientFetcher, "_wait", fake_wait)
    monkeypatch.setattr(CompanyProcessor, "_wait", fake_wait)
    return recorded
