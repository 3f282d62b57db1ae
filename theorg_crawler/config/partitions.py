"""
Partition configurations for the TheOrg company directory.

The directory is split by the first character of the company name
(/companies/a-1, /companies/b-7, /companies/0-9-3, ...). Each partition is
crawled independently and has its own output and checkpoint files.
"""

import string
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from theorg_crawler.config.settings import CrawlerSettings, DEFAULT_SETTINGS


# Known partition keys
PARTITIONS = tuple(string.ascii_lowercase) + ("0-9",)


@dataclass
class PartitionConfig:
    """Configuration for one directory partition"""
    key: str                     # Pagination key segment, e.g. "b" or "0-9"
    base_url: str                # Site root, used for relative links
    companies_path: str          # Path of the directory listing
    output_dir: Path             # Where CSV, checkpoint and log files go

    def listing_url(self, page: int) -> str:
        """URL of listing page number `page`."""
        return f"{self.base_url}{self.companies_path}/{self.key}-{page}"

    def absolute_url(self, href: str) -> str:
        """Resolve a link found on a listing page."""
        if href.startswith("http"):
            return href
        return f"{self.base_url}{href}"

    @property
    def output_file(self) -> Path:
        return self.output_dir / f"output_{self.key}.csv"

    @property
    def checkpoint_file(self) -> Path:
        return self.output_dir / f"progress_{self.key}.json"


def list_partitions() -> list[str]:
    """List all known partition keys."""
    return list(PARTITIONS)


def get_partition_config(
    key: str,
    output_dir: str = "data",
    settings: Optional[CrawlerSettings] = None
) -> PartitionConfig:
    """
    Get configuration for a partition.

    Args:
        key: Partition key (case-insensitive), e.g. "b" or "0-9"
        output_dir: Directory for output files
        settings: Crawler settings providing the site URLs

    Returns:
        PartitionConfig for the partition

    Raises:
        ValueError: If the partition key is unknown
    """
    settings = settings or DEFAULT_SETTINGS
    normalized = key.strip().lower()
    if normalized not in PARTITIONS:
        raise ValueError(f"Unknown partition: {key!r}. Expected one of: {', '.join(PARTITIONS)}")

    return PartitionConfig(
        key=normalized,
        base_url=settings.base_url.rstrip("/"),
        companies_path=settings.companies_path,
        output_dir=Path(output_dir),
    )
