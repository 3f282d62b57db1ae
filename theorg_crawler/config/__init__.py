"""Configuration module for TheOrg Crawler."""

from theorg_crawler.config.settings import CrawlerSettings, DEFAULT_SETTINGS
from theorg_crawler.config.partitions import (
    PartitionConfig,
    PARTITIONS,
    get_partition_config,
    list_partitions,
)

__all__ = [
    "CrawlerSettings",
    "DEFAULT_SETTINGS",
    "PartitionConfig",
    "PARTITIONS",
    "get_partition_config",
    "list_partitions",
]
