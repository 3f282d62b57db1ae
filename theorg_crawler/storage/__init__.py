"""Storage modules for TheOrg Crawler."""

from theorg_crawler.storage.checkpoint import CheckpointError, Ledger
from theorg_crawler.storage.exporter import CSV_HEADER, CsvRecordSink

__all__ = [
    "CheckpointError",
    "Ledger",
    "CSV_HEADER",
    "CsvRecordSink",
]
