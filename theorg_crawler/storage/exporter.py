"""
CSV output sink for TheOrg Crawler.

Rows are appended one at a time and synced to disk before `append`
returns, so a row is never lost once the company is marked processed.
"""

import csv
import io
import os
from pathlib import Path

from theorg_crawler.models import CompanyRecord
from theorg_crawler.utils.logging import get_logger

logger = get_logger()

CSV_HEADER = ["sourceurl", "company_name", "company_homepage_url"]


class CsvRecordSink:
    """Append-only CSV file of company records."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def ensure_header(self) -> None:
        """Write the header line if the file is missing or empty."""
        if self.path.exists() and self.path.stat().st_size > 0:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._append_line(",".join(CSV_HEADER) + "\n")
        logger.info(f"Created output file {self.path}")

    def append(self, record: CompanyRecord) -> None:
        """Durably append one record. Raises OSError if the write fails."""
        self._append_line(self.encode(record))

    @staticmethod
    def encode(record: CompanyRecord) -> str:
        """Encode a record as one fully quoted CSV line."""
        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(record.as_row())
        return buf.getvalue()

    def _append_line(self, line: str) -> None:
        # Single O_APPEND write per row keeps concurrent appends from interleaving
        data = line.encode("utf-8")
        fd = os.open(self.path, os.O_CREAT | os.O_APPEND | os.O_WRONLY, 0o644)
        try:
            os.write(fd, data)
            os.fsync(fd)
        finally:
            os.close(fd)
