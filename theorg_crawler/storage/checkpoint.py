"""
Checkpoint ledger for crawler resumability.

Tracks the next listing page to fetch and the identities of companies that
already have a row in the output CSV. The ledger is saved after every
completed group of companies so an interrupted crawl resumes where it
stopped without fetching finished companies again.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterable

from theorg_crawler.utils.logging import get_logger

logger = get_logger()


class CheckpointError(ValueError):
    """Checkpoint file exists but does not have the expected shape."""


class Ledger:
    """
    Cursor plus processed-company set, persisted as JSON.

    File layout (kept compatible with existing progress files):
        {"lastPageNum": 4, "processedCompanies": ["Acme", "Beta Inc", ...]}

    A company identity is marked processed only after its row has been
    appended to the output. Single writer: one crawler process per file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.cursor = 0
        # dict keeps insertion order for the saved list
        self._processed: Dict[str, None] = {}

    def load(self) -> "Ledger":
        """
        Load state from disk.

        A missing file starts a fresh crawl. An unreadable or malformed file
        is logged as a warning and also starts a fresh crawl.

        Returns:
            self, for chaining
        """
        self.cursor = 0
        self._processed = {}

        if not self.path.exists():
            logger.warning(f"No checkpoint at {self.path}, starting from scratch")
            return self

        try:
            data = self._read_json(self.path)
            cursor, processed = self._parse(data)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read checkpoint {self.path} ({e}), starting from scratch.")
            return self

        self.cursor = cursor
        self._processed = dict.fromkeys(processed)
        logger.info(
            f"Loaded checkpoint: page {self.resume_page}, "
            f"{len(self._processed)} companies already processed"
        )
        return self

    @property
    def resume_page(self) -> int:
        """First listing page to fetch."""
        return self.cursor if self.cursor > 0 else 1

    @property
    def processed(self) -> list[str]:
        return list(self._processed)

    def __len__(self) -> int:
        return len(self._processed)

    def is_processed(self, identity: str) -> bool:
        return identity in self._processed

    def mark_processed(self, identity: str) -> None:
        self._processed[identity] = None

    def save(self, cursor: int) -> None:
        """Record `cursor` and overwrite the checkpoint file with the full state."""
        self.cursor = cursor
        self._write_json_atomic(self.path, {
            "lastPageNum": cursor,
            "processedCompanies": self.processed,
        })
        logger.debug(f"Checkpoint saved: page {cursor}, {len(self._processed)} processed")

    @staticmethod
    def _parse(data) -> tuple[int, Iterable[str]]:
        if not isinstance(data, dict):
            raise CheckpointError("expected a JSON object")

        cursor = data.get("lastPageNum") or 0
        if isinstance(cursor, bool) or not isinstance(cursor, int) or cursor < 0:
            raise CheckpointError(f"invalid lastPageNum: {cursor!r}")

        processed = data.get("processedCompanies") or []
        if not isinstance(processed, list) or not all(isinstance(p, str) for p in processed):
            raise CheckpointError("processedCompanies must be a list of strings")

        return cursor, processed

    def _read_json(self, path: Path) -> Dict:
        """Read data from JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _write_json_atomic(self, path: Path, data: Dict) -> None:
        """Write JSON to a temp file in the same directory, then swap it in."""
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                'w', encoding='utf-8', dir=str(path.parent), delete=False, suffix='.tmp'
            ) as tmp:
                tmp_name = tmp.name
                json.dump(data, tmp, ensure_ascii=False)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            # previous checkpoint stays in place; drop the partial temp file
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
