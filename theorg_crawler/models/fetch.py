"""
Fetch outcome model.

A fetch ends in exactly one of three terminal states. Transient failures
never show up here: the fetcher retries them until one of these is reached.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FetchStatus(str, Enum):
    CONTENT = "content"
    NOT_FOUND = "not_found"
    FAILURE = "failure"


@dataclass
class FetchResult:
    """Terminal outcome of a resilient fetch."""

    status: FetchStatus
    body: str = ""
    status_code: Optional[int] = None
    error: str = ""

    @classmethod
    def content(cls, body: str, status_code: int = 200) -> "FetchResult":
        return cls(FetchStatus.CONTENT, body=body, status_code=status_code)

    @classmethod
    def not_found(cls, status_code: int = 404) -> "FetchResult":
        return cls(FetchStatus.NOT_FOUND, status_code=status_code)

    @classmethod
    def failure(cls, error: str, status_code: Optional[int] = None) -> "FetchResult":
        return cls(FetchStatus.FAILURE, status_code=status_code, error=error)

    @property
    def has_content(self) -> bool:
        """True for a successful response with a non-blank body."""
        return self.status == FetchStatus.CONTENT and bool(self.body.strip())
