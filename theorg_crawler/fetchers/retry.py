"""
Retry policies.

Two policies are used on purpose and kept apart:

- ``unbounded_transient_retry`` for connectivity problems and 5xx responses,
  where the crawler waits for the network or the site to come back.
- ``capped_retry`` for per-company work, where a company that keeps failing
  is given up on after a few attempts.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry policy. `max_retries=None` never gives up."""

    name: str
    delay: float
    max_retries: Optional[int] = None

    @property
    def is_unbounded(self) -> bool:
        return self.max_retries is None

    def allows(self, retry_number: int) -> bool:
        """Whether retry number `retry_number` (1-based) may be attempted."""
        return self.max_retries is None or retry_number <= self.max_retries

    def describe(self, retry_number: int) -> str:
        """Human-readable retry counter for log lines, e.g. '2/3' or '7/unbounded'."""
        limit = "unbounded" if self.max_retries is None else str(self.max_retries)
        return f"{retry_number}/{limit}"


def unbounded_transient_retry(delay: float = 30, max_retries: Optional[int] = None) -> RetryPolicy:
    """Policy for transient network failures. Unbounded unless a ceiling is given."""
    return RetryPolicy(name="unbounded_transient_retry", delay=delay, max_retries=max_retries)


def capped_retry(max_retries: int = 3, delay: float = 30) -> RetryPolicy:
    """Policy for per-item work: at most `max_retries` retries after the first attempt."""
    return RetryPolicy(name="capped_retry", delay=delay, max_retries=max_retries)
