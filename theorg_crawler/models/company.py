"""
Company-related data models.

Contains dataclasses for companies discovered on listing pages and
the output rows written for them.
"""

from dataclasses import dataclass

# Homepage value recorded when a company's detail page returns 404
NOT_FOUND = "NOT_FOUND"


@dataclass(frozen=True)
class Company:
    """
    A company entry from a directory listing page.

    `identity` is the key used to decide whether the company was already
    processed. It is the display name unless the crawler is configured to
    dedup by detail URL.
    """

    name: str
    url: str
    identity: str = ""

    def __post_init__(self):
        if not self.identity:
            object.__setattr__(self, "identity", self.name)


@dataclass
class CompanyRecord:
    """One row of the output CSV."""

    source_url: str
    company_name: str
    homepage_url: str = ""

    def as_row(self) -> list[str]:
        return [self.source_url, self.company_name, self.homepage_url]
