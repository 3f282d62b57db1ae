"""
Listing page HTML parser.

Extracts the ordered list of companies (display name and detail page
link) from a paginated directory page.
"""

from typing import Callable, Optional

from theorg_crawler.config import CrawlerSettings, DEFAULT_SETTINGS
from theorg_crawler.models import Company
from theorg_crawler.parsers.base import BaseParser


class ListingParser(BaseParser):
    """Parser for directory listing pages."""

    def __init__(
        self,
        resolve_url: Callable[[str], str],
        settings: Optional[CrawlerSettings] = None
    ):
        """
        Args:
            resolve_url: Turns a link found on the page into an absolute URL
            settings: Crawler settings providing the selector and dedup key
        """
        self.resolve_url = resolve_url
        self.settings = settings or DEFAULT_SETTINGS

    def extract_companies(self, html: str) -> list[Company]:
        """
        Parse the companies listed on a page, in page order.

        Entries without a name or link are ignored. When the same identity
        appears twice on one page only the first entry is kept.

        Args:
            html: Raw HTML of the listing page

        Returns:
            List of Company objects (empty when the page lists nothing)
        """
        soup = self.make_soup(html)
        companies = []
        seen = set()

        for link in soup.select(self.settings.listing_selector):
            name = self.get_text_safe(link)
            href = self.get_href(link)
            if not name or not href:
                continue

            url = self.resolve_url(href)
            identity = url if self.settings.dedup_by == "url" else name
            if identity in seen:
                continue
            seen.add(identity)
            companies.append(Company(name=name, url=url, identity=identity))

        return companies
