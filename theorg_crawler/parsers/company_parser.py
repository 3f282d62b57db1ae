"""Company detail page HTML parser."""

from typing import Optional

from theorg_crawler.config import CrawlerSettings, DEFAULT_SETTINGS
from theorg_crawler.parsers.base import BaseParser


class CompanyParser(BaseParser):
    """Parser for a company's detail page."""

    def __init__(self, settings: Optional[CrawlerSettings] = None):
        self.settings = settings or DEFAULT_SETTINGS

    def extract_homepage(self, html: str) -> Optional[str]:
        """Return the company's external homepage link, or None if the page has none."""
        soup = self.make_soup(html)
        link = soup.select_one(self.settings.homepage_selector)
        return self.get_href(link) or None
