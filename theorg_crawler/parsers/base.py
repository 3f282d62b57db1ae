"""
Base parser utilities for HTML parsing.

Provides common helper methods used across all parsers.
"""

from typing import Optional
from bs4 import BeautifulSoup, Tag


class BaseParser:
    """Base class with common parsing utilities."""

    @staticmethod
    def make_soup(html: str) -> BeautifulSoup:
        return BeautifulSoup(html, 'html.parser')

    @staticmethod
    def get_text_safe(element: Optional[Tag], default: str = "") -> str:
        """Safely extract text from an element."""
        if element is None:
            return default
        return element.get_text(strip=True)

    @staticmethod
    def get_href(element: Optional[Tag]) -> str:
        """Return the stripped href of an anchor, or an empty string."""
        if element is None:
            return ""
        href = element.get("href")
        if isinstance(href, list):
            href = " ".join(href)
        return (href or "").strip()
