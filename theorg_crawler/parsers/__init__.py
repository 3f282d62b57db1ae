"""HTML parsers for TheOrg directory pages."""

from theorg_crawler.parsers.base import BaseParser
from theorg_crawler.parsers.company_parser import CompanyParser
from theorg_crawler.parsers.listing_parser import ListingParser

__all__ = [
    "BaseParser",
    "CompanyParser",
    "ListingParser",
]
