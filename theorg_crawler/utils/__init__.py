"""Utility helpers for TheOrg Crawler."""

from theorg_crawler.utils.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
