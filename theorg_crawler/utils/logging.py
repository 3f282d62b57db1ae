"""
Logging configuration for TheOrg Crawler.

Console output goes through rich, on the same Console the progress bars
draw on, so log lines print above a live bar instead of tearing it. The
per-partition log file keeps plain timestamped lines at DEBUG level.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


LOGGER_NAME = "theorg_crawler"

# Shared by log output, phase headers and progress bars
console = Console()

FILE_FORMAT = '%(asctime)s | %(levelname)-8s | %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

_logger: Optional[logging.Logger] = None


def get_logger() -> logging.Logger:
    """Get the crawler logger instance."""
    global _logger
    if _logger is None:
        _logger = logging.getLogger(LOGGER_NAME)
    return _logger


def log_file_for(output_dir: Path, partition: str) -> Path:
    """Log file of one partition; several crawler processes may share output_dir."""
    return output_dir / f"crawler_{partition}.log"


def setup_logging(output_dir: Path, partition: str, verbose: bool = False) -> logging.Logger:
    """
    Attach a rich console handler and a per-partition file handler.

    Args:
        output_dir: Directory where the log file will be created
        partition: Partition key, used in the log file name
        verbose: If True, show DEBUG lines on the console

    Returns:
        Configured logger instance
    """
    logger = get_logger()

    console_handler = RichHandler(
        console=console,
        level=logging.DEBUG if verbose else logging.INFO,
        show_path=False,
        log_time_format=DATE_FORMAT,
    )
    console_handler.setFormatter(logging.Formatter('%(message)s'))

    log_file = log_file_for(output_dir, partition)
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))

    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)

    logger.info(f"Logging initialized. Log file: {log_file}")

    return logger
