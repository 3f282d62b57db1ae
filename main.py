#!/usr/bin/env python3
"""
TheOrg Company Directory Crawler - Entry Point

Crawls one partition of https://theorg.com/companies and records each
company's homepage URL to a CSV file, resuming from the last checkpoint.

Usage:
    python main.py <partition> [options]

Examples:
    python main.py b
    python main.py 0-9 --concurrency 5
    python main.py --list-partitions

For more options:
    python main.py --help
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from theorg_crawler.crawler import main

if __name__ == "__main__":
    main()
