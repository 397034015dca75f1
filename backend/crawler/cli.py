#!/usr/bin/env python3
"""
Command line entry point for a single catalog crawl.

Usage:
    catalog-crawl <listing-url> [--batch-size N] [--output-dir DIR] [--headless]

Examples:
    catalog-crawl "https://www.takealot.com/all?qsearch=kettle"
    catalog-crawl "https://www.takealot.com/all?qsearch=kettle" --batch-size 1 --headless
"""

import asyncio
import argparse
import logging
import sys
from pathlib import Path

from .base import ExportError
from .config import CrawlSettings
from .export import export_to_excel
from .manager import CrawlManager
from .progress import ProgressReporter

logger = logging.getLogger('crawler.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='catalog-crawl',
        description='Crawl a product listing page and export it to Excel',
    )
    parser.add_argument('url', nargs='?', help='Listing page URL')
    parser.add_argument('--batch-size', type=int, default=1,
                        help='Detail pages fetched concurrently (default: 1)')
    parser.add_argument('--output-dir', type=Path, default=Path.cwd(),
                        help='Directory for the Excel file (default: current directory)')
    parser.add_argument('--headless', action='store_true',
                        help='Run the browser without a window')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser


def run(url: str, settings: CrawlSettings, output_dir: Path) -> int:
    """Crawl url, export the result and print a summary. Returns the exit code."""
    reporter = ProgressReporter()
    reporter.subscribe(lambda percent: logger.info(f"Progress: {percent}%"))

    manager = CrawlManager(settings, reporter=reporter)
    print("Starting scraper...")
    products = asyncio.run(manager.crawl(url))

    if not products:
        print("No products found or scraping failed.")
        return 1

    print(f"Scraping completed. Found {len(products)} products.")
    try:
        excel_file = export_to_excel(products, url, output_dir)
    except ExportError:
        print("Failed to create Excel file.")
        return 1

    print("\nScraping Summary:")
    print("----------------")
    print(f"Total Products: {len(products)}")
    print(f"Degraded Details: {manager.result.degraded}")
    print(f"Excel File: {excel_file}")
    return 0


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if not args.url:
        print("Please provide a URL as an argument")
        return 1

    try:
        settings = CrawlSettings(batch_size=args.batch_size, headless=args.headless)
    except ValueError as e:
        print(f"Invalid option: {e}")
        return 1

    return run(args.url, settings, args.output_dir)


if __name__ == '__main__':
    sys.exit(main())
