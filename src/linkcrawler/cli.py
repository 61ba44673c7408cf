"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from linkcrawler.core import (
    ConfigurationError,
    CrawlConfig,
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    crawl,
)

DEFAULT_STORAGE_FOLDER = "."
DEFAULT_MAX_LINKS = 5
DEFAULT_DEPTH = 2


def non_negative_int(value: str) -> int:
    """argparse type for integers >= 0."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkcrawler",
        description="Fetch a page, save it, and recursively fetch the pages it links to.",
    )
    parser.add_argument(
        "storage_folder",
        nargs="?",
        default=DEFAULT_STORAGE_FOLDER,
        help=f"Folder to write fetched pages to (default: {DEFAULT_STORAGE_FOLDER})",
    )
    parser.add_argument(
        "max_links_per_page",
        nargs="?",
        type=non_negative_int,
        default=DEFAULT_MAX_LINKS,
        help=f"Maximum links followed from each page (default: {DEFAULT_MAX_LINKS})",
    )
    parser.add_argument("url", nargs="?", help="Start URL (e.g. https://example.com)")
    parser.add_argument(
        "depth",
        nargs="?",
        type=non_negative_int,
        default=DEFAULT_DEPTH,
        help=f"Number of levels to fetch (default: {DEFAULT_DEPTH})",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument("--verbose", action="store_true", help="Show fetch and save progress")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.url:
        parser.error("the following argument is required: url")

    try:
        config = CrawlConfig(
            storage_folder=args.storage_folder,
            max_links_per_page=args.max_links_per_page,
            timeout_s=args.timeout,
            user_agent=args.user_agent,
            verbose=args.verbose,
        )
        crawl(args.url, args.depth, config)
    except ConfigurationError as e:
        parser.error(str(e))

    if args.verbose:
        sys.stderr.write("Crawling completed.\n")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
