"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import requests

from linkcrawler.config import DEFAULT_GET_TIMEOUT_S, CrawlerSettings, load_settings
from linkcrawler.core import DEFAULT_MAX_LINKS, CrawlResult, crawl, extract_origin
from linkcrawler.fetch import http_get

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(verbose: bool, level_name: Optional[str] = None) -> None:
    """Send log records to stderr; INFO when verbose, WARNING otherwise."""
    level = logging.INFO if verbose else logging.WARNING
    if level_name:
        level = logging.getLevelName(level_name.upper())
        if not isinstance(level, int):
            level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def print_summary(result: CrawlResult) -> None:
    """Print crawl summary to stderr."""
    sys.stderr.write("=" * 50 + "\n")
    sys.stderr.write("CRAWL SUMMARY\n")
    sys.stderr.write("=" * 50 + "\n\n")

    sys.stderr.write(f"Total links crawled:    {result.total_links_crawled}\n")
    sys.stderr.write(f"Links discovered:       {len(result.links_discovered)}\n")
    sys.stderr.write(f"Domains discovered:     {len(result.domains_discovered)}\n\n")

    for domain in sorted(result.domains_discovered):
        sys.stderr.write(f"  {domain}\n")

    sys.stderr.write("\n")


def generate_output_path(start_url: str) -> Path:
    """Generate output path: crawls/{hostname}_{datetime}.json"""
    hostname = extract_origin(start_url) or "unknown"
    # Sanitize hostname for filename (replace dots with underscores)
    hostname_safe = hostname.replace(".", "_").replace(":", "_")
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

    crawls_dir = Path("crawls")
    crawls_dir.mkdir(exist_ok=True)

    return crawls_dir / f"{hostname_safe}_{timestamp}.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="linkcrawler",
        description="Breadth-first link crawler with bounded concurrency.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    crawl_parser = subparsers.add_parser("crawl", help="Crawl links starting from a URL")
    crawl_parser.add_argument("start_url", help="Start URL (e.g. https://example.com)")
    crawl_parser.add_argument(
        "--max-links", type=int, default=DEFAULT_MAX_LINKS,
        help=f"Maximum pages to fetch (default: {DEFAULT_MAX_LINKS})",
    )
    crawl_parser.add_argument("--fanout", type=int, help="Pages fetched concurrently per round")
    crawl_parser.add_argument("--workers", type=int, help="Thread pool size (default: same as fanout)")
    crawl_parser.add_argument("--timeout", type=float, help="Request timeout in seconds")
    crawl_parser.add_argument("--user-agent", help="User-Agent header")
    crawl_parser.add_argument("--out", help="Output file path, or '-' for stdout (default: auto-generated in crawls/)")
    crawl_parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    crawl_parser.add_argument("--verbose", action="store_true", help="Show progress and summary")

    get_parser = subparsers.add_parser("get", help="Perform a single HTTP GET")
    get_parser.add_argument("url", help="URL to request")
    get_parser.add_argument(
        "--timeout", type=float,
        help=f"Request timeout in seconds (default: LINKCRAWLER_TIMEOUT, else {DEFAULT_GET_TIMEOUT_S:g})",
    )
    get_parser.add_argument("--user-agent", help="User-Agent header")
    get_parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    get_parser.add_argument("--verbose", action="store_true", help="Show request logging")

    return parser


def _apply_overrides(settings: CrawlerSettings, args: argparse.Namespace) -> CrawlerSettings:
    if getattr(args, "fanout", None) is not None:
        settings.fanout_limit = args.fanout
    if getattr(args, "workers", None) is not None:
        settings.max_workers = args.workers
    if getattr(args, "timeout", None) is not None:
        settings.timeout_s = args.timeout
        settings.timeout_configured = True
    if args.user_agent:
        settings.user_agent = args.user_agent
    return settings


def run_crawl(args: argparse.Namespace, settings: CrawlerSettings) -> int:
    result = crawl(args.start_url, args.max_links, settings=settings)

    if args.verbose:
        print_summary(result)

    json_text = json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None)

    if args.out == "-":
        print(json_text)
    else:
        output_path = Path(args.out) if args.out else generate_output_path(args.start_url)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(json_text, encoding="utf-8")
        if args.verbose:
            sys.stderr.write(f"Results written to: {output_path}\n")

    return 0


def run_get(args: argparse.Namespace, settings: CrawlerSettings) -> int:
    try:
        timeout_s = settings.timeout_s if settings.timeout_configured else DEFAULT_GET_TIMEOUT_S
        result = http_get(args.url, timeout_s=timeout_s, user_agent=settings.user_agent)
    except requests.RequestException as e:
        sys.stderr.write(f"Request failed: {e}\n")
        return 1

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the crawler CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = _apply_overrides(load_settings(), args)
    except ValueError as e:
        parser.error(str(e))

    configure_logging(args.verbose, settings.log_level)

    try:
        if args.command == "crawl":
            return run_crawl(args, settings)
        return run_get(args, settings)
    except ValueError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
