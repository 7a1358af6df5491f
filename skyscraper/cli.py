"""Command-line entry point: scrape URLs and print the outcome as JSON.

Examples:
  skyscraper https://example.com -s "title::text" -s "h1"
  skyscraper https://example.com --engine soup -s "a::attr(href)" --all
  skyscraper https://a.test https://b.test --engine chromium --delay 0 -s "main::html"
"""

import argparse
import asyncio
import logging
import re
import sys

from .config import options_from_env
from .core import Skyscraper
from .exceptions import SkyscraperError
from .types import BatchOutcome, Engine, SelectorSpec

_SELECTOR_ARG = re.compile(r"^(?P<selector>.+?)(?:::(?P<mode>text|html|attr\((?P<attribute>[^)]+)\)))?$")


def parse_selector(value: str, multiple: bool = False) -> SelectorSpec:
    """Parse ``SELECTOR[::text|::html|::attr(NAME)]`` into a SelectorSpec."""
    match = _SELECTOR_ARG.match(value.strip())
    if not match:
        raise argparse.ArgumentTypeError(f"Invalid selector: {value!r}")
    mode = match.group("mode") or ""
    return SelectorSpec(
        selector=match.group("selector").strip(),
        text=mode == "text",
        html=mode == "html",
        attribute=match.group("attribute"),
        multiple=multiple,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skyscraper",
        description="Scrape pages with a browser or HTML parser and print JSON results",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__.split("Examples:", 1)[1],
    )
    parser.add_argument("urls", nargs="+", help="URLs to scrape, in order")
    parser.add_argument(
        "-s",
        "--selector",
        dest="selectors",
        action="append",
        default=[],
        help="CSS selector, optionally suffixed with ::text, ::html or ::attr(NAME)",
    )
    parser.add_argument("--all", action="store_true", help="Extract every match instead of the first")
    parser.add_argument("--engine", choices=[e.value for e in Engine], help="Engine to use")
    parser.add_argument(
        "--browser-type",
        choices=["chromium", "firefox", "webkit"],
        help="Browser for the playwright engine",
    )
    parser.add_argument("--timeout", type=int, help="Navigation/request timeout in ms")
    parser.add_argument("--delay", type=int, help="Pause after each URL in ms")
    parser.add_argument("--no-headless", action="store_true", help="Show the browser window")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log scrape events")
    return parser


async def run(urls: list[str], selectors: list[SelectorSpec], options: dict) -> BatchOutcome:
    async with Skyscraper(options) as scraper:
        return await scraper.scrape_many(urls=urls, selectors=selectors)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    try:
        selectors = [parse_selector(s, multiple=args.all) for s in args.selectors]
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    options = options_from_env()
    flags = {
        "engine": args.engine,
        "browser_type": args.browser_type,
        "timeout": args.timeout,
        "delay": args.delay,
    }
    options.update({k: v for k, v in flags.items() if v is not None})
    if args.no_headless:
        options["headless"] = False

    try:
        outcome = asyncio.run(run(args.urls, selectors, options))
    except SkyscraperError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    print(outcome.model_dump_json(indent=2))
    failed = outcome.errors or any(not r.success for r in outcome.results)
    return 1 if failed else 0
