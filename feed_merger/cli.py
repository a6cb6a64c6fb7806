"""Command-line entry point: merge feeds and print the result."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from feed_merger.config import load_config
from feed_merger.errors import NoSourcesError
from feed_merger.pipeline import run_merge

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="feed-merger", description="Merge RSS, Atom and JSON feeds into one feed.")
    p.add_argument("urls", nargs="*", metavar="URL", help="feed or web page URLs, in priority order")
    p.add_argument("--format", "-f", default="rss", help="rss (default), json or jsonfeed")
    p.add_argument("--request-url", default=None, help="public URL of the merged feed")
    p.add_argument("--config", "-c", default=None, help="YAML config file")
    p.add_argument("--output", "-o", default=None, help="write to this file instead of stdout")
    p.add_argument("--verbose", "-v", action="store_true")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    cfg = load_config(args.config)
    try:
        rendered = asyncio.run(run_merge(args.urls, request_url=args.request_url, fmt=args.format, cfg=cfg))
    except NoSourcesError as exc:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return 2

    if args.output:
        Path(args.output).write_text(rendered.body, encoding="utf-8")
        logger.info("Wrote %s (%s)", args.output, rendered.content_type)
    else:
        sys.stdout.write(rendered.body)
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
