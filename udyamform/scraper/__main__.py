"""Schema scraper entry point: `python -m udyamform.scraper [--url URL] [--out PATH]`."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from udyamform.config import load_config
from udyamform.logic.schema_store import SchemaDocumentError, parse_schema_document
from udyamform.logging_setup import configure_logging
from udyamform.scraper.browser import ScrapeError, scrape_page
from udyamform.scraper.extract import UDYAM_REGISTRATION_URL, build_schema_document

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="udyamform.scraper", description="Scrape the registration form into a schema document.")
    parser.add_argument("--url", default=UDYAM_REGISTRATION_URL, help="Registration page to scrape")
    parser.add_argument("--out", default=None, help="Output path (defaults to the configured schema path)")
    parser.add_argument("--headed", action="store_true", help="Show the browser window")
    return parser


def write_schema(doc: dict, out: Path) -> None:
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(doc, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_config()
    configure_logging(config.server.log_level, stream="ext://sys.stderr")
    out = Path(args.out) if args.out else config.schema_doc.path
    try:
        step1, step2 = scrape_page(args.url, headless=not args.headed)
    except ScrapeError as exc:
        logger.error("scrape_failed url=%s error=%s", args.url, exc)
        return 1
    doc = build_schema_document(step1, step2, source=args.url)
    try:
        parse_schema_document(doc)
    except SchemaDocumentError as exc:
        logger.error("scraped_schema_invalid error=%s", exc)
        return 1
    write_schema(doc, out)
    logger.info("schema_written path=%s steps=%d", out, len(doc["steps"]))
    return 0


if __name__ == "__main__":
    sys.exit(main())
