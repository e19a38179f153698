"""Console wizard entry point: `python -m udyamform.client`."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from udyamform.client.api_client import FormApiClient, SchemaLoadError
from udyamform.client.form_controller import FormController
from udyamform.client.pin_lookup import PinLookupClient
from udyamform.client.wizard_cli import ConsoleWizard
from udyamform.config import load_config
from udyamform.logging_setup import configure_logging

logger = logging.getLogger(__name__)

EXIT_SUBMITTED = 0
EXIT_ABANDONED = 1
EXIT_SCHEMA_UNAVAILABLE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="udyamform.client", description="Fill the registration form step by step.")
    parser.add_argument(
        "--base-url",
        default=os.environ.get("API_BASE_URL", "http://localhost:8000"),
        help="Base URL of the registration form API",
    )
    parser.add_argument("--schema-file", default=None, help="Local schema file used when the API is unreachable")
    parser.add_argument("--pin-lookup-url", default=None, help="Override the PIN lookup API base URL")
    parser.add_argument("--log-level", default="WARNING", help="Log level for client diagnostics")
    return parser


async def run_wizard(
    base_url: str,
    pin_lookup_url: Optional[str] = None,
    schema_file: Optional[Path] = None,
) -> int:
    config = load_config()
    api = FormApiClient(base_url, timeout=config.pin_lookup.timeout_seconds)
    pins = PinLookupClient(pin_lookup_url or config.pin_lookup.base_url, timeout=config.pin_lookup.timeout_seconds)
    try:
        try:
            schema = await api.fetch_schema(schema_file)
        except SchemaLoadError as exc:
            print(f"Could not load the form: {exc}", file=sys.stderr)
            return EXIT_SCHEMA_UNAVAILABLE
        controller = FormController(schema, submitter=api, pin_lookup=pins)
        outcome = await ConsoleWizard(controller).run()
        await controller.wait_for_lookups()
        return EXIT_SUBMITTED if outcome is not None and outcome.ok else EXIT_ABANDONED
    finally:
        await api.aclose()
        await pins.aclose()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level.upper(), stream="ext://sys.stderr")
    try:
        return asyncio.run(run_wizard(
            args.base_url,
            args.pin_lookup_url,
            Path(args.schema_file) if args.schema_file else None,
        ))
    except (KeyboardInterrupt, EOFError):
        print("", file=sys.stderr)
        return EXIT_ABANDONED


if __name__ == "__main__":
    sys.exit(main())
