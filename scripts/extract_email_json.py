#!/usr/bin/env python3
"""
Extract the JSON payload of an email from the command line.

Usage:
  python scripts/extract_email_json.py <path-or-url>

Prints the JSON value to stdout. Exit codes: 0 found, 1 no JSON located,
2 any other classified failure (bad input, unreachable or malformed email).
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from rich.console import Console
from rich.markup import escape

from email_json.models.source import parse_source
from email_json.services.errors import ExtractionError, JSONNotFoundError
from email_json.services.extraction_service import ExtractionService
from email_json.services.http_client import HttpClient, build_async_client
from email_json.utils.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)

console = Console()
err_console = Console(stderr=True)


async def extract(raw_source: str) -> int:
    """Run one extraction and print the outcome."""
    async with build_async_client() as client:
        service = ExtractionService(HttpClient(client))

        try:
            source = parse_source(raw_source)
            result = await service.extract(source)
        except JSONNotFoundError as e:
            err_console.print(f"[yellow]Not found:[/yellow] {escape(e.message)}")
            return 1
        except ExtractionError as e:
            err_console.print(f"[red]{e.error_code}:[/red] {escape(e.message)}")
            return 2

    err_console.print(
        f"[green]Found[/green] via {result.strategy.value}"
        + (f" ({escape(result.origin)})" if result.origin else "")
    )
    console.print_json(data=result.value)
    return 0


def main() -> int:
    if len(sys.argv) != 2 or sys.argv[1] in ("-h", "--help"):
        print(__doc__.strip())
        return 2
    return asyncio.run(extract(sys.argv[1]))


if __name__ == "__main__":
    sys.exit(main())
