"""
CLI wrapper for the forecast pipeline.

Generates a sector demand forecast for one region, persists it and prints
the result.

Usage:
    sectorcast-forecast --sector agriculture --region Jaipur
    sectorcast-forecast -s healthcare -r Bengaluru --timeframe "60 days" --verbose
    sectorcast-forecast -s retail -r Mumbai --json
    sectorcast-forecast --list-regions

Exit codes:
    0  forecast committed
    1  forecast failed (kind and stage printed to stderr)
    2  invalid arguments
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from sectorcast.db.engine import close_db, create_tables, get_session_factory, init_db
from sectorcast.errors import ForecastFailed
from sectorcast.forecasting.models import ForecastRequest, Sector, Timeframe
from sectorcast.forecasting.output_formatter import OutputFormatter
from sectorcast.logging_config import setup_logging
from sectorcast.pipeline import build_pipeline, load_registry
from sectorcast.settings import get_settings

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Generate a sector demand forecast for an Indian region",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--sector", "-s",
        choices=[s.value for s in Sector],
        help="Sector to forecast",
    )
    parser.add_argument(
        "--region", "-r",
        type=str,
        help="Region name or alias (e.g. Jaipur, Bombay)",
    )
    parser.add_argument(
        "--timeframe", "-t",
        choices=[t.value for t in Timeframe],
        default=Timeframe.DAYS_30.value,
        help="Forecast horizon (default: 30 days)",
    )
    parser.add_argument("--department", type=str, default=None, help="Department focus hint")
    parser.add_argument("--category", type=str, default=None, help="Category focus hint")
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output camelCase JSON instead of formatted text",
    )
    parser.add_argument(
        "--list-regions",
        action="store_true",
        help="List known regions and exit",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Include per-item reasoning and debug logging",
    )
    return parser.parse_args(argv)


async def run_forecast(request: ForecastRequest, args: argparse.Namespace) -> int:
    settings = get_settings()
    init_db()
    if settings.database_url.startswith("sqlite"):
        await create_tables()

    pipeline = build_pipeline(settings, get_session_factory())
    formatter = OutputFormatter(use_colors=sys.stdout.isatty() and not args.json_output)
    try:
        outcome = await pipeline.orchestrator.execute(request)
    except ForecastFailed as exc:
        print(
            formatter.format_error(f"[{exc.kind}] at {exc.stage}: {exc.cause.message}"),
            file=sys.stderr,
        )
        return 1
    finally:
        await pipeline.aclose()
        await close_db()

    if args.json_output:
        print(formatter.format_json(outcome.forecast, outcome.alerts))
    else:
        print(formatter.format_text(outcome.forecast, outcome.alerts, verbose=args.verbose))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run forecast from CLI arguments."""
    args = parse_args(argv)
    settings = get_settings()
    setup_logging(
        level="DEBUG" if args.verbose else settings.log_level,
        json_format=settings.log_json,
    )

    if args.list_regions:
        for loc in load_registry(settings):
            aliases = f" (aka {', '.join(loc.aliases)})" if loc.aliases else ""
            print(f"{loc.name}, {loc.state}{aliases}")
        return 0

    if not args.sector or not args.region:
        print("Error: --sector and --region are required", file=sys.stderr)
        return 2

    try:
        request = ForecastRequest(
            sector=args.sector,
            region=args.region,
            timeframe=args.timeframe,
            department=args.department,
            category=args.category,
        )
    except ValidationError as exc:
        print(f"Error: invalid request: {exc}", file=sys.stderr)
        return 2

    return asyncio.run(run_forecast(request, args))


if __name__ == "__main__":
    sys.exit(main())
