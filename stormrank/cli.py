"""
stormrank Command Line Interface (CLI)
======================================

Run it like:

    python -m stormrank.cli --data "path/to/StormData.csv.bz2"

It loads the dataset once, runs the pipeline and prints:
- the top event type per region by economic loss (dollars)
- the top event type per region by composite health score
- the diagnostics (invalid exponent share, PC1 variance share, ...)

The CLI DOES NOT modify the dataset file.
"""

from __future__ import annotations
import argparse
import logging
import os
import sys

import structlog

from .config import PipelineConfig
from .errors import StormRankError
from .exponents import DEFAULT_EXPONENT_TABLE
from .export import export_csv, export_json, format_table
from .loader import load_storm_events
from .pipeline import run


def configure_logging(verbose: bool = False, json_logs: bool = False) -> None:
    logging.basicConfig(format="%(message)s", stream=sys.stderr,
                        level=logging.DEBUG if verbose else logging.INFO)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="stormrank", description="Rank storm event types per region")
    ap.add_argument("--data", required=True, help="Path to the StormData export (.csv, .csv.bz2, .xlsx)")
    ap.add_argument("--variance-threshold", type=float, default=0.95,
                    help="Minimum variance share of the first principal component")
    ap.add_argument("--valid-codes", nargs="*", default=None, metavar="CODE",
                    help="Accepted damage exponent codes (default: '' 0 H K M B)")
    ap.add_argument("--max-invalid-fraction", type=float, default=0.01,
                    help="Share of invalid-exponent records tolerated (negative disables)")
    ap.add_argument("--strict", action="store_true", help="Fail when the invalid share is exceeded")
    ap.add_argument("--top", type=int, default=20, help="Rows to print per ranking")
    ap.add_argument("--export-csv", metavar="DIR", help="Write economic.csv and health.csv into DIR")
    ap.add_argument("--export-json", metavar="PATH", help="Write rankings and diagnostics as JSON")
    ap.add_argument("--verbose", action="store_true")
    ap.add_argument("--json-logs", action="store_true")
    return ap


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    codes = DEFAULT_EXPONENT_TABLE.keys() if args.valid_codes is None else args.valid_codes
    max_invalid = args.max_invalid_fraction if args.max_invalid_fraction >= 0 else None
    return PipelineConfig(
        variance_threshold=args.variance_threshold,
        valid_exponent_codes=frozenset(codes),
        max_invalid_fraction=max_invalid,
        strict_exponents=args.strict,
    )


def main(argv=None) -> int:
    """Entry point for the stormrank CLI."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose, args.json_logs)

    try:
        config = config_from_args(args)
        print("Loading dataset...")
        events = load_storm_events(args.data)
        print(f"Loaded {len(events)} events.")
        result = run(events, config)
    except (StormRankError, ValueError, KeyError, OSError) as e:
        print(f"Error: {e}")
        return 1

    print("\nEconomic loss (USD), top event type per region:")
    print(format_table(result.economic, args.top))
    print("\nHealth impact (composite score), top event type per region:")
    print(format_table(result.health, args.top))

    d = result.diagnostics
    print("\nDiagnostics:")
    print(f"  records={d.n_records} invalid_exponent={d.n_invalid_exponent} ({d.invalid_exponent_fraction:.4%})")
    print(f"  PC1 explained variance={d.explained_variance:.4f}")
    print(f"  regions missing: economic={d.economic_regions_missing} health={d.health_regions_missing}")

    if args.export_csv:
        os.makedirs(args.export_csv, exist_ok=True)
        export_csv(result.economic, os.path.join(args.export_csv, "economic.csv"))
        export_csv(result.health, os.path.join(args.export_csv, "health.csv"))
        print(f"Exported CSV to {args.export_csv}")
    if args.export_json:
        export_json(result, args.export_json)
        print(f"Exported JSON to {args.export_json}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
