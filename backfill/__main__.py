"""CLI entry point for field migrations.

Usage:
    python -m backfill --base-url http://localhost:8983/solr/products
    python -m backfill --config products.yaml --dry-run
    python -m backfill --config products.yaml --batch-size 25 --report-json run.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from backfill.lib.config import DEFAULT_BASE_URL, MigrationConfig, load_config
from backfill.lib.errors import ConfigurationError
from backfill.lib.logging import setup_logging
from backfill.lib.migration import FieldMigration
from backfill.lib.report import EXIT_CONFIG, exit_code, format_report, write_report_json

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="multivalue-backfill",
        description="Copy a single-valued field into a multi-valued field on every document",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Migrate with defaults (local store, category -> categories)
    python -m backfill

    # Settings from YAML, overriding the write batch size
    python -m backfill --config products.yaml --batch-size 25

    # Count what would be written without touching the store
    python -m backfill --config products.yaml --dry-run
        """,
    )
    parser.add_argument("--config", help="Path to a YAML settings file")
    parser.add_argument("--base-url", help=f"Store collection URL (default: {DEFAULT_BASE_URL})")
    parser.add_argument("--source-field", help="Single-valued field to read")
    parser.add_argument("--target-field", help="Multi-valued field to set")
    parser.add_argument("--unique-key", help="Document key field used for sorting and updates (default: id)")
    parser.add_argument("--page-size", type=int, help="Records per fetch page (default: 20)")
    parser.add_argument(
        "--batch-size",
        type=int,
        dest="update_batch_size",
        help="Instructions per update request (default: 10)",
    )
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds (default: 30)")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch and transform only; send no updates or commit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "--json-log",
        action="store_true",
        help="Output logs in JSON format (for log aggregation systems)",
    )
    parser.add_argument("--log-file", help="Write logs to a file in addition to console")
    parser.add_argument("--report-json", help="Write the final report as JSON to this path")
    return parser


def resolve_config(args: argparse.Namespace) -> MigrationConfig:
    """Merge the optional YAML file with command-line overrides."""
    base = load_config(args.config) if args.config else MigrationConfig()
    return base.with_overrides(
        base_url=args.base_url,
        source_field=args.source_field,
        target_field=args.target_field,
        unique_key=args.unique_key,
        page_size=args.page_size,
        update_batch_size=args.update_batch_size,
        timeout=args.timeout,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, json_format=args.json_log, log_file=args.log_file)

    try:
        config = resolve_config(args)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_CONFIG

    result = FieldMigration(config).run(dry_run=args.dry_run)

    print(format_report(result))
    if args.report_json:
        path = write_report_json(result, args.report_json)
        logger.info("Wrote JSON report to %s", path)

    return exit_code(result)


if __name__ == "__main__":
    sys.exit(main())
