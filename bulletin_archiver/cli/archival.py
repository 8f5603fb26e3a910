# bulletin_archiver/cli/archival.py
"""
CLI commands for archival outside the API process.

Usage:
    python -m bulletin_archiver.cli.archival run
    python -m bulletin_archiver.cli.archival run --as-of "2024-01-01 00:00:00"
    python -m bulletin_archiver.cli.archival init-db
"""

import argparse
import sys
from datetime import datetime

from dotenv import load_dotenv

load_dotenv()


def build_coordinator(args):
    """Coordinator with its own gateway, independent of any running API process."""
    from bulletin_archiver.clock import ArchivalClock, FixedClock
    from bulletin_archiver.config import get_settings
    from bulletin_archiver.services.archival import ArchivalCoordinator, StorageGateway

    settings = get_settings()
    if args.as_of:
        clock = FixedClock(args.as_of, settings.ARCHIVAL_TIMEZONE)
    else:
        clock = ArchivalClock(settings.ARCHIVAL_TIMEZONE)

    return ArchivalCoordinator(StorageGateway(settings.DATABASE_URL), clock)


def cmd_run(args):
    """Archive expired announcements and calendar events once."""
    from bulletin_archiver.config import get_settings
    from bulletin_archiver.logging_config import configure_logging

    settings = get_settings()
    configure_logging(json_format=settings.LOG_FORMAT == "json", level=settings.LOG_LEVEL)

    coordinator = build_coordinator(args)
    try:
        print(f"\nArchiving expired content ({coordinator.clock.format_for_database()} {settings.ARCHIVAL_TIMEZONE})...\n")

        result = coordinator.run_archival(trigger="cli")

        for collection, counters in result.stats.items():
            print(f"{collection.value}:")
            print(f"  Processed: {counters.processed}")
            print(f"  Archived: {counters.archived}")
            print(f"  Errors: {counters.errors}")

        print(f"\nDuration: {result.duration_ms}ms")

        if result.errors:
            print("\nErrors:")
            for error in result.errors:
                print(f"  - {error}")

        if not result.success:
            sys.exit(1)
    finally:
        coordinator.gateway.close()


def cmd_init_db(args):
    """Create the announcement and calendar tables (local development only)."""
    from bulletin_archiver.database import create_db_engine, init_db

    engine = create_db_engine()
    try:
        init_db(engine)
        print("Tables created (existing tables left untouched)")
    finally:
        engine.dispose()


def _parse_as_of(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid timestamp '{value}', expected YYYY-MM-DD[ HH:MM:SS]")


def main():
    parser = argparse.ArgumentParser(
        description="Bulletin Content Archival CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Archive everything that has expired as of now
  python -m bulletin_archiver.cli.archival run

  # Archive as if it were a given local time
  python -m bulletin_archiver.cli.archival run --as-of "2024-01-01 08:00:00"

  # Create tables in a local development database
  python -m bulletin_archiver.cli.archival init-db
        """,
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # run command
    run_parser = subparsers.add_parser("run", help="Run archival once")
    run_parser.add_argument(
        "--as-of",
        type=_parse_as_of,
        default=None,
        help="Local timestamp to treat as 'now' (default: current time)",
    )
    run_parser.set_defaults(func=cmd_run)

    # init-db command
    init_parser = subparsers.add_parser("init-db", help="Create tables for local development")
    init_parser.set_defaults(func=cmd_init_db)

    args = parser.parse_args()
    args.func(args)


if __name__ == "__main__":
    main()
