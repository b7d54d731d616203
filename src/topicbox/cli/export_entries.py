"""CLI command for exporting entries to CSV.

Usage:
    python -m topicbox.cli.export_entries [OPTIONS]

Examples:
    # Export every entry to ./Entries.csv
    python -m topicbox.cli.export_entries

    # Export one topic by id
    python -m topicbox.cli.export_entries --topic-id 5b0c2f8e-...

    # Export topics whose name contains "airdrop" to stdout
    python -m topicbox.cli.export_entries --topic-name airdrop --output -
"""

import asyncio
import sys
from argparse import ArgumentParser, Namespace
from pathlib import Path

import structlog
from sqlalchemy.exc import SQLAlchemyError

from topicbox.core import timezone  # noqa: F401
from topicbox.core.config import Settings, configure_logging
from topicbox.core.database import setup_db_session
from topicbox.services.entry_service import EntryService
from topicbox.services.platform_username import LocalPlatformUsernameChecker
from topicbox.services.topic_locks import TopicLocks
from topicbox.uow import create_uow_factory

logger = structlog.get_logger()


def parse_args(argv: list[str] | None = None) -> Namespace:
    """Parse command-line arguments."""
    parser = ArgumentParser(
        description="Export entries as CSV",
        epilog="Uses the same filters and column layout as GET /api/entries/export",
    )

    filters = parser.add_mutually_exclusive_group()
    filters.add_argument("--topic-id", help="Export entries of exactly this topic")
    filters.add_argument(
        "--topic-name",
        help="Export entries whose topic name contains this text (case-insensitive)",
    )

    parser.add_argument(
        "-o",
        "--output",
        help="Output path, or '-' for stdout (default: the export file name in the current directory)",
    )

    return parser.parse_args(argv)


async def async_main(argv: list[str] | None = None) -> int:
    """Main CLI entry point (async).

    Returns:
        Exit code: 0 (success), 1 (error)
    """
    args = parse_args(argv)

    settings = Settings()  # type: ignore[call-arg]
    configure_logging(settings)

    logger.info("cli.started", topic_id=args.topic_id, topic_name=args.topic_name)

    session_factory = setup_db_session(settings.database_url, settings.db_pool_size)
    service = EntryService(
        uow_factory=create_uow_factory(session_factory),
        # Export never verifies usernames
        platform_checker=LocalPlatformUsernameChecker(),
        settings=settings,
        topic_locks=TopicLocks(),
    )

    try:
        filename, csv_text = await service.export_csv(
            topic_id=args.topic_id, topic_name=args.topic_name
        )
    except SQLAlchemyError as e:
        logger.error("cli.store_error", error=str(e), error_type=type(e).__name__)
        print(f"\nError: could not read entries: {e}", file=sys.stderr)
        return 1
    finally:
        engine = session_factory.kw.get("bind")
        if engine is not None:
            await engine.dispose()

    if args.output == "-":
        sys.stdout.write(csv_text)
        logger.info("cli.success", output="stdout")
        return 0

    target = Path(args.output or filename)
    try:
        target.write_text(csv_text, encoding="utf-8", newline="")
    except OSError as e:
        logger.error("cli.write_failed", path=str(target), error=str(e))
        print(f"\nError: could not write {target}: {e}", file=sys.stderr)
        return 1

    logger.info("cli.success", output=str(target))
    print(f"Exported entries to {target}")
    return 0


def main() -> None:
    """Synchronous entry point for CLI."""
    sys.exit(asyncio.run(async_main()))


if __name__ == "__main__":
    main()
