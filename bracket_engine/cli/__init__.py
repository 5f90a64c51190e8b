#!/usr/bin/env python3
"""
Bracket Engine CLI

Usage:
    python -m bracket_engine.cli <command> [options]

Commands:
    db          Database operations (init)
    bracket     Bracket operations (init, resolve, standings)

Environment:
    DATABASE_URL    SQLAlchemy async URL (default: sqlite+aiosqlite:///./bracket.db)
    LOG_LEVEL       DEBUG|INFO|WARNING|ERROR
"""
import os
import sys
import argparse
import logging
from typing import Optional

from bracket_engine.cli.bracket_commands import BracketCommand
from bracket_engine.cli.db_commands import DbCommand


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="bracket-engine",
        description="Bracket tournament scoring engine CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s db init
  %(prog)s bracket init --season 2026
  %(prog)s bracket resolve --id <tournament-id>
  %(prog)s bracket standings --id <tournament-id> --league <league-id>
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 1.0.0"
    )

    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO").upper(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without executing"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Database commands
    db_parser = subparsers.add_parser("db", help="Database operations")
    db_subparsers = db_parser.add_subparsers(dest="db_action")
    db_subparsers.add_parser("init", help="Create missing tables")

    # Bracket commands
    bracket_parser = subparsers.add_parser("bracket", help="Bracket operations")
    bracket_subparsers = bracket_parser.add_subparsers(dest="bracket_action")

    # bracket init
    init_parser = bracket_subparsers.add_parser("init", help="Seed a season's bracket")
    init_parser.add_argument("--season", "-s", type=int, required=True, help="Tournament season, e.g. 2026")

    # bracket resolve
    resolve_parser = bracket_subparsers.add_parser("resolve", help="Score picks from final games")
    resolve_parser.add_argument("--id", "-i", required=True, help="Tournament ID")

    # bracket standings
    standings_parser = bracket_subparsers.add_parser("standings", help="Print league standings")
    standings_parser.add_argument("--id", "-i", required=True, help="Tournament ID")
    standings_parser.add_argument("--league", "-l", required=True, help="League ID")

    return parser


def main(args: Optional[list] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 1

    setup_logging(parsed.log_level)

    command_map = {
        "db": DbCommand,
        "bracket": BracketCommand,
    }

    if parsed.command in command_map:
        handler = command_map[parsed.command](dry_run=parsed.dry_run)
        return handler.execute(parsed)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
