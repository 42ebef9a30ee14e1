#!/usr/bin/env python3
"""
Arcade Tournament Operator CLI

Usage:
    python -m arcade_backend.cli <command> [options]

Commands:
    tournament  Ledger tournament operations (status, bootstrap, reconcile, create-successor)
    db          Score database operations (init)

Environment:
    LEDGER_RPC_URL                    Ledger RPC endpoint
    TOURNAMENT_CONTRACT_ADDRESS       Tournament contract address
    TOURNAMENT_MANAGER_PRIVATE_KEY    Manager key (required for writes)
    DATABASE_URL                      Score database (SCORE_STORE_BACKEND=sql)
    LOG_LEVEL                         DEBUG|INFO|WARNING|ERROR
"""
import sys
import argparse
import logging
from typing import Optional

from arcade_backend import __version__
from arcade_backend.cli.db_commands import DbCommand
from arcade_backend.cli.tournament_commands import TournamentCommand


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="arcade",
        description="Arcade Tournament Operator CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s tournament status
  %(prog)s tournament bootstrap
  %(prog)s --dry-run tournament reconcile
  %(prog)s tournament create-successor
  %(prog)s db init
        """
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be done without submitting transactions"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Tournament commands
    tournament_parser = subparsers.add_parser("tournament", help="Ledger tournament operations")
    tournament_subparsers = tournament_parser.add_subparsers(dest="tournament_action")

    # tournament status
    status_parser = tournament_subparsers.add_parser("status", help="Show the current tournament")
    status_parser.add_argument("--json", action="store_true", help="Print raw JSON")

    # tournament bootstrap
    tournament_subparsers.add_parser("bootstrap", help="Create the first tournament")

    # tournament reconcile
    tournament_subparsers.add_parser("reconcile", help="Run one scheduled reconcile now")

    # tournament create-successor
    tournament_subparsers.add_parser(
        "create-successor",
        help="Create a successor after a finalized tournament (recovery)"
    )

    # Database commands
    db_parser = subparsers.add_parser("db", help="Score database operations")
    db_subparsers = db_parser.add_subparsers(dest="db_action")

    # db init
    db_subparsers.add_parser("init", help="Create score and profile tables")

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
        "tournament": TournamentCommand,
        "db": DbCommand,
    }

    if parsed.command in command_map:
        handler = command_map[parsed.command](dry_run=parsed.dry_run)
        return handler.execute(parsed)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
