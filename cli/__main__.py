#!/usr/bin/env python3
"""
pfm CLI - Personal finance tracking from the command line.

Usage:
    python -m cli <command> <subcommand> [options]

Commands:
    transactions Record and list transactions
    categories   Manage categories
    summary      Monthly dashboard
    backup       Export and import backups
    seed         Load sample data
    sync         Sync with the remote copy
    migrate      Database migrations

Examples:
    python -m cli transactions add expense 25000 --category Makan
    python -m cli summary --month 2024-03
    python -m cli backup export ~/pfm.json.gz
    python -m cli backup import ~/pfm.json.gz --mode merge
    python -m cli migrate status
"""

import argparse
import sys

from cli import backup, categories, migrate, seed, summary, sync, transactions
from config import load_config
from db.manager import DatabaseManager
from logger import setup_logging
from services.base import Services


def main():
    """Main CLI entry point with subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="pfm - Personal finance tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    transactions.setup_parser(subparsers)
    categories.setup_parser(subparsers)
    summary.setup_parser(subparsers)
    backup.setup_parser(subparsers)
    seed.setup_parser(subparsers)
    sync.setup_parser(subparsers)
    migrate.setup_parser(subparsers)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config()
        setup_logging(config)
        db_manager = DatabaseManager(config)

        # Migrate commands work on the raw database
        if args.command == "migrate":
            args.func(args, db_manager)
            return

        migrate.apply_pending(db_manager)
        services = Services(config, db_manager=db_manager)
        services.initialize()
        try:
            args.func(args, services)
        finally:
            services.close()
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
