#!/usr/bin/env python3

from logger import get_logger
from seed.generator import DEFAULT_SEED, generate_seed_snapshot
from services.snapshots import IMPORT_MODES

logger = get_logger()


def cmd_seed(args, services):
    """Load sample data, replacing local data unless --mode merge is given."""
    if args.mode == "replace" and not args.yes:
        confirm = input("Replace ALL local data with sample data? (yes/no): ").strip().lower()
        if confirm != "yes":
            logger.info("Seeding cancelled.")
            return

    snapshot = generate_seed_snapshot(seed=args.seed)
    result = services.snapshots.import_snapshot(snapshot, args.mode)
    logger.info(f"✓ Loaded {result.total_inserted} sample record(s)")


def setup_parser(subparsers):
    """Setup seed subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "seed",
        help="Load sample data",
        description="Fill the database with three months of generated sample data",
    )
    parser.add_argument("--seed", type=int, default=DEFAULT_SEED, help="Random seed")
    parser.add_argument("--mode", choices=IMPORT_MODES, default="replace")
    parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    parser.set_defaults(func=cmd_seed)
