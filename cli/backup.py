#!/usr/bin/env python3

import sys
from pathlib import Path

from logger import get_logger
from services.snapshots import IMPORT_MODES

logger = get_logger()


def cmd_export(args, services):
    """Write every collection to a backup file."""
    path = services.snapshots.export_to_file(Path(args.file) if args.file else None)
    logger.info(f"✓ Backup written to {path}")


def cmd_import(args, services):
    """Restore a backup file."""
    path = Path(args.file)
    if not path.exists():
        logger.error(f"File not found: {args.file}")
        sys.exit(1)

    if args.mode == "replace" and not args.yes:
        confirm = input("Replace ALL local data with this backup? (yes/no): ").strip().lower()
        if confirm != "yes":
            logger.info("Import cancelled.")
            return

    result = services.snapshots.import_from_file(path, args.mode)
    for key, inserted in result.inserted.items():
        skipped = result.skipped.get(key, 0)
        if inserted or skipped:
            logger.info(f"  {key}: {inserted} inserted, {skipped} skipped")
    logger.info(f"✓ Imported {result.total_inserted} record(s) ({result.mode})")


def cmd_list(args, services):
    """List backup files in the backup directory."""
    backups = services.snapshots.list_backups()
    if not backups:
        logger.info(f"No backups found in {services.config.backup_dir}")
        return
    for path in backups:
        logger.info(f"{path.name}  ({path.stat().st_size:,} bytes)")


def setup_parser(subparsers):
    """Setup backup subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "backup",
        help="Export and import backups",
        description="Export all data to a JSON snapshot and import it back",
    )
    backup_subparsers = parser.add_subparsers(
        title="subcommands", dest="subcommand", required=True
    )

    export_parser = backup_subparsers.add_parser("export", help="Write a backup file")
    export_parser.add_argument(
        "file", nargs="?", help="Target file (.json or .json.gz), defaults to the backup directory"
    )
    export_parser.set_defaults(func=cmd_export)

    import_parser = backup_subparsers.add_parser("import", help="Import a backup file")
    import_parser.add_argument("file")
    import_parser.add_argument("--mode", choices=IMPORT_MODES, default="merge")
    import_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    import_parser.set_defaults(func=cmd_import)

    list_parser = backup_subparsers.add_parser("list", help="List backup files")
    list_parser.set_defaults(func=cmd_list)
