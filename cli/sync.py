#!/usr/bin/env python3

import sys

from logger import get_logger

logger = get_logger()


def _sync_service(services):
    if services.cloud_sync is None:
        logger.error("Sync is disabled. Set [sync] enabled = true in ~/.config/pfm.toml")
        sys.exit(1)
    return services.cloud_sync


def _report(result, done: str):
    if not result.success:
        logger.error(f"Sync failed: {result.error}")
        sys.exit(1)
    logger.info(done)


def cmd_push(args, services):
    """Replace the remote copy with the local data."""
    _report(_sync_service(services).save_to_cloud(), "✓ Local data pushed")


def cmd_pull(args, services):
    """Replace the local data with the remote copy."""
    sync_service = _sync_service(services)
    if not args.yes:
        confirm = input("Replace ALL local data with the remote copy? (yes/no): ").strip().lower()
        if confirm != "yes":
            logger.info("Pull cancelled.")
            return
    result = sync_service.load_from_cloud()
    if result.success and not result.has_data:
        logger.info("No remote data found, nothing changed.")
        return
    _report(result, "✓ Remote data loaded")


def cmd_status(args, services):
    """Show the remote copy and the last sync time."""
    sync_service = _sync_service(services)
    last_synced = sync_service.last_synced()
    logger.info(f"User: {sync_service.user_id or '(not configured)'}")
    logger.info(f"Remote data: {'yes' if sync_service.has_cloud_data() else 'no'}")
    logger.info(f"Last synced: {last_synced.isoformat() if last_synced else 'never'}")


def cmd_delete(args, services):
    """Delete the remote copy. Local data is kept."""
    _report(_sync_service(services).delete_cloud_data(), "✓ Remote data deleted")


def setup_parser(subparsers):
    """Setup sync subcommand parser.

    Args:
        subparsers: The subparsers object from the main CLI
    """
    parser = subparsers.add_parser(
        "sync",
        help="Sync with the remote copy",
        description="Push, pull or inspect the remote copy of your data",
    )
    sync_subparsers = parser.add_subparsers(title="subcommands", dest="subcommand", required=True)

    sync_subparsers.add_parser("push", help="Push local data").set_defaults(func=cmd_push)

    pull_parser = sync_subparsers.add_parser("pull", help="Load the remote copy")
    pull_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")
    pull_parser.set_defaults(func=cmd_pull)

    sync_subparsers.add_parser("status", help="Show sync status").set_defaults(func=cmd_status)
    sync_subparsers.add_parser("delete", help="Delete the remote copy").set_defaults(func=cmd_delete)
