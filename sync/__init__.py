"""Cloud sync of the full snapshot to a remote copy keyed by user."""

from sync.factory import get_sync_provider

__all__ = ["get_sync_provider"]
