"""Pushes and pulls the full snapshot to and from the remote copy."""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from dates import format_timestamp, parse_timestamp
from errors import PersistenceError, SnapshotError, SyncError
from logger import get_logger
from sync.providers.base import SyncProvider

logger = get_logger()


@dataclass
class SyncResult:
    """Outcome of a sync operation. Failures are reported here, never raised."""

    success: bool
    error: Optional[str] = None
    has_data: Optional[bool] = None


def _summary(snapshot: dict) -> str:
    keys = ("transactions", "categories", "wishlist", "installments", "monthlyNeeds", "assets")
    return ", ".join(f"{key}={len(snapshot.get(key) or [])}" for key in keys)


class CloudSyncService:
    """Mirrors the local dataset to a sync provider.

    Args:
        provider: Remote storage.
        snapshots: SnapshotService used to export and import.
        db_manager: Database manager, used to remember the last sync time.
        user_id: Identity the remote copy is stored under.
    """

    def __init__(self, provider: SyncProvider, snapshots, db_manager, user_id: str):
        self.provider = provider
        self.snapshots = snapshots
        self.db_manager = db_manager
        self.user_id = user_id

    def save_to_cloud(self) -> SyncResult:
        """Push the current local state, replacing the remote copy."""
        if not self.user_id:
            return SyncResult(success=False, error="No sync user configured")

        snapshot = self.snapshots.export_snapshot()
        logger.info(f"Saving data for user {self.user_id}: {_summary(snapshot)}")
        try:
            updated_at = self.provider.push(self.user_id, snapshot)
            self._set_last_synced(updated_at)
        except (SyncError, PersistenceError) as e:
            logger.error(f"Save to cloud failed: {e}")
            return SyncResult(success=False, error=str(e))

        logger.info("Save to cloud successful")
        return SyncResult(success=True)

    def load_from_cloud(self) -> SyncResult:
        """Replace local data with the remote copy.

        No data on the remote side is a success with ``has_data=False``.
        """
        if not self.user_id:
            return SyncResult(success=False, error="No sync user configured")

        logger.info(f"Loading data for user {self.user_id}")
        try:
            remote = self.provider.pull(self.user_id)
            if remote is None:
                logger.info("No cloud data found for user")
                return SyncResult(success=True, has_data=False)

            logger.info(f"Cloud data: {_summary(remote.data)}")
            # Data that came from the remote must not be pushed straight back
            self.snapshots.import_snapshot(remote.data, "replace", notify=False)
            self._set_last_synced(remote.updated_at)
        except (SyncError, SnapshotError, PersistenceError) as e:
            logger.error(f"Load from cloud failed: {e}")
            return SyncResult(success=False, error=str(e))

        logger.info("Load from cloud successful")
        return SyncResult(success=True, has_data=True)

    def has_cloud_data(self) -> bool:
        if not self.user_id:
            return False
        try:
            return self.provider.exists(self.user_id)
        except SyncError as e:
            logger.warning(f"Could not check cloud data: {e}")
            return False

    def delete_cloud_data(self) -> SyncResult:
        if not self.user_id:
            return SyncResult(success=False, error="No sync user configured")
        try:
            self.provider.delete(self.user_id)
            self._clear_last_synced()
        except (SyncError, PersistenceError) as e:
            logger.error(f"Delete cloud data failed: {e}")
            return SyncResult(success=False, error=str(e))
        logger.info(f"Deleted cloud data for user {self.user_id}")
        return SyncResult(success=True)

    def last_synced(self) -> Optional[datetime]:
        with self.db_manager.connect() as conn:
            row = conn.execute(
                "SELECT last_synced FROM sync_state WHERE user_id = ?", (self.user_id,)
            ).fetchone()
        return parse_timestamp(row[0]) if row else None

    def _set_last_synced(self, when: datetime) -> None:
        self._execute(
            "INSERT OR REPLACE INTO sync_state (user_id, last_synced) VALUES (?, ?)",
            (self.user_id, format_timestamp(when)),
        )

    def _clear_last_synced(self) -> None:
        self._execute("DELETE FROM sync_state WHERE user_id = ?", (self.user_id,))

    def _execute(self, sql: str, params: tuple) -> None:
        with self.db_manager.connect() as conn:
            try:
                conn.execute(sql, params)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                raise PersistenceError(f"Failed to record sync state: {e}") from e
