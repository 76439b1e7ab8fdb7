"""Sync provider backed by a directory, e.g. a mounted network share."""

import gzip
import json
import os
import re
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Optional

from dates import format_timestamp, now_utc, parse_timestamp
from errors import SyncError
from logger import get_logger
from sync.providers.base import RemoteSnapshot, SyncProvider

logger = get_logger()

_SAFE_USER_ID = re.compile(r"^[A-Za-z0-9_.@-]+$")


class DirectoryProvider(SyncProvider):
    """Stores one gzip-compressed JSON document per user under ``remote_dir``."""

    def __init__(self, remote_dir: Path):
        """Initialize the provider.

        Args:
            remote_dir: Directory holding the remote copies. Created on first push.
        """
        self.remote_dir = Path(remote_dir)

    def _path(self, user_id: str) -> Path:
        if not _SAFE_USER_ID.match(user_id or ""):
            raise SyncError(f"Invalid sync user id: {user_id!r}")
        return self.remote_dir / f"{user_id}.json.gz"

    def push(self, user_id: str, snapshot: dict) -> datetime:
        path = self._path(user_id)
        updated_at = now_utc()
        document = {
            "userId": user_id,
            "updatedAt": format_timestamp(updated_at),
            "data": snapshot,
        }
        tmp_path = path.with_name(path.name + ".tmp")
        try:
            self.remote_dir.mkdir(parents=True, exist_ok=True)
            with gzip.open(tmp_path, "wt", encoding="utf-8") as f:
                json.dump(document, f, ensure_ascii=False)
            # Readers never see a half-written file
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write remote snapshot {path}: {e}")
            raise SyncError(f"Failed to write remote snapshot: {e}") from e
        return updated_at

    def pull(self, user_id: str) -> Optional[RemoteSnapshot]:
        path = self._path(user_id)
        if not path.exists():
            return None
        try:
            with gzip.open(path, "rt", encoding="utf-8") as f:
                document = json.load(f, parse_float=Decimal)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read remote snapshot {path}: {e}")
            raise SyncError(f"Failed to read remote snapshot: {e}") from e

        if not isinstance(document, dict) or not isinstance(document.get("data"), dict):
            raise SyncError(f"Remote snapshot {path.name} is malformed")
        return RemoteSnapshot(
            user_id=user_id,
            data=document["data"],
            updated_at=parse_timestamp(document.get("updatedAt") or now_utc()),
        )

    def exists(self, user_id: str) -> bool:
        return self._path(user_id).exists()

    def delete(self, user_id: str) -> None:
        path = self._path(user_id)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise SyncError(f"Failed to delete remote snapshot: {e}") from e
