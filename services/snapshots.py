"""Export and import of the complete dataset as one snapshot document.

A snapshot is a JSON object:

    {version, settings, transactions[], categories[], wishlist[],
     installments[], monthlyNeeds[], monthlyNeedPayments[], assets[],
     savings[], exportedAt}

Installments carry their payments and savings goals their deposits. Field
names are camelCase so existing backup files stay readable.
"""

import copy
import gzip
import json
import sqlite3
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Callable, Dict, List, Optional

from dates import format_timestamp, is_valid_year_month, now_utc
from errors import PersistenceError, SnapshotError
from logger import get_logger
from models.asset import Asset
from models.category import Category
from models.installment import Installment
from models.monthly_need import MonthlyNeed, MonthlyNeedPayment
from models.savings import SavingsGoal
from models.settings import CURRENT_SCHEMA_VERSION, AppSettings
from models.transaction import Transaction
from models.wishlist import WishlistItem

logger = get_logger()

IMPORT_MODES = ("merge", "replace")

# Snapshot key -> model, in import order
COLLECTIONS = {
    "categories": Category,
    "transactions": Transaction,
    "wishlist": WishlistItem,
    "installments": Installment,
    "monthlyNeeds": MonthlyNeed,
    "monthlyNeedPayments": MonthlyNeedPayment,
    "assets": Asset,
    "savings": SavingsGoal,
}

_REQUIRED_COLLECTIONS = ("transactions", "categories")

# Stored as YYYY-MM; startMonth may be absent
_YEAR_MONTH_FIELDS = (("monthlyNeeds", "startMonth"), ("monthlyNeedPayments", "yearMonth"))


def _migrate_to_1(data: dict) -> dict:
    """Version 0 documents have no settings.schemaVersion."""
    settings = data.get("settings")
    if isinstance(settings, dict) and not settings.get("schemaVersion"):
        settings["schemaVersion"] = 1
    return data


_MIGRATIONS = {
    1: _migrate_to_1,
}


def migrate_snapshot(data: dict) -> dict:
    """Upgrade a snapshot to the current version, one step at a time.

    A missing ``version`` means version 0. The input is not modified.
    """
    migrated = copy.deepcopy(data)
    version = migrated.get("version") or 0
    while version < CURRENT_SCHEMA_VERSION:
        version += 1
        step = _MIGRATIONS.get(version)
        if step:
            logger.info(f"Migrating snapshot to version {version}")
            migrated = step(migrated)
        migrated["version"] = version
    return migrated


def _is_number(value) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def validate_snapshot(data) -> List[str]:
    """Check the structure of an import document.

    Returns:
        Problems found; empty if the document can be imported.
    """
    if not isinstance(data, dict):
        return ["Snapshot must be a JSON object"]

    errors = []
    for key in _REQUIRED_COLLECTIONS:
        if not isinstance(data.get(key), list):
            errors.append(f"Field {key} is missing or not a list")

    for key in COLLECTIONS:
        if key in _REQUIRED_COLLECTIONS or key not in data:
            continue
        if not isinstance(data[key], list):
            errors.append(f"Field {key} is not a list")

    settings = data.get("settings")
    if settings is not None and not isinstance(settings, dict):
        errors.append("Field settings is not an object")

    version = data.get("version")
    if version is not None and (not isinstance(version, int) or isinstance(version, bool)):
        errors.append("Field version is not an integer")
    elif isinstance(version, int) and version > CURRENT_SCHEMA_VERSION:
        errors.append(f"Snapshot version {version} is newer than supported")

    for i, tx in enumerate(data.get("transactions") or []):
        if (
            not isinstance(tx, dict)
            or not tx.get("id")
            or not tx.get("date")
            or not tx.get("type")
            or not _is_number(tx.get("amount"))
        ):
            errors.append(f"Transaction at index {i} is invalid")
            break

    for i, cat in enumerate(data.get("categories") or []):
        if not isinstance(cat, dict) or not cat.get("id") or not cat.get("name") or not cat.get("type"):
            errors.append(f"Category at index {i} is invalid")
            break

    for key in COLLECTIONS:
        if key in _REQUIRED_COLLECTIONS or not isinstance(data.get(key), list):
            continue
        for i, item in enumerate(data[key]):
            if not isinstance(item, dict) or not item.get("id"):
                errors.append(f"Entry at index {i} of {key} is invalid")
                break

    for key, field_name in _YEAR_MONTH_FIELDS:
        items = data.get(key)
        if not isinstance(items, list):
            continue
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                continue
            value = item.get(field_name)
            if value is not None and not is_valid_year_month(value):
                errors.append(f"Entry at index {i} of {key} has an invalid {field_name}")
                break

    return errors


@dataclass
class ImportResult:
    """Outcome of an import.

    Attributes:
        inserted: Records inserted per collection.
        skipped: Records left out per collection because their ID already
            existed (merge mode only).
        skipped_children: Owned payments or deposits left out per
            collection because their ID already existed (merge mode only).
    """

    mode: str
    inserted: Dict[str, int] = field(default_factory=dict)
    skipped: Dict[str, int] = field(default_factory=dict)
    skipped_children: Dict[str, int] = field(default_factory=dict)

    @property
    def total_inserted(self) -> int:
        return sum(self.inserted.values())


class SnapshotService:
    """Builds snapshots from the stores and restores them.

    Args:
        db_manager: Database manager instance for database operations.
        stores: Snapshot collection key to the store that owns it.
        settings: The settings service.
        backup_dir: Default directory for backup files.
    """

    def __init__(self, db_manager, stores: Dict[str, object], settings, backup_dir: Path):
        self.db_manager = db_manager
        self.stores = stores
        self.settings = settings
        self.backup_dir = backup_dir
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a callback run after every import that changed data."""
        self._listeners.append(listener)

    def export_snapshot(self) -> dict:
        """Serialize the current in-memory state. Nothing is modified."""
        snapshot = {
            "version": CURRENT_SCHEMA_VERSION,
            "settings": self.settings.get().to_dict(),
        }
        for key in (
            "transactions",
            "categories",
            "wishlist",
            "installments",
            "monthlyNeeds",
            "monthlyNeedPayments",
            "assets",
            "savings",
        ):
            snapshot[key] = [record.to_dict() for record in self.stores[key].find_all()]
        snapshot["exportedAt"] = format_timestamp(now_utc())
        return snapshot

    def _parse(self, data: dict) -> Dict[str, list]:
        records = {}
        for key, model in COLLECTIONS.items():
            try:
                records[key] = [model.from_dict(item) for item in data.get(key) or []]
            except (KeyError, TypeError, ValueError, InvalidOperation) as e:
                raise SnapshotError(f"Invalid entry in {key}: {e!r}") from e
        return records

    def import_snapshot(self, snapshot: dict, mode: str = "merge", notify: bool = True) -> ImportResult:
        """Restore a snapshot.

        ``replace`` clears every collection and inserts the snapshot as is.
        ``merge`` only inserts records whose ID is not present yet and never
        overwrites existing ones. Settings are overwritten in both modes when
        the snapshot has them. Either way the import is one transaction: it
        applies completely or not at all.

        Args:
            snapshot: Parsed snapshot document.
            mode: 'merge' or 'replace'.
            notify: Run change listeners afterwards. Disabled when the data
                itself came from the remote copy.

        Returns:
            ImportResult with per-collection counts.

        Raises:
            SnapshotError: If the mode is unknown or the document is malformed.
            PersistenceError: If the database rejected the import.
        """
        if mode not in IMPORT_MODES:
            raise SnapshotError(f"Unknown import mode: {mode}")

        errors = validate_snapshot(snapshot)
        if errors:
            raise SnapshotError("Invalid snapshot: " + "; ".join(errors))

        data = migrate_snapshot(snapshot)
        records = self._parse(data)
        settings = (
            AppSettings.from_dict(data["settings"])
            if isinstance(data.get("settings"), dict)
            else None
        )

        result = ImportResult(mode=mode)
        with self.db_manager.connect() as conn:
            try:
                if mode == "replace":
                    for store in self.stores.values():
                        store.clear(conn)
                for key, items in records.items():
                    inserted = self.stores[key].insert_many(
                        conn, items, skip_existing=(mode == "merge")
                    )
                    result.inserted[key] = inserted
                    result.skipped[key] = len(items) - inserted
                    if self.stores[key].skipped_children:
                        result.skipped_children[key] = self.stores[key].skipped_children
                if settings:
                    self.settings.write(conn, settings)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Import failed, nothing was changed: {e}")
                raise PersistenceError(f"Import failed: {e}") from e

        for store in self.stores.values():
            store.reload()
        self.settings.reload()

        logger.info(
            f"Imported snapshot ({mode}): {result.total_inserted} record(s) inserted"
        )
        if notify:
            for listener in self._listeners:
                listener()
        return result

    def export_to_file(self, path: Optional[Path] = None) -> Path:
        """Write a snapshot to a backup file.

        Args:
            path: Target file. A ``.gz`` suffix writes gzip-compressed JSON.
                Defaults to a timestamped file in the backup directory.

        Returns:
            Path of the written file.
        """
        if path is None:
            stamp = now_utc().strftime("%Y%m%d-%H%M%S")
            path = self.backup_dir / f"pfm-backup-{stamp}.json"
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        text = json.dumps(self.export_snapshot(), indent=2, ensure_ascii=False)
        if path.suffix == ".gz":
            with gzip.open(path, "wt", encoding="utf-8") as f:
                f.write(text)
        else:
            path.write_text(text, encoding="utf-8")

        logger.info(f"Exported snapshot to {path}")
        return path

    def import_from_file(self, path: Path, mode: str = "merge") -> ImportResult:
        """Import a backup file written by ``export_to_file``.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            SnapshotError: If the file is not a valid snapshot.
        """
        path = Path(path)
        logger.info(f"Importing snapshot from {path} ({mode})")
        return self.import_snapshot(read_snapshot(path), mode)

    def list_backups(self) -> List[Path]:
        """Backup files in the backup directory, newest name first."""
        if not self.backup_dir.exists():
            return []
        files = list(self.backup_dir.glob("*.json")) + list(self.backup_dir.glob("*.json.gz"))
        return sorted(files, reverse=True)


def read_snapshot(path: Path) -> dict:
    """Load a snapshot document from a ``.json`` or ``.json.gz`` file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        SnapshotError: If the file is not valid JSON.
    """
    try:
        if path.suffix == ".gz":
            with gzip.open(path, "rt", encoding="utf-8") as f:
                return json.load(f, parse_float=Decimal)
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f, parse_float=Decimal)
    except (json.JSONDecodeError, UnicodeDecodeError, gzip.BadGzipFile) as e:
        raise SnapshotError(f"Could not read snapshot {path}: {e}") from e
