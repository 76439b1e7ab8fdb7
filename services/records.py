"""Generic write-through record store.

A store owns the in-memory collection of one entity type and mirrors it to
one SQLite table. Every mutation is persisted inside a single transaction
first; the in-memory collection only changes after the commit succeeds.
"""

import dataclasses
import sqlite3
from contextlib import contextmanager
from typing import Callable, Dict, Generic, Iterable, List, Optional, Tuple, TypeVar

from dates import now_utc
from errors import NotFoundError, PersistenceError
from logger import get_logger
from models.fields import optional_date, optional_money

logger = get_logger()

T = TypeVar("T")


class RecordStore(Generic[T]):
    """Base class for per-entity stores.

    Subclasses describe their table with ``TABLE``, ``ENTITY`` and
    ``COLUMNS`` (``id`` first) and implement ``_to_row``/``_from_row``.
    ``UPDATABLE`` lists the attributes ``update()`` accepts; names in
    ``MONEY_FIELDS`` and ``DATE_FIELDS`` are coerced on the way in.

    Args:
        db_manager: Database manager instance for database operations.
    """

    TABLE = ""
    ENTITY = ""
    COLUMNS: Tuple[str, ...] = ()
    ORDER_BY = "created_at, rowid"
    UPDATABLE: frozenset = frozenset()
    MONEY_FIELDS: frozenset = frozenset()
    DATE_FIELDS: frozenset = frozenset()

    def __init__(self, db_manager):
        self.db_manager = db_manager
        self._records: Dict[str, T] = {}
        self._listeners: List[Callable[[], None]] = []
        self.initialized = False
        # Owned rows left out by the last insert_many because their ID existed
        self.skipped_children = 0

    def subscribe(self, listener: Callable[[], None]) -> None:
        """Register a callback run after every successful mutation."""
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener()

    def initialize(self) -> None:
        """Load the collection from disk."""
        self.reload()
        self.initialized = True
        logger.debug(f"Loaded {len(self._records)} {self.TABLE} record(s)")

    def reload(self) -> None:
        with self.db_manager.connect() as conn:
            self._records = {record.id: record for record in self._load(conn)}

    def _load(self, conn) -> List[T]:
        cursor = conn.execute(
            f"SELECT {', '.join(self.COLUMNS)} FROM {self.TABLE} ORDER BY {self.ORDER_BY}"
        )
        return [self._from_row(row) for row in cursor.fetchall()]

    def _to_row(self, record: T) -> tuple:
        raise NotImplementedError

    def _from_row(self, row) -> T:
        raise NotImplementedError

    def find_all(self) -> List[T]:
        """All records, in insertion order."""
        return list(self._records.values())

    def find(self, record_id: str) -> Optional[T]:
        return self._records.get(record_id)

    def get(self, record_id: str) -> T:
        """Get a record by ID.

        Raises:
            NotFoundError: If no record has this ID.
        """
        record = self._records.get(record_id)
        if record is None:
            raise NotFoundError(self.ENTITY, record_id)
        return record

    def count(self) -> int:
        return len(self._records)

    @contextmanager
    def _write(self, action: str):
        """Run statements in one transaction, committing on success.

        Raises:
            PersistenceError: If SQLite rejects any statement. The
                transaction is rolled back first.
        """
        with self.db_manager.connect() as conn:
            try:
                yield conn
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Failed to {action} {self.ENTITY}: {e}")
                raise PersistenceError(f"Failed to {action} {self.ENTITY}: {e}") from e

    def _insert_row(self, conn, record: T, skip_existing: bool = False) -> bool:
        """Insert one record's row. Returns False if an existing ID was skipped."""
        verb = "INSERT OR IGNORE" if skip_existing else "INSERT"
        placeholders = ", ".join("?" for _ in self.COLUMNS)
        cursor = conn.execute(
            f"{verb} INTO {self.TABLE} ({', '.join(self.COLUMNS)}) VALUES ({placeholders})",
            self._to_row(record),
        )
        return cursor.rowcount > 0

    def _update_row(self, conn, record: T) -> None:
        row = self._to_row(record)
        assignments = ", ".join(f"{column} = ?" for column in self.COLUMNS[1:])
        conn.execute(
            f"UPDATE {self.TABLE} SET {assignments} WHERE id = ?",
            row[1:] + (row[0],),
        )

    def _delete_row(self, conn, record_id: str) -> None:
        conn.execute(f"DELETE FROM {self.TABLE} WHERE id = ?", (record_id,))

    def _delete_children(self, conn, record_id: str) -> None:
        """Hook for stores that own rows in other tables."""

    def _store(self, record: T) -> T:
        """Persist a new record and add it to the collection."""
        with self._write("add") as conn:
            self._insert_row(conn, record)
        self._records[record.id] = record
        logger.debug(f"Added {self.ENTITY} {record.id}")
        self._notify()
        return record

    def stage(self, conn, record: T) -> None:
        """Insert a new record inside another store's transaction.

        The record only becomes visible once ``commit_staged`` is called
        after that transaction commits.
        """
        self._insert_row(conn, record)

    def commit_staged(self, record: T) -> None:
        self._records[record.id] = record
        logger.debug(f"Added {self.ENTITY} {record.id}")
        self._notify()

    def _replace(self, record: T) -> T:
        """Persist a new version of an existing record."""
        self.get(record.id)
        with self._write("update") as conn:
            self._update_row(conn, record)
        self._records[record.id] = record
        logger.debug(f"Updated {self.ENTITY} {record.id}")
        self._notify()
        return record

    def _coerce(self, changes: dict) -> dict:
        coerced = {}
        for name, value in changes.items():
            if name in self.MONEY_FIELDS:
                value = optional_money(value)
            elif name in self.DATE_FIELDS:
                value = optional_date(value)
            coerced[name] = value
        return coerced

    def _derive(self, record: T) -> T:
        """Hook recomputing stored state that depends on updated fields."""
        return record

    def update(self, record_id: str, **changes) -> T:
        """Merge field changes into a record and refresh its ``updated_at``.

        Args:
            record_id: ID of the record to update.
            **changes: Attribute names and new values.

        Returns:
            The updated record.

        Raises:
            NotFoundError: If no record has this ID.
            ValueError: If a field cannot be updated this way.
        """
        existing = self.get(record_id)
        unsupported = set(changes) - self.UPDATABLE
        if unsupported:
            raise ValueError(f"Unsupported field names: {sorted(unsupported)}")

        changes = self._coerce(changes)
        if hasattr(existing, "updated_at"):
            changes["updated_at"] = now_utc()
        return self._replace(self._derive(dataclasses.replace(existing, **changes)))

    def delete(self, record_id: str) -> None:
        """Delete a record together with everything it owns.

        Raises:
            NotFoundError: If no record has this ID.
        """
        self.get(record_id)
        with self._write("delete") as conn:
            self._delete_children(conn, record_id)
            self._delete_row(conn, record_id)
        del self._records[record_id]
        logger.debug(f"Deleted {self.ENTITY} {record_id}")
        self._notify()

    def clear(self, conn) -> None:
        """Delete every row this store owns, inside the caller's transaction."""
        conn.execute(f"DELETE FROM {self.TABLE}")

    def insert_many(self, conn, records: Iterable[T], skip_existing: bool = False) -> int:
        """Insert records verbatim inside the caller's transaction.

        Call ``reload()`` after the transaction commits.

        Args:
            conn: Open connection whose transaction the caller commits.
            records: Records to insert, IDs and timestamps included.
            skip_existing: Leave rows whose ID already exists untouched
                instead of failing.

        Returns:
            Number of records inserted. Owned rows that were skipped are
            counted in ``skipped_children``.
        """
        self.skipped_children = 0
        inserted = 0
        for record in records:
            if self._insert_row(conn, record, skip_existing):
                inserted += 1
        return inserted

