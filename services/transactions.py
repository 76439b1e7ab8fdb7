"""Transaction store."""

import json
from datetime import date
from typing import Iterable, List, Optional

from dates import month_bounds, now_utc, parse_date, parse_timestamp
from ids import generate_id
from models.fields import date_to_json, optional_date, timestamp_to_json, to_money
from models.transaction import Transaction
from services.records import RecordStore


class TransactionService(RecordStore[Transaction]):
    """Service for managing transactions."""

    TABLE = "transactions"
    ENTITY = "Transaction"
    COLUMNS = (
        "id",
        "date",
        "transaction_type",
        "amount",
        "category_id",
        "subcategory_id",
        "note",
        "payment_method",
        "tags",
        "created_at",
        "updated_at",
    )
    ORDER_BY = "date DESC, created_at DESC"
    UPDATABLE = frozenset(
        {
            "date",
            "type",
            "amount",
            "category_id",
            "subcategory_id",
            "note",
            "payment_method",
            "tags",
        }
    )
    MONEY_FIELDS = frozenset({"amount"})
    DATE_FIELDS = frozenset({"date"})

    def _to_row(self, t: Transaction) -> tuple:
        return (
            t.id,
            date_to_json(t.date),
            t.type,
            str(t.amount),
            t.category_id,
            t.subcategory_id,
            t.note,
            t.payment_method,
            json.dumps(list(t.tags)) if t.tags else None,
            timestamp_to_json(t.created_at),
            timestamp_to_json(t.updated_at),
        )

    def _from_row(self, row) -> Transaction:
        return Transaction(
            id=row[0],
            date=parse_date(row[1]),
            type=row[2],
            amount=to_money(row[3]),
            category_id=row[4],
            subcategory_id=row[5],
            note=row[6],
            payment_method=row[7],
            tags=tuple(json.loads(row[8])) if row[8] else (),
            created_at=parse_timestamp(row[9]),
            updated_at=parse_timestamp(row[10]),
        )

    def _coerce(self, changes: dict) -> dict:
        changes = super()._coerce(changes)
        if "tags" in changes:
            changes["tags"] = tuple(changes["tags"] or ())
        return changes

    def add(
        self,
        date,
        type: str,
        amount,
        category_id: str,
        subcategory_id: Optional[str] = None,
        note: Optional[str] = None,
        payment_method: Optional[str] = None,
        tags: Iterable[str] = (),
    ) -> Transaction:
        """Create a new transaction.

        Args:
            date: Transaction date (``date`` or ``YYYY-MM-DD``).
            type: 'income', 'expense' or 'transfer'.
            amount: Positive amount.
            category_id: Category ID (weak reference).
            subcategory_id: Optional subcategory ID within the category.
            note: Optional free text.
            payment_method: Optional 'cash', 'bank' or 'e-wallet'.
            tags: Optional labels.

        Returns:
            The created Transaction with ID and timestamps populated.

        Raises:
            PersistenceError: If the transaction could not be saved.
        """
        now = now_utc()
        return self._store(
            Transaction(
                id=generate_id(),
                date=parse_date(date),
                type=type,
                amount=to_money(amount),
                category_id=category_id,
                created_at=now,
                updated_at=now,
                subcategory_id=subcategory_id,
                note=note,
                payment_method=payment_method,
                tags=tuple(tags),
            )
        )

    def find_all(self) -> List[Transaction]:
        """All transactions, newest date first."""
        return sorted(
            self._records.values(),
            key=lambda t: (t.date, t.created_at),
            reverse=True,
        )

    def find_by_date_range(self, start_date, end_date) -> List[Transaction]:
        """Transactions dated within ``[start_date, end_date]``, newest first."""
        start, end = parse_date(start_date), parse_date(end_date)
        return [t for t in self.find_all() if start <= t.date <= end]

    def find_by_month(self, year: int, month: int) -> List[Transaction]:
        first, last = month_bounds(year, month)
        return self.find_by_date_range(first, last)

    def find_by_category(self, category_id: str) -> List[Transaction]:
        return [t for t in self.find_all() if t.category_id == category_id]

    def filter(
        self,
        start_date=None,
        end_date=None,
        type: Optional[str] = None,
        category_id: Optional[str] = None,
        subcategory_id: Optional[str] = None,
        search: Optional[str] = None,
    ) -> List[Transaction]:
        """Filter transactions. Every criterion given must match.

        Args:
            start_date: Earliest date, inclusive.
            end_date: Latest date, inclusive.
            type: Transaction type.
            category_id: Category ID.
            subcategory_id: Subcategory ID.
            search: Case-insensitive text looked up in the note and tags.

        Returns:
            Matching transactions, newest first.
        """
        start: Optional[date] = optional_date(start_date)
        end: Optional[date] = optional_date(end_date)
        needle = search.strip().lower() if search else None

        def matches(t: Transaction) -> bool:
            if start and t.date < start:
                return False
            if end and t.date > end:
                return False
            if type and t.type != type:
                return False
            if category_id and t.category_id != category_id:
                return False
            if subcategory_id and t.subcategory_id != subcategory_id:
                return False
            if needle:
                haystack = " ".join([t.note or "", *t.tags]).lower()
                if needle not in haystack:
                    return False
            return True

        return [t for t in self.find_all() if matches(t)]
