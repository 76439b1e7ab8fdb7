"""Wishlist store."""

import dataclasses
from decimal import Decimal
from typing import List, Optional

from calculations.wishlist import (
    WishlistProgress,
    WishlistTotals,
    item_progress,
    sort_items,
    wishlist_totals,
)
from dates import current_date, now_utc, parse_timestamp
from ids import generate_id
from logger import get_logger
from models.fields import date_to_json, optional_date, timestamp_to_json, to_money
from models.transaction import Transaction
from models.wishlist import WishlistItem
from services.records import RecordStore

logger = get_logger()


class WishlistService(RecordStore[WishlistItem]):
    """Service for managing wishlist items.

    Args:
        db_manager: Database manager instance for database operations.
        transactions: Transaction store receiving purchase expenses.
        monthly_savings: Assumed monthly saving rate used for ETAs.
    """

    TABLE = "wishlist"
    ENTITY = "Wishlist item"
    COLUMNS = (
        "id",
        "name",
        "target_price",
        "priority",
        "current_saved",
        "status",
        "target_date",
        "linked_savings_id",
        "category",
        "note",
        "created_at",
        "updated_at",
    )
    UPDATABLE = frozenset(
        {
            "name",
            "target_price",
            "priority",
            "current_saved",
            "status",
            "target_date",
            "linked_savings_id",
            "category",
            "note",
        }
    )
    MONEY_FIELDS = frozenset({"target_price", "current_saved"})
    DATE_FIELDS = frozenset({"target_date"})

    def __init__(self, db_manager, transactions, monthly_savings=Decimal("500000")):
        super().__init__(db_manager)
        self.transactions = transactions
        self.monthly_savings = to_money(monthly_savings)

    def _to_row(self, w: WishlistItem) -> tuple:
        return (
            w.id,
            w.name,
            str(w.target_price),
            w.priority,
            str(w.current_saved),
            w.status,
            date_to_json(w.target_date),
            w.linked_savings_id,
            w.category,
            w.note,
            timestamp_to_json(w.created_at),
            timestamp_to_json(w.updated_at),
        )

    def _from_row(self, row) -> WishlistItem:
        return WishlistItem(
            id=row[0],
            name=row[1],
            target_price=to_money(row[2]),
            priority=row[3],
            current_saved=to_money(row[4]),
            status=row[5],
            target_date=optional_date(row[6]),
            linked_savings_id=row[7],
            category=row[8],
            note=row[9],
            created_at=parse_timestamp(row[10]),
            updated_at=parse_timestamp(row[11]),
        )

    def add(
        self,
        name: str,
        target_price,
        priority: str = "medium",
        current_saved=0,
        target_date=None,
        linked_savings_id: Optional[str] = None,
        category: Optional[str] = None,
        note: Optional[str] = None,
    ) -> WishlistItem:
        """Create a new wishlist item.

        The item starts as ``saving`` when something is already saved,
        ``planned`` otherwise.
        """
        current_saved = to_money(current_saved)
        now = now_utc()
        return self._store(
            WishlistItem(
                id=generate_id(),
                name=name.strip(),
                target_price=to_money(target_price),
                priority=priority,
                created_at=now,
                updated_at=now,
                current_saved=current_saved,
                status="saving" if current_saved > 0 else "planned",
                target_date=optional_date(target_date),
                linked_savings_id=linked_savings_id,
                category=category,
                note=note,
            )
        )

    def update_saved_amount(self, item_id: str, amount) -> WishlistItem:
        """Set how much has been saved towards an item.

        A bought item stays bought. Otherwise the status follows the
        amount: ``saving`` above zero, ``planned`` at zero.

        Raises:
            NotFoundError: If the item doesn't exist.
        """
        item = self.get(item_id)
        amount = to_money(amount)
        if item.status == "bought":
            status = "bought"
        else:
            status = "saving" if amount > 0 else "planned"
        return self._replace(
            dataclasses.replace(
                item, current_saved=amount, status=status, updated_at=now_utc()
            )
        )

    def mark_as_bought(
        self,
        item_id: str,
        create_transaction: bool = False,
        category_id: Optional[str] = None,
        date=None,
    ) -> Optional[Transaction]:
        """Mark an item as bought.

        Args:
            item_id: Item that was bought.
            create_transaction: Also record an expense for its target price.
            category_id: Category of that expense.
            date: Purchase date, defaults to today.

        Returns:
            The generated Transaction, if one was requested.

        Raises:
            NotFoundError: If the item doesn't exist.
        """
        item = self.get(item_id)
        now = now_utc()
        updated = dataclasses.replace(item, status="bought", updated_at=now)

        transaction = None
        if create_transaction:
            transaction = Transaction(
                id=generate_id(),
                date=optional_date(date) or current_date(),
                type="expense",
                amount=item.target_price,
                category_id=category_id or "",
                created_at=now,
                updated_at=now,
                note=item.name,
            )

        with self._write("mark bought") as conn:
            self._update_row(conn, updated)
            if transaction:
                self.transactions.stage(conn, transaction)
        self._records[item_id] = updated
        logger.debug(f"Wishlist item {item.name} marked as bought")
        if transaction:
            self.transactions.commit_staged(transaction)
        self._notify()
        return transaction

    def find_active(self) -> List[WishlistItem]:
        return [w for w in self._records.values() if w.status != "bought"]

    def find_bought(self) -> List[WishlistItem]:
        return [w for w in self._records.values() if w.status == "bought"]

    def sorted_items(self, by: str = "priority", include_bought: bool = False) -> List[WishlistItem]:
        items = self.find_all() if include_bought else self.find_active()
        return sort_items(items, by)

    def with_progress(self) -> List[WishlistProgress]:
        return [item_progress(w, self.monthly_savings) for w in self._records.values()]

    def totals(self) -> WishlistTotals:
        return wishlist_totals(self.with_progress())
