"""Savings goal store. Each goal owns its deposits."""

import dataclasses
from collections import defaultdict
from datetime import date
from typing import List, Optional

from calculations.savings import (
    SavingsDetails,
    SavingsTotals,
    savings_details,
    savings_totals,
)
from dates import current_date, now_utc, parse_date, parse_timestamp
from errors import NotFoundError
from ids import generate_id
from models.fields import date_to_json, optional_date, timestamp_to_json, to_money
from models.savings import SavingsDeposit, SavingsGoal
from services.records import RecordStore

_DEPOSIT_COLUMNS = ("id", "savings_id", "amount", "date", "note", "created_at")


class SavingsService(RecordStore[SavingsGoal]):
    """Service for managing savings goals and their deposits."""

    TABLE = "savings_goals"
    ENTITY = "Savings goal"
    COLUMNS = (
        "id",
        "name",
        "target_amount",
        "target_date",
        "linked_wishlist_id",
        "note",
        "created_at",
        "updated_at",
    )
    UPDATABLE = frozenset(
        {"name", "target_amount", "target_date", "linked_wishlist_id", "note"}
    )
    MONEY_FIELDS = frozenset({"target_amount"})
    DATE_FIELDS = frozenset({"target_date"})

    def _to_row(self, g: SavingsGoal) -> tuple:
        return (
            g.id,
            g.name,
            str(g.target_amount),
            date_to_json(g.target_date),
            g.linked_wishlist_id,
            g.note,
            timestamp_to_json(g.created_at),
            timestamp_to_json(g.updated_at),
        )

    def _from_row(self, row) -> SavingsGoal:
        return SavingsGoal(
            id=row[0],
            name=row[1],
            target_amount=to_money(row[2]),
            target_date=optional_date(row[3]),
            linked_wishlist_id=row[4],
            note=row[5],
            created_at=parse_timestamp(row[6]),
            updated_at=parse_timestamp(row[7]),
        )

    def _load(self, conn) -> List[SavingsGoal]:
        goals = super()._load(conn)
        cursor = conn.execute(
            f"SELECT {', '.join(_DEPOSIT_COLUMNS)} FROM savings_deposits ORDER BY rowid"
        )
        deposits = defaultdict(list)
        for row in cursor.fetchall():
            deposits[row[1]].append(
                SavingsDeposit(
                    id=row[0],
                    savings_id=row[1],
                    amount=to_money(row[2]),
                    date=parse_date(row[3]),
                    note=row[4],
                    created_at=parse_timestamp(row[5]),
                )
            )
        return [dataclasses.replace(g, deposits=tuple(deposits[g.id])) for g in goals]

    def _insert_deposit(self, conn, d: SavingsDeposit, skip_existing: bool = False) -> bool:
        verb = "INSERT OR IGNORE" if skip_existing else "INSERT"
        cursor = conn.execute(
            f"""
            {verb} INTO savings_deposits ({', '.join(_DEPOSIT_COLUMNS)})
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                d.id,
                d.savings_id,
                str(d.amount),
                date_to_json(d.date),
                d.note,
                timestamp_to_json(d.created_at),
            ),
        )
        return cursor.rowcount > 0

    def _insert_row(self, conn, goal: SavingsGoal, skip_existing: bool = False) -> bool:
        inserted = super()._insert_row(conn, goal, skip_existing)
        if inserted:
            for deposit in goal.deposits:
                if not self._insert_deposit(conn, deposit, skip_existing):
                    self.skipped_children += 1
        return inserted

    def _delete_children(self, conn, record_id: str) -> None:
        conn.execute("DELETE FROM savings_deposits WHERE savings_id = ?", (record_id,))

    def clear(self, conn) -> None:
        conn.execute("DELETE FROM savings_deposits")
        super().clear(conn)

    def add(
        self,
        name: str,
        target_amount,
        target_date=None,
        linked_wishlist_id: Optional[str] = None,
        note: Optional[str] = None,
    ) -> SavingsGoal:
        """Create a new savings goal with no deposits."""
        now = now_utc()
        return self._store(
            SavingsGoal(
                id=generate_id(),
                name=name.strip(),
                target_amount=to_money(target_amount),
                created_at=now,
                updated_at=now,
                target_date=optional_date(target_date),
                linked_wishlist_id=linked_wishlist_id,
                note=note,
            )
        )

    def add_deposit(
        self,
        savings_id: str,
        amount,
        date=None,
        note: Optional[str] = None,
    ) -> SavingsDeposit:
        """Record a deposit towards a goal.

        Args:
            savings_id: Goal receiving the deposit.
            amount: Positive amount.
            date: Deposit date, defaults to today.
            note: Optional free text.

        Returns:
            The created SavingsDeposit.

        Raises:
            NotFoundError: If the goal doesn't exist.
            ValueError: If the amount is not positive.
            PersistenceError: If the deposit could not be saved.
        """
        goal = self.get(savings_id)
        amount = to_money(amount)
        if amount <= 0:
            raise ValueError(f"Deposit amount must be positive, got {amount}")
        now = now_utc()
        deposit = SavingsDeposit(
            id=generate_id(),
            savings_id=savings_id,
            amount=amount,
            date=parse_date(date) if date else current_date(),
            created_at=now,
            note=note,
        )
        updated = dataclasses.replace(
            goal, deposits=goal.deposits + (deposit,), updated_at=now
        )

        with self._write("add deposit to") as conn:
            self._insert_deposit(conn, deposit)
            self._update_row(conn, updated)
        self._records[savings_id] = updated
        self._notify()
        return deposit

    def remove_deposit(self, savings_id: str, deposit_id: str) -> None:
        """Remove one deposit from a goal.

        Raises:
            NotFoundError: If the goal or the deposit doesn't exist.
        """
        goal = self.get(savings_id)
        remaining = tuple(d for d in goal.deposits if d.id != deposit_id)
        if len(remaining) == len(goal.deposits):
            raise NotFoundError("Deposit", deposit_id)
        updated = dataclasses.replace(goal, deposits=remaining, updated_at=now_utc())

        with self._write("remove deposit from") as conn:
            conn.execute("DELETE FROM savings_deposits WHERE id = ?", (deposit_id,))
            self._update_row(conn, updated)
        self._records[savings_id] = updated
        self._notify()

    def with_details(self, today: Optional[date] = None) -> List[SavingsDetails]:
        """Every goal with its derived progress."""
        today = today or current_date()
        return [savings_details(g, today) for g in self._records.values()]

    def totals(self, today: Optional[date] = None) -> SavingsTotals:
        return savings_totals(self.with_details(today))
