"""Monthly need store and the per-month payments recorded against needs."""

import dataclasses
from typing import List, Optional

from calculations.monthly_needs import (
    BudgetComparison,
    NeedStatus,
    NeedTotals,
    budget_comparison,
    find_payment,
    need_status,
    needs_for_month,
    needs_with_status,
    need_totals,
)
from dates import (
    current_date,
    current_year_month,
    month_bounds,
    now_utc,
    parse_timestamp,
    parse_year_month,
    year_month_of,
)
from errors import NotFoundError
from ids import generate_id
from logger import get_logger
from models.fields import timestamp_to_json, to_money
from models.monthly_need import MonthlyNeed, MonthlyNeedPayment
from models.transaction import Transaction
from services.records import RecordStore

logger = get_logger()


class MonthlyNeedPaymentService(RecordStore[MonthlyNeedPayment]):
    """Payments of monthly needs, at most one per need and month.

    The UNIQUE(need_id, year_month) constraint on the table backs the
    one-payment-per-month rule, including for merged imports.
    """

    TABLE = "monthly_need_payments"
    ENTITY = "Monthly need payment"
    COLUMNS = ("id", "need_id", "year_month", "actual_amount", "paid_at", "transaction_id")
    ORDER_BY = "paid_at, rowid"

    def _to_row(self, p: MonthlyNeedPayment) -> tuple:
        return (
            p.id,
            p.need_id,
            p.year_month,
            str(p.actual_amount),
            timestamp_to_json(p.paid_at),
            p.transaction_id,
        )

    def _from_row(self, row) -> MonthlyNeedPayment:
        return MonthlyNeedPayment(
            id=row[0],
            need_id=row[1],
            year_month=row[2],
            actual_amount=to_money(row[3]),
            paid_at=parse_timestamp(row[4]),
            transaction_id=row[5],
        )

    def find_for(self, need_id: str, year_month: str) -> Optional[MonthlyNeedPayment]:
        return find_payment(self._records.values(), need_id, year_month)

    def find_by_need(self, need_id: str) -> List[MonthlyNeedPayment]:
        return [p for p in self._records.values() if p.need_id == need_id]

    def repay(self, payment: MonthlyNeedPayment, amount) -> MonthlyNeedPayment:
        """Replace the amount of an existing payment and stamp it paid now."""
        return self._replace(
            dataclasses.replace(payment, actual_amount=to_money(amount), paid_at=now_utc())
        )

    def evict_need(self, need_id: str) -> None:
        """Drop in-memory payments of a need whose rows were already deleted."""
        self._records = {
            pid: p for pid, p in self._records.items() if p.need_id != need_id
        }


class MonthlyNeedService(RecordStore[MonthlyNeed]):
    """Service for managing monthly needs and marking them paid.

    Args:
        db_manager: Database manager instance for database operations.
        transactions: Transaction store receiving auto-generated expenses.
    """

    TABLE = "monthly_needs"
    ENTITY = "Monthly need"
    COLUMNS = (
        "id",
        "name",
        "budget_amount",
        "due_day",
        "category_id",
        "subcategory_id",
        "recurrence_period",
        "start_month",
        "auto_generate_transaction",
        "note",
        "created_at",
        "updated_at",
    )
    UPDATABLE = frozenset(
        {
            "name",
            "budget_amount",
            "due_day",
            "category_id",
            "subcategory_id",
            "recurrence_period",
            "start_month",
            "auto_generate_transaction",
            "note",
        }
    )
    MONEY_FIELDS = frozenset({"budget_amount"})

    def __init__(self, db_manager, transactions):
        super().__init__(db_manager)
        self.transactions = transactions
        self.payments = MonthlyNeedPaymentService(db_manager)

    def _to_row(self, n: MonthlyNeed) -> tuple:
        return (
            n.id,
            n.name,
            str(n.budget_amount),
            n.due_day,
            n.category_id,
            n.subcategory_id,
            n.recurrence_period,
            n.start_month,
            int(n.auto_generate_transaction),
            n.note,
            timestamp_to_json(n.created_at),
            timestamp_to_json(n.updated_at),
        )

    def _from_row(self, row) -> MonthlyNeed:
        return MonthlyNeed(
            id=row[0],
            name=row[1],
            budget_amount=to_money(row[2]),
            due_day=row[3],
            category_id=row[4],
            subcategory_id=row[5],
            recurrence_period=row[6],
            start_month=row[7],
            auto_generate_transaction=bool(row[8]),
            note=row[9],
            created_at=parse_timestamp(row[10]),
            updated_at=parse_timestamp(row[11]),
        )

    def initialize(self) -> None:
        super().initialize()
        self.payments.initialize()

    def subscribe(self, listener) -> None:
        super().subscribe(listener)
        self.payments.subscribe(listener)

    def add(
        self,
        name: str,
        budget_amount,
        start_month: Optional[str] = None,
        recurrence_period: str = "forever",
        due_day: Optional[int] = None,
        category_id: Optional[str] = None,
        subcategory_id: Optional[str] = None,
        auto_generate_transaction: bool = False,
        note: Optional[str] = None,
    ) -> MonthlyNeed:
        """Create a new monthly need.

        Args:
            name: Display name.
            budget_amount: Budgeted amount per occurrence.
            start_month: First month (``YYYY-MM``), defaults to the current month.
            recurrence_period: 'forever', 'monthly' or 'yearly'.
            due_day: Optional day of the month the need is due.
            category_id: Category for auto-generated transactions.
            subcategory_id: Subcategory for auto-generated transactions.
            auto_generate_transaction: Record an expense when marked paid.
            note: Optional free text.

        Returns:
            The created MonthlyNeed.
        """
        now = now_utc()
        return self._store(
            MonthlyNeed(
                id=generate_id(),
                name=name.strip(),
                budget_amount=to_money(budget_amount),
                start_month=start_month or current_year_month(),
                created_at=now,
                updated_at=now,
                recurrence_period=recurrence_period,
                due_day=due_day,
                category_id=category_id,
                subcategory_id=subcategory_id,
                auto_generate_transaction=auto_generate_transaction,
                note=note,
            )
        )

    def delete(self, record_id: str) -> None:
        """Delete a need and every payment recorded for it.

        Raises:
            NotFoundError: If the need doesn't exist.
        """
        self.get(record_id)
        with self._write("delete") as conn:
            conn.execute("DELETE FROM monthly_need_payments WHERE need_id = ?", (record_id,))
            self._delete_row(conn, record_id)
        del self._records[record_id]
        self.payments.evict_need(record_id)
        logger.debug(f"Deleted {self.ENTITY} {record_id}")
        self._notify()

    def mark_paid(
        self, need_id: str, actual_amount, year_month: Optional[str] = None
    ) -> MonthlyNeedPayment:
        """Record what was actually paid for a need in a month.

        Marking an already paid month again replaces its amount, so there is
        never more than one payment per need and month. An expense
        transaction is generated only for the first payment of the month.

        Args:
            need_id: Need being paid.
            actual_amount: Amount actually paid, may differ from the budget.
            year_month: Month paid for, defaults to the current month.

        Returns:
            The new or updated MonthlyNeedPayment.

        Raises:
            NotFoundError: If the need doesn't exist.
            PersistenceError: If the payment could not be saved.
        """
        need = self.get(need_id)
        year_month = year_month or current_year_month()
        parse_year_month(year_month)
        amount = to_money(actual_amount)
        now = now_utc()

        existing = self.payments.find_for(need_id, year_month)
        if existing:
            return self.payments.repay(existing, amount)

        transaction = None
        if need.auto_generate_transaction:
            transaction = Transaction(
                id=generate_id(),
                date=self._transaction_date(year_month),
                type="expense",
                amount=amount,
                category_id=need.category_id or "",
                created_at=now,
                updated_at=now,
                subcategory_id=need.subcategory_id,
                note=need.name,
            )

        payment = MonthlyNeedPayment(
            id=generate_id(),
            need_id=need_id,
            year_month=year_month,
            actual_amount=amount,
            paid_at=now,
            transaction_id=transaction.id if transaction else None,
        )
        with self._write("mark paid") as conn:
            self.payments.stage(conn, payment)
            if transaction:
                self.transactions.stage(conn, transaction)
        self.payments.commit_staged(payment)
        if transaction:
            self.transactions.commit_staged(transaction)
        return payment

    @staticmethod
    def _transaction_date(year_month: str):
        today = current_date()
        if year_month_of(today) == year_month:
            return today
        first, _ = month_bounds(*parse_year_month(year_month))
        return first

    def unmark_paid(self, need_id: str, year_month: str) -> None:
        """Remove the payment of a need for a month.

        Raises:
            NotFoundError: If the need doesn't exist or wasn't paid that month.
        """
        self.get(need_id)
        payment = self.payments.find_for(need_id, year_month)
        if payment is None:
            raise NotFoundError("Monthly need payment", f"{need_id}/{year_month}")
        self.payments.delete(payment.id)

    def is_paid(self, need_id: str, year_month: Optional[str] = None) -> bool:
        return self.payments.find_for(need_id, year_month or current_year_month()) is not None

    def for_month(self, year_month: Optional[str] = None) -> List[MonthlyNeed]:
        return needs_for_month(self._records.values(), year_month or current_year_month())

    def status(self, need_id: str, year_month: Optional[str] = None) -> NeedStatus:
        return need_status(
            self.get(need_id),
            self.payments.find_all(),
            year_month or current_year_month(),
        )

    def with_status(self, year_month: Optional[str] = None) -> List[NeedStatus]:
        """Every need visible in the month, with its payment status."""
        return needs_with_status(
            self._records.values(),
            self.payments.find_all(),
            year_month or current_year_month(),
        )

    def budget_comparison(self, year_month: Optional[str] = None) -> List[BudgetComparison]:
        return budget_comparison(self.with_status(year_month))

    def totals(self, year_month: Optional[str] = None) -> NeedTotals:
        return need_totals(self.with_status(year_month))
