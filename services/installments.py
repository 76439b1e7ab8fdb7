"""Installment store. Each installment owns its payments."""

import dataclasses
from collections import defaultdict
from typing import List, Optional

from calculations.installments import (
    InstallmentProgress,
    InstallmentTotals,
    installment_progress,
    installment_totals,
    payment_rejection_reason,
    total_paid,
)
from dates import current_date, now_utc, parse_date, parse_timestamp
from errors import NotFoundError, PaymentRejectedError
from ids import generate_id
from logger import get_logger
from models.fields import date_to_json, optional_money, timestamp_to_json, to_money
from models.installment import Installment, InstallmentPayment
from models.transaction import Transaction
from services.records import RecordStore

logger = get_logger()

_PAYMENT_COLUMNS = (
    "id",
    "installment_id",
    "amount",
    "date",
    "note",
    "transaction_id",
    "created_at",
)


class InstallmentService(RecordStore[Installment]):
    """Service for managing installment loans and their payments.

    Args:
        db_manager: Database manager instance for database operations.
        transactions: Transaction store receiving auto-generated expenses.
    """

    TABLE = "installments"
    ENTITY = "Installment"
    COLUMNS = (
        "id",
        "name",
        "total_amount",
        "monthly_amount",
        "total_tenor",
        "start_date",
        "status",
        "category_id",
        "subcategory_id",
        "auto_generate_transaction",
        "note",
        "created_at",
        "updated_at",
    )
    ORDER_BY = "start_date, created_at"
    UPDATABLE = frozenset(
        {
            "name",
            "total_amount",
            "monthly_amount",
            "total_tenor",
            "start_date",
            "category_id",
            "subcategory_id",
            "auto_generate_transaction",
            "note",
        }
    )
    MONEY_FIELDS = frozenset({"total_amount", "monthly_amount"})
    DATE_FIELDS = frozenset({"start_date"})

    def __init__(self, db_manager, transactions):
        super().__init__(db_manager)
        self.transactions = transactions

    def _to_row(self, i: Installment) -> tuple:
        return (
            i.id,
            i.name,
            str(i.total_amount),
            str(i.monthly_amount),
            i.total_tenor,
            date_to_json(i.start_date),
            i.status,
            i.category_id,
            i.subcategory_id,
            int(i.auto_generate_transaction),
            i.note,
            timestamp_to_json(i.created_at),
            timestamp_to_json(i.updated_at),
        )

    def _from_row(self, row) -> Installment:
        return Installment(
            id=row[0],
            name=row[1],
            total_amount=to_money(row[2]),
            monthly_amount=to_money(row[3]),
            total_tenor=row[4],
            start_date=parse_date(row[5]),
            status=row[6],
            category_id=row[7],
            subcategory_id=row[8],
            auto_generate_transaction=bool(row[9]),
            note=row[10],
            created_at=parse_timestamp(row[11]),
            updated_at=parse_timestamp(row[12]),
        )

    def _load(self, conn) -> List[Installment]:
        installments = super()._load(conn)
        cursor = conn.execute(
            f"SELECT {', '.join(_PAYMENT_COLUMNS)} FROM installment_payments ORDER BY rowid"
        )
        payments = defaultdict(list)
        for row in cursor.fetchall():
            payments[row[1]].append(
                InstallmentPayment(
                    id=row[0],
                    installment_id=row[1],
                    amount=to_money(row[2]),
                    date=parse_date(row[3]),
                    note=row[4],
                    transaction_id=row[5],
                    created_at=parse_timestamp(row[6]),
                )
            )
        return [
            dataclasses.replace(i, payments=tuple(payments[i.id])) for i in installments
        ]

    def _insert_payment(self, conn, p: InstallmentPayment, skip_existing: bool = False) -> bool:
        verb = "INSERT OR IGNORE" if skip_existing else "INSERT"
        cursor = conn.execute(
            f"""
            {verb} INTO installment_payments ({', '.join(_PAYMENT_COLUMNS)})
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                p.id,
                p.installment_id,
                str(p.amount),
                date_to_json(p.date),
                p.note,
                p.transaction_id,
                timestamp_to_json(p.created_at),
            ),
        )
        return cursor.rowcount > 0

    def _insert_row(self, conn, inst: Installment, skip_existing: bool = False) -> bool:
        inserted = super()._insert_row(conn, inst, skip_existing)
        if inserted:
            for payment in inst.payments:
                if not self._insert_payment(conn, payment, skip_existing):
                    self.skipped_children += 1
        return inserted

    def _delete_children(self, conn, record_id: str) -> None:
        conn.execute(
            "DELETE FROM installment_payments WHERE installment_id = ?", (record_id,)
        )

    def clear(self, conn) -> None:
        conn.execute("DELETE FROM installment_payments")
        super().clear(conn)

    def add(
        self,
        name: str,
        monthly_amount,
        total_tenor: int,
        start_date,
        total_amount=None,
        category_id: Optional[str] = None,
        subcategory_id: Optional[str] = None,
        auto_generate_transaction: bool = False,
        note: Optional[str] = None,
    ) -> Installment:
        """Create a new active installment.

        Args:
            name: Display name.
            monthly_amount: Amount due per month.
            total_tenor: Number of monthly periods.
            start_date: Date of the first period.
            total_amount: Total owed. Defaults to ``monthly_amount * total_tenor``.
            category_id: Category for auto-generated transactions.
            subcategory_id: Subcategory for auto-generated transactions.
            auto_generate_transaction: Record an expense for every payment.
            note: Optional free text.

        Returns:
            The created Installment.
        """
        monthly_amount = to_money(monthly_amount)
        total_amount = optional_money(total_amount)
        now = now_utc()
        return self._store(
            Installment(
                id=generate_id(),
                name=name.strip(),
                total_amount=(
                    total_amount
                    if total_amount is not None
                    else monthly_amount * total_tenor
                ),
                monthly_amount=monthly_amount,
                total_tenor=total_tenor,
                start_date=parse_date(start_date),
                created_at=now,
                updated_at=now,
                category_id=category_id,
                subcategory_id=subcategory_id,
                auto_generate_transaction=auto_generate_transaction,
                note=note,
            )
        )

    def _derive(self, inst: Installment) -> Installment:
        """Lowering the total to what has been paid already pays it off."""
        if inst.status == "active" and total_paid(inst.payments) >= inst.total_amount:
            logger.info(f"Installment {inst.name} is paid off")
            return dataclasses.replace(inst, status="paid_off")
        return inst

    def add_payment(
        self,
        installment_id: str,
        amount,
        date=None,
        note: Optional[str] = None,
    ) -> InstallmentPayment:
        """Record a payment against an installment.

        When the payments reach the total amount the installment becomes
        ``paid_off`` in the same write. With ``auto_generate_transaction``
        an expense transaction is recorded alongside the payment.

        Args:
            installment_id: Installment being paid.
            amount: Positive amount.
            date: Payment date, defaults to today.
            note: Optional free text.

        Returns:
            The created InstallmentPayment.

        Raises:
            NotFoundError: If the installment doesn't exist.
            PaymentRejectedError: If the amount is not positive, the
                installment is paid off or the payment exceeds the
                remaining amount.
            PersistenceError: If the payment could not be saved.
        """
        inst = self.get(installment_id)
        amount = to_money(amount)
        reason = payment_rejection_reason(inst, amount)
        if reason:
            logger.warning(f"Rejected payment for installment {installment_id}: {reason}")
            raise PaymentRejectedError(reason)

        now = now_utc()
        paid_on = parse_date(date) if date else current_date()

        transaction = None
        if inst.auto_generate_transaction:
            transaction = Transaction(
                id=generate_id(),
                date=paid_on,
                type="expense",
                amount=amount,
                category_id=inst.category_id or "",
                created_at=now,
                updated_at=now,
                subcategory_id=inst.subcategory_id,
                note=f"Installment payment: {inst.name}",
            )

        payment = InstallmentPayment(
            id=generate_id(),
            installment_id=installment_id,
            amount=amount,
            date=paid_on,
            created_at=now,
            note=note,
            transaction_id=transaction.id if transaction else None,
        )
        payments = inst.payments + (payment,)
        status = "paid_off" if total_paid(payments) >= inst.total_amount else inst.status
        updated = dataclasses.replace(
            inst, payments=payments, status=status, updated_at=now
        )

        with self._write("add payment to") as conn:
            self._insert_payment(conn, payment)
            self._update_row(conn, updated)
            if transaction:
                self.transactions.stage(conn, transaction)
        self._records[installment_id] = updated
        if status == "paid_off":
            logger.info(f"Installment {inst.name} is paid off")
        if transaction:
            self.transactions.commit_staged(transaction)
        self._notify()
        return payment

    def remove_payment(self, installment_id: str, payment_id: str) -> None:
        """Remove one payment from an active installment.

        A transaction generated for the payment is left in place.

        Raises:
            NotFoundError: If the installment or the payment doesn't exist.
            PaymentRejectedError: If the installment is already paid off.
        """
        inst = self.get(installment_id)
        remaining = tuple(p for p in inst.payments if p.id != payment_id)
        if len(remaining) == len(inst.payments):
            raise NotFoundError("Payment", payment_id)
        if inst.status == "paid_off":
            raise PaymentRejectedError(
                f"Installment {installment_id} is paid off; its payments are final"
            )
        updated = dataclasses.replace(inst, payments=remaining, updated_at=now_utc())

        with self._write("remove payment from") as conn:
            conn.execute("DELETE FROM installment_payments WHERE id = ?", (payment_id,))
            self._update_row(conn, updated)
        self._records[installment_id] = updated
        self._notify()

    def find_active(self) -> List[Installment]:
        return [i for i in self._records.values() if i.status == "active"]

    def find_paid_off(self) -> List[Installment]:
        return [i for i in self._records.values() if i.status == "paid_off"]

    def with_progress(self) -> List[InstallmentProgress]:
        return [installment_progress(i) for i in self._records.values()]

    def totals(self) -> InstallmentTotals:
        return installment_totals(self.with_progress())
