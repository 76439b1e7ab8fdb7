"""Installment schedule calculations.

Progress is derived from the payment list alone, so it can never drift
from the payments actually recorded.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from models.installment import Installment, InstallmentPayment


def total_paid(payments: Iterable[InstallmentPayment]) -> Decimal:
    return sum((p.amount for p in payments), Decimal("0"))


@dataclass(frozen=True)
class InstallmentProgress:
    """Derived schedule position.

    Attributes:
        current_month: Number of fully paid periods.
        period_paid: Amount paid towards the period in progress.
        remaining_this_period: Amount still due for the period in progress.
    """

    installment: Installment
    total_paid: Decimal
    current_month: int
    period_paid: Decimal
    remaining_this_period: Decimal
    remaining_months: int
    remaining_amount: Decimal
    progress_percentage: float

    @property
    def is_paid_off(self) -> bool:
        return self.total_paid >= self.installment.total_amount


def installment_progress(installment: Installment) -> InstallmentProgress:
    paid = total_paid(installment.payments)
    monthly = installment.monthly_amount

    current_month = int(paid // monthly) if monthly > 0 else 0
    period_paid = paid - current_month * monthly
    total = installment.total_amount
    progress = float(min(paid / total * 100, Decimal("100"))) if total > 0 else 0.0

    return InstallmentProgress(
        installment=installment,
        total_paid=paid,
        current_month=current_month,
        period_paid=period_paid,
        remaining_this_period=monthly - period_paid,
        remaining_months=max(installment.total_tenor - current_month, 0),
        remaining_amount=max(total - paid, Decimal("0")),
        progress_percentage=progress,
    )


def payment_rejection_reason(installment: Installment, amount: Decimal) -> Optional[str]:
    """Why a payment of ``amount`` cannot be accepted, or None if it can."""
    if amount <= 0:
        return f"Payment amount must be positive, got {amount}"
    if installment.status == "paid_off":
        return f"Installment {installment.id} is already paid off"
    remaining = installment.total_amount - total_paid(installment.payments)
    if amount > remaining:
        return f"Payment of {amount} exceeds the remaining amount of {remaining}"
    return None


@dataclass(frozen=True)
class InstallmentTotals:
    active_count: int
    paid_off_count: int
    total_monthly_amount: Decimal
    total_remaining_amount: Decimal


def installment_totals(progress: List[InstallmentProgress]) -> InstallmentTotals:
    active = [p for p in progress if p.installment.status == "active"]
    return InstallmentTotals(
        active_count=len(active),
        paid_off_count=len(progress) - len(active),
        total_monthly_amount=sum(
            (p.installment.monthly_amount for p in active), Decimal("0")
        ),
        total_remaining_amount=sum((p.remaining_amount for p in active), Decimal("0")),
    )
