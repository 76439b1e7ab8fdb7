"""Monthly need recurrence and budget-variance calculations."""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from dates import parse_year_month, year_month_difference
from models.monthly_need import MonthlyNeed, MonthlyNeedPayment

_RECURRENCE_LABELS = {
    "forever": "Every month",
    "monthly": "Monthly (12 months)",
    "yearly": "Yearly",
}


def recurrence_label(period: str) -> str:
    return _RECURRENCE_LABELS.get(period, _RECURRENCE_LABELS["forever"])


def should_show_for_month(need: MonthlyNeed, year_month: str) -> bool:
    """Whether a need is active in the given month.

    Args:
        need: The monthly need.
        year_month: Month to check, ``YYYY-MM``.
    """
    offset = year_month_difference(need.start_month, year_month)
    if offset < 0:
        return False

    if need.recurrence_period == "monthly":
        return offset < 12
    if need.recurrence_period == "yearly":
        return parse_year_month(year_month)[1] == parse_year_month(need.start_month)[1]
    return True


def needs_for_month(needs: Iterable[MonthlyNeed], year_month: str) -> List[MonthlyNeed]:
    return [n for n in needs if should_show_for_month(n, year_month)]


def find_payment(
    payments: Iterable[MonthlyNeedPayment], need_id: str, year_month: str
) -> Optional[MonthlyNeedPayment]:
    for payment in payments:
        if payment.need_id == need_id and payment.year_month == year_month:
            return payment
    return None


@dataclass(frozen=True)
class NeedStatus:
    need: MonthlyNeed
    year_month: str
    is_paid: bool
    actual_amount: Decimal
    difference: Decimal  # budget - actual
    is_over_budget: bool
    recurrence_label: str


def need_status(
    need: MonthlyNeed, payments: Iterable[MonthlyNeedPayment], year_month: str
) -> NeedStatus:
    """Payment status of a need for a month; unpaid with zero actual if no payment."""
    payment = find_payment(payments, need.id, year_month)
    actual = payment.actual_amount if payment else Decimal("0")
    return NeedStatus(
        need=need,
        year_month=year_month,
        is_paid=payment is not None,
        actual_amount=actual,
        difference=need.budget_amount - actual,
        is_over_budget=actual > need.budget_amount,
        recurrence_label=recurrence_label(need.recurrence_period),
    )


def needs_with_status(
    needs: Iterable[MonthlyNeed],
    payments: Iterable[MonthlyNeedPayment],
    year_month: str,
) -> List[NeedStatus]:
    """Status of every need visible in ``year_month``."""
    payments = list(payments)
    return [need_status(n, payments, year_month) for n in needs_for_month(needs, year_month)]


@dataclass(frozen=True)
class BudgetComparison:
    need_id: str
    name: str
    budget: Decimal
    actual: Decimal
    difference: Decimal
    is_over_budget: bool


def budget_comparison(statuses: Iterable[NeedStatus]) -> List[BudgetComparison]:
    return [
        BudgetComparison(
            need_id=s.need.id,
            name=s.need.name,
            budget=s.need.budget_amount,
            actual=s.actual_amount,
            difference=s.difference,
            is_over_budget=s.is_over_budget,
        )
        for s in statuses
    ]


@dataclass(frozen=True)
class NeedTotals:
    total_budget: Decimal
    total_actual: Decimal
    difference: Decimal
    paid_count: int
    unpaid_count: int


def need_totals(statuses: List[NeedStatus]) -> NeedTotals:
    """Totals over the needs visible in a month."""
    total_budget = sum((s.need.budget_amount for s in statuses), Decimal("0"))
    total_actual = sum((s.actual_amount for s in statuses), Decimal("0"))
    paid = sum(1 for s in statuses if s.is_paid)
    return NeedTotals(
        total_budget=total_budget,
        total_actual=total_actual,
        difference=total_budget - total_actual,
        paid_count=paid,
        unpaid_count=len(statuses) - paid,
    )
