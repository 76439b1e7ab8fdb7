"""Savings goal calculations.

All functions are pure and are evaluated on every read; nothing derived
from deposits is ever stored.
"""

import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from dates import add_months, month_difference
from models.fields import to_money
from models.savings import SavingsDeposit, SavingsGoal


def total_saved(deposits: Iterable[SavingsDeposit]) -> Decimal:
    return sum((d.amount for d in deposits), Decimal("0"))


def savings_progress(saved, target) -> float:
    """Percentage of target reached, clamped to [0, 100]; 0 when target <= 0."""
    saved, target = to_money(saved), to_money(target)
    if target <= 0:
        return 0.0
    return float(min(max(saved / target * 100, Decimal("0")), Decimal("100")))


def remaining_amount(saved, target) -> Decimal:
    return max(to_money(target) - to_money(saved), Decimal("0"))


def days_until_target(target_date: Optional[date], today: date) -> Optional[int]:
    if target_date is None:
        return None
    return (target_date - today).days


def estimate_completion(
    saved: Decimal,
    target: Decimal,
    deposits: Iterable[SavingsDeposit],
    today: date,
) -> Optional[date]:
    """Project when the goal will be reached at the historical deposit rate.

    The rate is the total saved divided by the number of months between the
    earliest and latest deposit (at least one month). The projection starts
    from ``today``, not from the last deposit.

    Returns:
        Projected date, or None when the goal is already met, fewer than
        two deposits exist, or the rate is not positive.
    """
    deposits = list(deposits)
    if saved >= target or len(deposits) < 2:
        return None

    deposit_dates = sorted(d.date for d in deposits)
    months = max(1, month_difference(deposit_dates[0], deposit_dates[-1]))
    avg_monthly = saved / months
    if avg_monthly <= 0:
        return None

    months_to_complete = math.ceil((target - saved) / avg_monthly)
    return add_months(today, months_to_complete)


@dataclass(frozen=True)
class SavingsDetails:
    goal: SavingsGoal
    total_saved: Decimal
    remaining: Decimal
    progress: float
    is_complete: bool
    days_until_target: Optional[int]
    estimated_completion: Optional[date]


def savings_details(goal: SavingsGoal, today: date) -> SavingsDetails:
    saved = total_saved(goal.deposits)
    return SavingsDetails(
        goal=goal,
        total_saved=saved,
        remaining=remaining_amount(saved, goal.target_amount),
        progress=savings_progress(saved, goal.target_amount),
        is_complete=saved >= goal.target_amount,
        days_until_target=days_until_target(goal.target_date, today),
        estimated_completion=estimate_completion(
            saved, goal.target_amount, goal.deposits, today
        ),
    )


@dataclass(frozen=True)
class SavingsTotals:
    total_target: Decimal
    total_saved: Decimal
    total_remaining: Decimal
    overall_progress: float
    completed_count: int
    in_progress_count: int
    total_count: int


def savings_totals(details: List[SavingsDetails]) -> SavingsTotals:
    total_target = sum((d.goal.target_amount for d in details), Decimal("0"))
    saved = sum((d.total_saved for d in details), Decimal("0"))
    completed = sum(1 for d in details if d.is_complete)
    overall = float(saved / total_target * 100) if total_target > 0 else 0.0
    return SavingsTotals(
        total_target=total_target,
        total_saved=saved,
        total_remaining=total_target - saved,
        overall_progress=overall,
        completed_count=completed,
        in_progress_count=len(details) - completed,
        total_count=len(details),
    )
