"""Cash-flow summaries over transactions, and emergency-fund progress."""

from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Mapping

from dates import year_month_of
from models.fields import to_money
from models.transaction import Transaction


@dataclass(frozen=True)
class MonthlySummary:
    year: int
    month: int
    total_income: Decimal
    total_expense: Decimal
    surplus: Decimal
    surplus_rate: float
    transaction_count: int


def surplus_rate(income, expense) -> float:
    """Share of income left after expenses, in percent; 0 without income."""
    income, expense = to_money(income), to_money(expense)
    if income <= 0:
        return 0.0
    return float((income - expense) / income * 100)


def percentage_change(current, previous) -> float:
    """Relative change in percent. From zero, any increase counts as 100%."""
    current, previous = to_money(current), to_money(previous)
    if previous == 0:
        return 100.0 if current > 0 else 0.0
    return float((current - previous) / previous * 100)


def transactions_in_month(
    transactions: Iterable[Transaction], year: int, month: int
) -> List[Transaction]:
    return [t for t in transactions if t.date.year == year and t.date.month == month]


def monthly_summary(
    transactions: Iterable[Transaction], year: int, month: int
) -> MonthlySummary:
    """Summarize income and expense for one month. Transfers are counted but not summed."""
    in_month = transactions_in_month(transactions, year, month)
    income = sum((t.amount for t in in_month if t.type == "income"), Decimal("0"))
    expense = sum((t.amount for t in in_month if t.type == "expense"), Decimal("0"))
    return MonthlySummary(
        year=year,
        month=month,
        total_income=income,
        total_expense=expense,
        surplus=income - expense,
        surplus_rate=surplus_rate(income, expense),
        transaction_count=len(in_month),
    )


@dataclass(frozen=True)
class CategoryBreakdown:
    category_id: str
    category_name: str
    amount: Decimal
    percentage: float


def expense_breakdown(
    transactions: Iterable[Transaction], category_names: Mapping[str, str]
) -> List[CategoryBreakdown]:
    """Expense totals per category, largest first.

    Args:
        transactions: Transactions to group (non-expenses are ignored).
        category_names: Category ID to display name. Unknown IDs show as
            "Unknown" since categories are weak references.
    """
    totals: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for t in transactions:
        if t.type == "expense":
            totals[t.category_id] += t.amount

    grand_total = sum(totals.values(), Decimal("0"))
    if grand_total == 0:
        return []

    breakdown = [
        CategoryBreakdown(
            category_id=category_id,
            category_name=category_names.get(category_id, "Unknown"),
            amount=amount,
            percentage=float(amount / grand_total * 100),
        )
        for category_id, amount in totals.items()
    ]
    return sorted(breakdown, key=lambda b: b.amount, reverse=True)


@dataclass(frozen=True)
class CategoryComparison:
    category_id: str
    category_name: str
    current_month: Decimal
    previous_month: Decimal
    change: Decimal
    change_percentage: float


def category_comparison(
    current: Iterable[Transaction],
    previous: Iterable[Transaction],
    category_names: Mapping[str, str],
    limit: int = 5,
) -> List[CategoryComparison]:
    """Compare the top expense categories of one month against the month before."""
    previous_amounts = {
        b.category_id: b.amount for b in expense_breakdown(previous, category_names)
    }
    comparisons = []
    for b in expense_breakdown(current, category_names)[:limit]:
        before = previous_amounts.get(b.category_id, Decimal("0"))
        comparisons.append(
            CategoryComparison(
                category_id=b.category_id,
                category_name=b.category_name,
                current_month=b.amount,
                previous_month=before,
                change=b.amount - before,
                change_percentage=percentage_change(b.amount, before),
            )
        )
    return comparisons


@dataclass(frozen=True)
class CashflowPoint:
    month: str  # YYYY-MM
    income: Decimal
    expense: Decimal
    surplus: Decimal


def cashflow(
    transactions: Iterable[Transaction], months: List[str]
) -> List[CashflowPoint]:
    """Income and expense for each requested ``YYYY-MM``, in the order given."""
    income: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    expense: Dict[str, Decimal] = defaultdict(lambda: Decimal("0"))
    for t in transactions:
        key = year_month_of(t.date)
        if t.type == "income":
            income[key] += t.amount
        elif t.type == "expense":
            expense[key] += t.amount

    return [
        CashflowPoint(
            month=m,
            income=income[m],
            expense=expense[m],
            surplus=income[m] - expense[m],
        )
        for m in months
    ]


@dataclass(frozen=True)
class EmergencyFundStatus:
    monthly_living_cost: Decimal
    target_multiplier: int
    target_amount: Decimal
    current_amount: Decimal
    progress: float


def emergency_fund_progress(
    monthly_living_cost, multiplier: int, current_savings
) -> EmergencyFundStatus:
    monthly_living_cost = to_money(monthly_living_cost)
    current_savings = to_money(current_savings)
    target = monthly_living_cost * multiplier
    progress = (
        float(min(current_savings / target * 100, Decimal("100"))) if target > 0 else 0.0
    )
    return EmergencyFundStatus(
        monthly_living_cost=monthly_living_cost,
        target_multiplier=multiplier,
        target_amount=target,
        current_amount=current_savings,
        progress=progress,
    )
