"""Dashboard figures composed from the services."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import List, Optional

from calculations.dashboard import (
    CashflowPoint,
    CategoryBreakdown,
    CategoryComparison,
    EmergencyFundStatus,
    MonthlySummary,
    cashflow,
    category_comparison,
    emergency_fund_progress,
    expense_breakdown,
    monthly_summary,
)
from calculations.installments import InstallmentTotals
from calculations.monthly_needs import NeedTotals
from calculations.savings import SavingsTotals
from calculations.wishlist import WishlistTotals
from dates import add_months, current_date, last_n_months, year_month_of

# Asset types that count as liquid money for the emergency fund
EMERGENCY_FUND_ASSET_TYPES = ("cash", "savings")


def get_monthly_summary(services, year: int, month: int) -> MonthlySummary:
    return monthly_summary(services.transactions.find_all(), year, month)


def get_expense_breakdown(services, year: int, month: int) -> List[CategoryBreakdown]:
    """Expenses of one month per category, largest first."""
    return expense_breakdown(
        services.transactions.find_by_month(year, month),
        services.categories.name_map(),
    )


def get_cashflow(services, months: int = 6, today: Optional[date] = None) -> List[CashflowPoint]:
    """Income and expense for the last ``months`` months, oldest first."""
    return cashflow(services.transactions.find_all(), last_n_months(months, today))


def get_category_comparison(
    services, year: int, month: int, limit: int = 5
) -> List[CategoryComparison]:
    """Top expense categories of a month against the month before.

    Args:
        services: Services container.
        year: Year of the month to compare.
        month: Month to compare (1-12).
        limit: Number of categories to include.

    Returns:
        One entry per category, largest current expense first.
    """
    previous = add_months(date(year, month, 1), -1)
    return category_comparison(
        services.transactions.find_by_month(year, month),
        services.transactions.find_by_month(previous.year, previous.month),
        services.categories.name_map(),
        limit,
    )


def get_emergency_fund(services) -> EmergencyFundStatus:
    """Progress of liquid assets towards the emergency fund target in the settings."""
    settings = services.settings.get()
    liquid = sum(
        (
            a.current_value
            for a in services.assets.find_assets()
            if a.type in EMERGENCY_FUND_ASSET_TYPES
        ),
        Decimal("0"),
    )
    return emergency_fund_progress(
        settings.monthly_living_cost, settings.emergency_fund_multiplier, liquid
    )


@dataclass(frozen=True)
class Overview:
    """Everything the summary screen shows for one month."""

    summary: MonthlySummary
    savings: SavingsTotals
    installments: InstallmentTotals
    needs: NeedTotals
    wishlist: WishlistTotals
    emergency_fund: EmergencyFundStatus
    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal


def get_overview(services, today: Optional[date] = None) -> Overview:
    """Build the overview for the month containing ``today``."""
    today = today or current_date()
    return Overview(
        summary=get_monthly_summary(services, today.year, today.month),
        savings=services.savings.totals(today),
        installments=services.installments.totals(),
        needs=services.monthly_needs.totals(year_month_of(today)),
        wishlist=services.wishlist.totals(),
        emergency_fund=get_emergency_fund(services),
        total_assets=services.assets.total_assets(),
        total_liabilities=services.assets.total_liabilities(),
        net_worth=services.assets.net_worth(),
    )
