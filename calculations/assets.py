"""Net worth and asset value-change calculations."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List

from dates import last_n_months, month_bounds, parse_year_month
from models.asset import Asset


def total_assets(assets: Iterable[Asset]) -> Decimal:
    return sum((a.current_value for a in assets if not a.is_liability), Decimal("0"))


def total_liabilities(assets: Iterable[Asset]) -> Decimal:
    return sum((a.current_value for a in assets if a.is_liability), Decimal("0"))


def net_worth(assets: Iterable[Asset]) -> Decimal:
    assets = list(assets)
    return total_assets(assets) - total_liabilities(assets)


@dataclass(frozen=True)
class ValueChange:
    amount: Decimal
    percentage: float


def value_change(asset: Asset) -> ValueChange:
    """Change from the initial value; 0% when the initial value is 0."""
    amount = asset.current_value - asset.initial_value
    if asset.initial_value == 0:
        return ValueChange(amount=amount, percentage=0.0)
    return ValueChange(amount=amount, percentage=float(amount / asset.initial_value * 100))


def value_on(asset: Asset, day: date) -> Decimal:
    """Latest recorded value on or before ``day``; 0 before the first entry."""
    value = Decimal("0")
    latest = None
    for entry in asset.value_history:
        if entry.date <= day and (latest is None or entry.date >= latest):
            latest = entry.date
            value = entry.value
    return value


@dataclass(frozen=True)
class NetWorthPoint:
    month: str
    assets: Decimal
    liabilities: Decimal
    net_worth: Decimal


def net_worth_history(
    assets: Iterable[Asset], months: int, today: date
) -> List[NetWorthPoint]:
    """Net worth at the end of each of the last ``months`` months, oldest first."""
    assets = list(assets)
    history = []
    for year_month in last_n_months(months, today):
        _, month_end = month_bounds(*parse_year_month(year_month))
        owned = sum(
            (value_on(a, month_end) for a in assets if not a.is_liability),
            Decimal("0"),
        )
        owed = sum(
            (value_on(a, month_end) for a in assets if a.is_liability), Decimal("0")
        )
        history.append(
            NetWorthPoint(
                month=year_month, assets=owned, liabilities=owed, net_worth=owned - owed
            )
        )
    return history
