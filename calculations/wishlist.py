"""Wishlist progress, ETA and ordering."""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, List, Optional

from models.fields import to_money
from models.wishlist import WishlistItem

_PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
SORT_KEYS = ("priority", "progress", "date")


def wishlist_progress(current_saved, target_price) -> float:
    current_saved, target_price = to_money(current_saved), to_money(target_price)
    if target_price <= 0:
        return 0.0
    progress = current_saved / target_price * 100
    return float(min(max(progress, Decimal("0")), Decimal("100")))


def months_to_target(target_price, current_saved, monthly_savings) -> Optional[int]:
    """Months of saving at ``monthly_savings`` still needed.

    Returns:
        0 if the target is already met, None if the rate is not positive.
    """
    remaining = to_money(target_price) - to_money(current_saved)
    if remaining <= 0:
        return 0
    rate = to_money(monthly_savings)
    if rate <= 0:
        return None
    return math.ceil(remaining / rate)


@dataclass(frozen=True)
class WishlistProgress:
    item: WishlistItem
    progress: float
    remaining: Decimal
    months_to_target: Optional[int]


def item_progress(item: WishlistItem, monthly_savings) -> WishlistProgress:
    return WishlistProgress(
        item=item,
        progress=wishlist_progress(item.current_saved, item.target_price),
        remaining=max(item.target_price - item.current_saved, Decimal("0")),
        months_to_target=months_to_target(
            item.target_price, item.current_saved, monthly_savings
        ),
    )


def sort_items(items: Iterable[WishlistItem], by: str = "priority") -> List[WishlistItem]:
    """Order wishlist items.

    Args:
        items: Items to sort.
        by: 'priority' (high first), 'progress' (most progress first) or
            'date' (most recently created first).

    Raises:
        ValueError: For an unknown sort key.
    """
    items = list(items)
    if by == "priority":
        return sorted(items, key=lambda i: _PRIORITY_ORDER.get(i.priority, 1))
    if by == "progress":
        return sorted(
            items,
            key=lambda i: wishlist_progress(i.current_saved, i.target_price),
            reverse=True,
        )
    if by == "date":
        return sorted(items, key=lambda i: i.created_at, reverse=True)
    raise ValueError(f"Unknown wishlist sort key: {by}")


@dataclass(frozen=True)
class WishlistTotals:
    total_target: Decimal
    total_saved: Decimal
    total_remaining: Decimal


def wishlist_totals(progress: Iterable[WishlistProgress]) -> WishlistTotals:
    """Totals over items that are not bought yet."""
    active = [p for p in progress if p.item.status != "bought"]
    return WishlistTotals(
        total_target=sum((p.item.target_price for p in active), Decimal("0")),
        total_saved=sum((p.item.current_saved for p in active), Decimal("0")),
        total_remaining=sum((p.remaining for p in active), Decimal("0")),
    )
