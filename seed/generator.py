"""Sample data for demos and manual testing.

``generate_seed_snapshot`` builds a complete, internally consistent
snapshot document: transactions reference the generated categories,
installments and monthly needs point at the installment and household
categories, and the savings goals link to wishlist items. The result is
imported like any backup file.
"""

import random
import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional

from dates import add_months, current_date, format_timestamp, year_month_of
from logger import get_logger
from models.asset import Asset, AssetValue
from models.category import Category
from models.installment import Installment, InstallmentPayment
from models.monthly_need import MonthlyNeed, MonthlyNeedPayment
from models.savings import SavingsDeposit, SavingsGoal
from models.settings import CURRENT_SCHEMA_VERSION
from models.transaction import Transaction
from models.wishlist import WishlistItem
from seed.defaults import load_default_categories

logger = get_logger()

DEFAULT_SEED = 42
MONTHS_OF_HISTORY = 3

# Expense category -> (min, max) amount of a single expense
EXPENSE_RANGES = {
    "Makan": (25000, 150000),
    "Transportasi": (20000, 150000),
    "Hiburan": (50000, 300000),
    "Belanja": (100000, 750000),
    "Kesehatan": (50000, 500000),
}


def _at(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, tzinfo=timezone.utc)


def _first_of_month(day: date) -> date:
    return day.replace(day=1)


class _SeedBuilder:
    """Holds the RNG and the reference date while the collections are built."""

    def __init__(self, seed: int, today: date):
        self.rng = random.Random(seed)
        self.today = today

    def new_id(self) -> str:
        return uuid.UUID(int=self.rng.getrandbits(128), version=4).hex

    def amount(self, low: int, high: int) -> Decimal:
        """Random amount between low and high, rounded to thousands."""
        return Decimal(round(self.rng.randint(low, high) / 1000) * 1000)

    def months(self) -> List[date]:
        """First day of each generated month, oldest first."""
        current = _first_of_month(self.today)
        return [add_months(current, -i) for i in range(MONTHS_OF_HISTORY - 1, -1, -1)]

    def last_day(self, month_start: date) -> int:
        """Last day that may carry data: today for the current month."""
        if year_month_of(month_start) == year_month_of(self.today):
            return self.today.day
        return (add_months(month_start, 1) - month_start).days

    def categories(self) -> List[Category]:
        return load_default_categories(new_id=self.new_id, now=_at(self.months()[0]))

    def transactions(self, categories: List[Category]) -> List[Transaction]:
        by_name = {(c.type, c.name): c for c in categories}
        salary = by_name[("income", "Gaji")]
        bonus = by_name[("income", "Bonus")]

        transactions = []

        def add(day: date, type: str, amount: Decimal, category: Category, subcategory=None, note=None):
            transactions.append(
                Transaction(
                    id=self.new_id(),
                    date=day,
                    type=type,
                    amount=amount,
                    category_id=category.id,
                    created_at=_at(day),
                    updated_at=_at(day),
                    subcategory_id=subcategory.id if subcategory else None,
                    note=note,
                    payment_method=self.rng.choice(("cash", "bank", "e-wallet")),
                )
            )

        for month_start in self.months():
            add(month_start, "income", self.amount(8000000, 15000000), salary, note="Gaji bulanan")
            last_day = self.last_day(month_start)
            if self.rng.random() < 0.3:
                day = month_start.replace(day=self.rng.randint(1, last_day))
                add(day, "income", self.amount(1000000, 5000000), bonus, note="Bonus proyek")

            for name, (low, high) in EXPENSE_RANGES.items():
                category = by_name[("expense", name)]
                for _ in range(self.rng.randint(2, 6)):
                    day = month_start.replace(day=self.rng.randint(1, last_day))
                    subcategory = (
                        self.rng.choice(category.subcategories) if category.subcategories else None
                    )
                    label = subcategory.name if subcategory else "Umum"
                    add(day, "expense", self.amount(low, high), category, subcategory, f"{name} - {label}")

        transactions.sort(key=lambda t: (t.date, t.created_at), reverse=True)
        return transactions

    def wishlist(self) -> List[WishlistItem]:
        now = _at(self.today)
        items = [
            ("MacBook Pro M3", 25000000, "high", 8000000, 6, "Untuk kerja dan coding"),
            ("iPhone 15 Pro", 18000000, "medium", 3000000, 9, "Upgrade dari iPhone lama"),
            ("Mechanical Keyboard", 2500000, "low", 0, None, "Keychron Q1"),
            ("Monitor 4K 27\"", 5000000, "medium", 2000000, 3, "Untuk WFH setup"),
        ]
        return [
            WishlistItem(
                id=self.new_id(),
                name=name,
                target_price=Decimal(price),
                priority=priority,
                created_at=now,
                updated_at=now,
                current_saved=Decimal(saved),
                status="saving" if saved else "planned",
                target_date=add_months(_first_of_month(self.today), months) if months else None,
                note=note,
            )
            for name, price, priority, saved, months, note in items
        ]

    def installments(self, categories: List[Category]) -> List[Installment]:
        cicilan = next(c for c in categories if c.type == "expense" and c.name == "Cicilan")
        subcategories = {s.name: s.id for s in cicilan.subcategories}
        plans = [
            ("Cicilan Motor", 750000, 24, 8, "Kendaraan", True, "Honda Beat"),
            ("Cicilan HP", 1000000, 12, 5, "Gadget", False, "Samsung Galaxy S24"),
        ]

        installments = []
        for name, monthly, tenor, paid_months, subcategory, auto, note in plans:
            installment_id = self.new_id()
            start = add_months(_first_of_month(self.today), -paid_months)
            payments = tuple(
                InstallmentPayment(
                    id=self.new_id(),
                    installment_id=installment_id,
                    amount=Decimal(monthly),
                    date=add_months(start, i),
                    created_at=_at(add_months(start, i)),
                )
                for i in range(paid_months)
            )
            installments.append(
                Installment(
                    id=installment_id,
                    name=name,
                    total_amount=Decimal(monthly * tenor),
                    monthly_amount=Decimal(monthly),
                    total_tenor=tenor,
                    start_date=start,
                    created_at=_at(start),
                    updated_at=_at(self.today),
                    payments=payments,
                    category_id=cicilan.id,
                    subcategory_id=subcategories.get(subcategory),
                    auto_generate_transaction=auto,
                    note=note,
                )
            )
        return installments

    def monthly_needs(self, categories: List[Category]):
        household = next(
            c for c in categories if c.type == "expense" and c.name == "Kebutuhan Bulanan"
        )
        subcategories = {s.name: s.id for s in household.subcategories}
        start = self.months()[0]
        definitions = [
            ("Listrik", 350000, 20, "Listrik", "Token listrik bulanan"),
            ("Air PDAM", 150000, 15, "Air", "Tagihan air"),
            ("Internet", 450000, 10, "Internet", "IndiHome 50Mbps"),
            ("Pulsa & Paket Data", 100000, 1, "Pulsa", "Paket data bulanan"),
        ]

        needs = []
        payments = []
        for name, budget, due_day, subcategory, note in definitions:
            need = MonthlyNeed(
                id=self.new_id(),
                name=name,
                budget_amount=Decimal(budget),
                start_month=year_month_of(start),
                created_at=_at(start),
                updated_at=_at(start),
                due_day=due_day,
                category_id=household.id,
                subcategory_id=subcategories.get(subcategory),
                note=note,
            )
            needs.append(need)
            # Every month before the current one is paid
            for month_start in self.months()[:-1]:
                paid_on = month_start.replace(day=min(due_day, 28))
                payments.append(
                    MonthlyNeedPayment(
                        id=self.new_id(),
                        need_id=need.id,
                        year_month=year_month_of(month_start),
                        actual_amount=self.amount(int(budget * 0.8), int(budget * 1.1)),
                        paid_at=_at(paid_on),
                    )
                )
        return needs, payments

    def assets(self) -> List[Asset]:
        month_starts = [add_months(_first_of_month(self.today), -i) for i in (3, 2, 1)]
        definitions = [
            ("Tabungan BCA", "savings", False, [15000000, 18000000, 20000000, 22000000], "Rekening utama"),
            ("Dana Darurat", "savings", False, [10000000, 12000000, 14000000, 15000000], "Target 6x biaya hidup"),
            ("Reksadana Pasar Uang", "investment", False, [5000000, 5150000, 5300000, 5500000], "Bibit - RDPU"),
            ("Emas Antam", "gold", False, [3000000, None, None, 3200000], "3 gram"),
            ("GoPay", "cash", False, [None, None, None, 750000], "E-wallet"),
            ("Kartu Kredit", "debt", True, [None, 2500000, 1800000, 1200000], "Tagihan berjalan"),
        ]

        assets = []
        for name, asset_type, is_liability, values, note in definitions:
            days = month_starts + [self.today]
            history = tuple(
                AssetValue(date=day, value=Decimal(value))
                for day, value in zip(days, values)
                if value is not None
            )
            assets.append(
                Asset(
                    id=self.new_id(),
                    name=name,
                    type=asset_type,
                    is_liability=is_liability,
                    initial_value=history[0].value,
                    current_value=history[-1].value,
                    created_at=_at(history[0].date),
                    updated_at=_at(self.today),
                    value_history=history,
                    note=note,
                )
            )
        return assets

    def savings(self, wishlist: List[WishlistItem]) -> List[SavingsGoal]:
        laptop = wishlist[0]
        goals = [
            ("Dana Liburan", 10000000, 8, None, [1500000, 1000000, 1500000], "Liburan akhir tahun"),
            ("Tabungan MacBook", laptop.target_price, 6, laptop.id, [3000000, 2500000, 2500000], None),
        ]

        savings = []
        for name, target, months, linked_id, deposits, note in goals:
            goal_id = self.new_id()
            dated = list(zip(self.months(), deposits))
            savings.append(
                SavingsGoal(
                    id=goal_id,
                    name=name,
                    target_amount=Decimal(target),
                    created_at=_at(self.months()[0]),
                    updated_at=_at(dated[-1][0]),
                    target_date=add_months(_first_of_month(self.today), months),
                    linked_wishlist_id=linked_id,
                    deposits=tuple(
                        SavingsDeposit(
                            id=self.new_id(),
                            savings_id=goal_id,
                            amount=Decimal(amount),
                            date=day,
                            created_at=_at(day),
                        )
                        for day, amount in dated
                    ),
                    note=note,
                )
            )
        return savings


def generate_seed_snapshot(seed: int = DEFAULT_SEED, today: Optional[date] = None) -> Dict:
    """Build a starter snapshot.

    The same seed and date always produce the same document, IDs included.
    Settings are left out so importing the sample keeps the user's settings.

    Args:
        seed: Random seed.
        today: Reference date; data covers the months up to and including it.

    Returns:
        Snapshot document accepted by SnapshotService.import_snapshot.
    """
    builder = _SeedBuilder(seed, today or current_date())

    categories = builder.categories()
    transactions = builder.transactions(categories)
    wishlist = builder.wishlist()
    installments = builder.installments(categories)
    needs, payments = builder.monthly_needs(categories)
    assets = builder.assets()
    savings = builder.savings(wishlist)

    logger.info(
        f"Generated seed data: {len(categories)} categories, "
        f"{len(transactions)} transactions"
    )
    return {
        "version": CURRENT_SCHEMA_VERSION,
        "transactions": [t.to_dict() for t in transactions],
        "categories": [c.to_dict() for c in categories],
        "wishlist": [w.to_dict() for w in wishlist],
        "installments": [i.to_dict() for i in installments],
        "monthlyNeeds": [n.to_dict() for n in needs],
        "monthlyNeedPayments": [p.to_dict() for p in payments],
        "assets": [a.to_dict() for a in assets],
        "savings": [s.to_dict() for s in savings],
        "exportedAt": format_timestamp(_at(builder.today)),
    }
