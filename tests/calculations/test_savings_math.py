from datetime import date, datetime, timezone
from decimal import Decimal

from calculations.savings import (
    estimate_completion,
    remaining_amount,
    savings_details,
    savings_progress,
    savings_totals,
    total_saved,
)
from models.savings import SavingsDeposit, SavingsGoal

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_deposit(amount, day, deposit_id="d"):
    return SavingsDeposit(
        id=deposit_id,
        savings_id="goal",
        amount=Decimal(amount),
        date=day,
        created_at=CREATED,
    )


def make_goal(target, deposits=(), target_date=None):
    return SavingsGoal(
        id="goal",
        name="Laptop",
        target_amount=Decimal(target),
        created_at=CREATED,
        updated_at=CREATED,
        target_date=target_date,
        deposits=tuple(deposits),
    )


class TestSavingsProgress:
    """Tests for progress and remaining amount."""

    def test_progress_clamped(self):
        assert savings_progress(1500000, 1000000) == 100.0
        assert savings_progress(-100, 1000) == 0.0
        assert savings_progress(250, 1000) == 25.0

    def test_progress_zero_target(self):
        assert savings_progress(500, 0) == 0.0

    def test_remaining_never_negative(self):
        assert remaining_amount(1500, 1000) == Decimal("0")
        assert remaining_amount(300, 1000) == Decimal("700")

    def test_total_saved(self):
        deposits = [make_deposit("300000", date(2024, 1, 5)), make_deposit("400000", date(2024, 2, 5))]

        assert total_saved(deposits) == Decimal("700000")
        assert total_saved([]) == Decimal("0")


class TestEstimateCompletion:
    """Tests for estimate_completion."""

    def test_requires_two_deposits(self):
        deposits = [make_deposit("100000", date(2024, 1, 5))]

        assert estimate_completion(Decimal("100000"), Decimal("1000000"), deposits, date(2024, 3, 1)) is None

    def test_none_when_complete(self):
        deposits = [make_deposit("600000", date(2024, 1, 5)), make_deposit("600000", date(2024, 2, 5))]

        assert estimate_completion(Decimal("1200000"), Decimal("1000000"), deposits, date(2024, 3, 1)) is None

    def test_projects_from_today(self):
        """Test the rate is total over the months spanned by deposits."""
        deposits = [make_deposit("100000", date(2024, 1, 5)), make_deposit("100000", date(2024, 3, 20))]
        # 200k over 2 months = 100k per month; 800k left = 8 months
        estimate = estimate_completion(Decimal("200000"), Decimal("1000000"), deposits, date(2024, 4, 10))

        assert estimate == date(2024, 12, 10)

    def test_same_month_counts_as_one(self):
        deposits = [make_deposit("250000", date(2024, 1, 5)), make_deposit("250000", date(2024, 1, 25))]

        estimate = estimate_completion(Decimal("500000"), Decimal("1000000"), deposits, date(2024, 1, 31))

        assert estimate == date(2024, 2, 29)


class TestSavingsDetails:
    """Tests for savings_details and savings_totals."""

    def test_details(self):
        goal = make_goal(
            "1000000",
            [make_deposit("300000", date(2024, 1, 5)), make_deposit("400000", date(2024, 2, 5))],
            target_date=date(2024, 6, 30),
        )

        details = savings_details(goal, date(2024, 6, 20))

        assert details.total_saved == Decimal("700000")
        assert details.progress == 70.0
        assert details.remaining == Decimal("300000")
        assert details.is_complete is False
        assert details.days_until_target == 10

    def test_totals(self):
        today = date(2024, 3, 1)
        done = savings_details(make_goal("500000", [make_deposit("500000", date(2024, 1, 1))]), today)
        open_goal = savings_details(make_goal("1500000"), today)

        totals = savings_totals([done, open_goal])

        assert totals.total_target == Decimal("2000000")
        assert totals.total_saved == Decimal("500000")
        assert totals.total_remaining == Decimal("1500000")
        assert totals.overall_progress == 25.0
        assert totals.completed_count == 1
        assert totals.in_progress_count == 1
        assert totals.total_count == 2

    def test_totals_empty(self):
        totals = savings_totals([])

        assert totals.overall_progress == 0.0
        assert totals.total_count == 0
