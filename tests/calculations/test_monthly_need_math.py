from datetime import datetime, timezone
from decimal import Decimal

import pytest

from calculations.monthly_needs import (
    budget_comparison,
    need_totals,
    needs_with_status,
    recurrence_label,
    should_show_for_month,
)
from models.monthly_need import MonthlyNeed, MonthlyNeedPayment

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_need(need_id="need", budget="350000", start_month="2024-03", period="forever"):
    return MonthlyNeed(
        id=need_id,
        name=need_id.title(),
        budget_amount=Decimal(budget),
        start_month=start_month,
        created_at=CREATED,
        updated_at=CREATED,
        recurrence_period=period,
    )


def make_payment(need_id, year_month, amount):
    return MonthlyNeedPayment(
        id=f"{need_id}-{year_month}",
        need_id=need_id,
        year_month=year_month,
        actual_amount=Decimal(amount),
        paid_at=CREATED,
    )


class TestShouldShowForMonth:
    """Tests for recurrence visibility."""

    @pytest.mark.parametrize(
        "month,expected",
        [("2024-02", False), ("2024-03", True), ("2030-12", True)],
    )
    def test_forever(self, month, expected):
        assert should_show_for_month(make_need(period="forever"), month) is expected

    @pytest.mark.parametrize(
        "month,expected",
        [("2024-02", False), ("2024-03", True), ("2025-02", True), ("2025-03", False)],
    )
    def test_monthly_covers_twelve_months(self, month, expected):
        assert should_show_for_month(make_need(period="monthly"), month) is expected

    @pytest.mark.parametrize(
        "month,expected",
        [
            ("2023-03", False),
            ("2024-03", True),
            ("2024-04", False),
            ("2025-03", True),
            ("2026-03", True),
        ],
    )
    def test_yearly_same_calendar_month(self, month, expected):
        assert should_show_for_month(make_need(period="yearly"), month) is expected

    def test_recurrence_labels(self):
        assert recurrence_label("yearly") == "Yearly"
        assert recurrence_label("unknown") == "Every month"


class TestNeedStatus:
    """Tests for status, budget comparison and totals."""

    def test_status_for_month(self):
        needs = [make_need("listrik"), make_need("air", budget="150000")]
        payments = [make_payment("listrik", "2024-03", "400000"), make_payment("listrik", "2024-04", "1")]

        statuses = {s.need.id: s for s in needs_with_status(needs, payments, "2024-03")}

        assert statuses["listrik"].is_paid is True
        assert statuses["listrik"].actual_amount == Decimal("400000")
        assert statuses["listrik"].is_over_budget is True
        assert statuses["air"].is_paid is False
        assert statuses["air"].difference == Decimal("150000")

    def test_hidden_needs_excluded(self):
        needs = [make_need("listrik"), make_need("pajak", start_month="2024-05")]

        statuses = needs_with_status(needs, [], "2024-03")

        assert [s.need.id for s in statuses] == ["listrik"]

    def test_comparison_and_totals(self):
        needs = [make_need("listrik"), make_need("air", budget="150000")]
        payments = [make_payment("air", "2024-03", "100000")]
        statuses = needs_with_status(needs, payments, "2024-03")

        comparison = budget_comparison(statuses)
        totals = need_totals(statuses)

        assert [c.name for c in comparison] == ["Listrik", "Air"]
        assert comparison[1].difference == Decimal("50000")
        assert totals.total_budget == Decimal("500000")
        assert totals.total_actual == Decimal("100000")
        assert totals.difference == Decimal("400000")
        assert totals.paid_count == 1
        assert totals.unpaid_count == 1
