from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from calculations.installments import (
    installment_progress,
    installment_totals,
    payment_rejection_reason,
)
from models.installment import Installment, InstallmentPayment

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_installment(monthly="1000000", tenor=12, paid=(), status="active", total=None):
    payments = tuple(
        InstallmentPayment(
            id=f"p{i}",
            installment_id="inst",
            amount=Decimal(amount),
            date=date(2024, 1, 1),
            created_at=CREATED,
        )
        for i, amount in enumerate(paid)
    )
    monthly = Decimal(monthly)
    return Installment(
        id="inst",
        name="Cicilan HP",
        total_amount=Decimal(total) if total else monthly * tenor,
        monthly_amount=monthly,
        total_tenor=tenor,
        start_date=date(2024, 1, 1),
        created_at=CREATED,
        updated_at=CREATED,
        status=status,
        payments=payments,
    )


class TestInstallmentProgress:
    """Tests for installment_progress."""

    def test_no_payments(self):
        progress = installment_progress(make_installment())

        assert progress.current_month == 0
        assert progress.remaining_months == 12
        assert progress.remaining_amount == Decimal("12000000")
        assert progress.progress_percentage == 0.0
        assert progress.is_paid_off is False

    def test_partial_period(self):
        """Test a partial payment does not advance the period."""
        progress = installment_progress(make_installment(paid=["1000000", "1000000", "500000"]))

        assert progress.current_month == 2
        assert progress.period_paid == Decimal("500000")
        assert progress.remaining_this_period == Decimal("500000")
        assert progress.remaining_months == 10
        assert progress.remaining_amount == Decimal("9500000")

    def test_fully_paid(self):
        progress = installment_progress(make_installment(paid=["1000000"] * 12))

        assert progress.current_month == 12
        assert progress.remaining_months == 0
        assert progress.remaining_amount == Decimal("0")
        assert progress.progress_percentage == 100.0
        assert progress.is_paid_off is True

    def test_odd_total_amount(self):
        """Test a total that is not monthly times tenor."""
        progress = installment_progress(
            make_installment(monthly="750000", tenor=24, total="17500000", paid=["750000"] * 8)
        )

        assert progress.total_paid == Decimal("6000000")
        assert progress.remaining_amount == Decimal("11500000")
        assert progress.remaining_months == 16


class TestPaymentRejection:
    """Tests for payment_rejection_reason."""

    def test_accepts_within_remaining(self):
        installment = make_installment(paid=["1000000"] * 11)

        assert payment_rejection_reason(installment, Decimal("1000000")) is None

    def test_rejects_overpayment(self):
        installment = make_installment(paid=["1000000"] * 11)

        reason = payment_rejection_reason(installment, Decimal("1500000"))

        assert "exceeds" in reason

    def test_rejects_paid_off(self):
        installment = make_installment(paid=["1000000"] * 12, status="paid_off")

        assert "paid off" in payment_rejection_reason(installment, Decimal("1"))

    @pytest.mark.parametrize("amount", ["0", "-500000"])
    def test_rejects_non_positive(self, amount):
        installment = make_installment()

        assert "positive" in payment_rejection_reason(installment, Decimal(amount))


class TestInstallmentTotals:
    """Tests for installment_totals."""

    def test_only_active_counted(self):
        active = installment_progress(make_installment(paid=["1000000"] * 2))
        done = installment_progress(make_installment(paid=["1000000"] * 12, status="paid_off"))

        totals = installment_totals([active, done])

        assert totals.active_count == 1
        assert totals.paid_off_count == 1
        assert totals.total_monthly_amount == Decimal("1000000")
        assert totals.total_remaining_amount == Decimal("10000000")
