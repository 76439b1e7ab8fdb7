from datetime import date
from decimal import Decimal

import pytest

from errors import NotFoundError, PaymentRejectedError


@pytest.fixture
def phone(services):
    """An installment of 12 x 1,000,000."""
    return services.installments.add(
        "Cicilan HP", 1000000, 12, "2024-01-01", total_amount=12000000
    )


class TestInstallmentService:
    """Tests for InstallmentService."""

    def test_add_defaults_total_amount(self, services):
        """Test the total defaults to monthly amount times tenor."""
        installment = services.installments.add("Cicilan Motor", 750000, 24, "2024-05-01")

        assert installment.total_amount == Decimal("18000000")
        assert installment.status == "active"
        assert installment.payments == ()

    def test_partial_payment_progress(self, services, phone):
        """Test a payment below the monthly amount stays in the first period."""
        services.installments.add_payment(phone.id, 400000, "2024-01-05")

        progress = services.installments.with_progress()[0]

        assert progress.current_month == 0
        assert progress.period_paid == Decimal("400000")
        assert progress.remaining_this_period == Decimal("600000")

    def test_paid_off_after_all_payments(self, services, phone):
        """Test twelve payments pay the installment off and a 13th is rejected."""
        for month in range(1, 13):
            services.installments.add_payment(phone.id, 1000000, date(2024, month, 1))

        installment = services.installments.get(phone.id)
        progress = services.installments.with_progress()[0]
        assert installment.status == "paid_off"
        assert progress.remaining_amount == Decimal("0")
        assert progress.current_month == 12

        with pytest.raises(PaymentRejectedError):
            services.installments.add_payment(phone.id, 1000000, "2025-01-01")
        assert len(services.installments.get(phone.id).payments) == 12

    def test_overpayment_rejected(self, services, phone):
        """Test a payment above the remaining amount is rejected."""
        with pytest.raises(PaymentRejectedError):
            services.installments.add_payment(phone.id, 13000000)

        assert services.installments.get(phone.id).payments == ()

    @pytest.mark.parametrize("amount", [0, -1000000])
    def test_non_positive_payment_rejected(self, services, phone, amount):
        """Test zero and negative payments are rejected."""
        with pytest.raises(PaymentRejectedError):
            services.installments.add_payment(phone.id, amount)

        assert services.installments.get(phone.id).payments == ()

    def test_lowering_total_pays_off(self, services, phone, test_db):
        """Test reducing the total to the amount paid marks the installment paid off."""
        services.installments.add_payment(phone.id, 1000000, "2024-01-05")
        services.installments.add_payment(phone.id, 1000000, "2024-02-05")

        updated = services.installments.update(phone.id, total_amount=2000000)

        assert updated.status == "paid_off"
        assert services.installments.get(phone.id).status == "paid_off"
        row = test_db.execute(
            "SELECT status FROM installments WHERE id = ?", (phone.id,)
        ).fetchone()
        assert row[0] == "paid_off"

    def test_raising_total_keeps_active(self, services, phone):
        """Test a total above the amount paid leaves the installment active."""
        services.installments.add_payment(phone.id, 1000000, "2024-01-05")

        updated = services.installments.update(phone.id, total_amount=15000000)

        assert updated.status == "active"
        assert updated.total_amount == Decimal("15000000")

    def test_payments_persist(self, services, phone):
        """Test payments and status are reloaded from disk."""
        payment = services.installments.add_payment(phone.id, 1000000, "2024-01-05")

        services.installments.reload()

        assert services.installments.get(phone.id).payments == (payment,)

    def test_payment_missing_installment(self, services):
        """Test paying a missing installment raises NotFoundError."""
        with pytest.raises(NotFoundError):
            services.installments.add_payment("missing", 1000000)

    def test_auto_generated_transaction(self, services):
        """Test a payment also records an expense transaction."""
        cicilan = services.categories.find_by_name("Cicilan", "expense")
        installment = services.installments.add(
            "Cicilan Motor",
            750000,
            24,
            "2024-05-01",
            category_id=cicilan.id,
            auto_generate_transaction=True,
        )

        payment = services.installments.add_payment(installment.id, 750000, "2024-05-10")

        transaction = services.transactions.get(payment.transaction_id)
        assert transaction.type == "expense"
        assert transaction.amount == Decimal("750000")
        assert transaction.date == date(2024, 5, 10)
        assert transaction.category_id == cicilan.id

    def test_no_transaction_without_auto_generate(self, services, phone):
        """Test plain payments do not touch transactions."""
        payment = services.installments.add_payment(phone.id, 1000000)

        assert payment.transaction_id is None
        assert services.transactions.count() == 0

    def test_remove_payment(self, services, phone):
        """Test removing a payment from an active installment."""
        first = services.installments.add_payment(phone.id, 1000000)
        second = services.installments.add_payment(phone.id, 1000000)

        services.installments.remove_payment(phone.id, first.id)

        assert services.installments.get(phone.id).payments == (second,)

    def test_remove_payment_of_paid_off_rejected(self, services):
        """Test payments of a paid-off installment are final."""
        installment = services.installments.add("Kecil", 500000, 1, "2024-01-01")
        payment = services.installments.add_payment(installment.id, 500000)

        with pytest.raises(PaymentRejectedError):
            services.installments.remove_payment(installment.id, payment.id)

    def test_remove_missing_payment(self, services, phone):
        """Test removing an unknown payment raises NotFoundError."""
        with pytest.raises(NotFoundError):
            services.installments.remove_payment(phone.id, "missing")

    def test_active_and_paid_off_views(self, services, phone):
        """Test active and paid-off installments are listed apart."""
        small = services.installments.add("Kecil", 500000, 1, "2024-01-01")
        services.installments.add_payment(small.id, 500000)

        assert [i.id for i in services.installments.find_active()] == [phone.id]
        assert [i.id for i in services.installments.find_paid_off()] == [small.id]

    def test_totals(self, services, phone):
        """Test totals only include active installments."""
        services.installments.add_payment(phone.id, 1000000)
        small = services.installments.add("Kecil", 500000, 1, "2024-01-01")
        services.installments.add_payment(small.id, 500000)

        totals = services.installments.totals()

        assert totals.active_count == 1
        assert totals.paid_off_count == 1
        assert totals.total_monthly_amount == Decimal("1000000")
        assert totals.total_remaining_amount == Decimal("11000000")
