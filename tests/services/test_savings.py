from datetime import date
from decimal import Decimal

import pytest

from errors import NotFoundError, PersistenceError


class TestSavingsService:
    """Tests for SavingsService."""

    def test_add_goal(self, services):
        """Test creating a goal without deposits."""
        goal = services.savings.add("Dana Liburan", 10000000, target_date="2024-12-31")

        assert goal.target_amount == Decimal("10000000")
        assert goal.target_date == date(2024, 12, 31)
        assert goal.deposits == ()

    def test_deposit_progress(self, services):
        """Test progress as deposits reach the target."""
        goal = services.savings.add("Laptop", 1000000)

        services.savings.add_deposit(goal.id, 300000)
        services.savings.add_deposit(goal.id, 400000)
        details = services.savings.with_details()[0]

        assert details.total_saved == Decimal("700000")
        assert details.progress == 70.0
        assert details.is_complete is False

        services.savings.add_deposit(goal.id, 300000)
        details = services.savings.with_details()[0]

        assert details.total_saved == Decimal("1000000")
        assert details.progress == 100.0
        assert details.is_complete is True

    def test_deposits_persist_in_order(self, services):
        """Test deposits are reloaded in the order they were made."""
        goal = services.savings.add("Laptop", 1000000)
        first = services.savings.add_deposit(goal.id, 100000, date="2024-03-01")
        second = services.savings.add_deposit(goal.id, 200000, date="2024-02-01")

        services.savings.reload()

        assert services.savings.get(goal.id).deposits == (first, second)

    def test_deposit_defaults_to_today(self, services):
        """Test a deposit without a date is dated today."""
        goal = services.savings.add("Laptop", 1000000)

        deposit = services.savings.add_deposit(goal.id, 100000)

        assert deposit.date == date.today()

    def test_deposit_missing_goal(self, services):
        """Test a deposit to a missing goal raises NotFoundError."""
        with pytest.raises(NotFoundError):
            services.savings.add_deposit("missing", 100000)

    @pytest.mark.parametrize("amount", [0, -400000])
    def test_non_positive_deposit_rejected(self, services, amount):
        """Test a deposit must be positive so the saved total never shrinks."""
        goal = services.savings.add("Laptop", 1000000)
        services.savings.add_deposit(goal.id, 500000, "2024-03-01")

        with pytest.raises(ValueError):
            services.savings.add_deposit(goal.id, amount, "2024-03-02")

        assert len(services.savings.get(goal.id).deposits) == 1
        assert services.savings.with_details()[0].total_saved == Decimal("500000")

    def test_remove_deposit(self, services):
        """Test removing a deposit lowers the total by its amount."""
        goal = services.savings.add("Laptop", 1000000)
        services.savings.add_deposit(goal.id, 300000)
        deposit = services.savings.add_deposit(goal.id, 400000)

        services.savings.remove_deposit(goal.id, deposit.id)
        services.savings.reload()

        assert services.savings.with_details()[0].total_saved == Decimal("300000")

    def test_remove_missing_deposit(self, services):
        """Test removing an unknown deposit raises NotFoundError."""
        goal = services.savings.add("Laptop", 1000000)

        with pytest.raises(NotFoundError):
            services.savings.remove_deposit(goal.id, "missing")

    def test_delete_goal_deletes_deposits(self, services, test_db):
        """Test deleting a goal removes its deposits from disk."""
        goal = services.savings.add("Laptop", 1000000)
        services.savings.add_deposit(goal.id, 300000)

        services.savings.delete(goal.id)

        count = test_db.execute("SELECT COUNT(*) FROM savings_deposits").fetchone()[0]
        assert count == 0
        assert services.savings.count() == 0

    def test_failed_deposit_leaves_goal_unchanged(self, services, test_db):
        """Test a rejected deposit write keeps memory and disk consistent."""
        goal = services.savings.add("Laptop", 1000000)
        test_db.execute("DROP TABLE savings_deposits")

        with pytest.raises(PersistenceError):
            services.savings.add_deposit(goal.id, 300000)

        assert services.savings.get(goal.id).deposits == ()

    def test_totals(self, services):
        """Test totals across goals."""
        done = services.savings.add("Done", 500000)
        services.savings.add_deposit(done.id, 500000)
        pending = services.savings.add("Pending", 1500000)
        services.savings.add_deposit(pending.id, 500000)

        totals = services.savings.totals()

        assert totals.total_target == Decimal("2000000")
        assert totals.total_saved == Decimal("1000000")
        assert totals.total_remaining == Decimal("1000000")
        assert totals.overall_progress == 50.0
        assert totals.completed_count == 1
        assert totals.in_progress_count == 1
