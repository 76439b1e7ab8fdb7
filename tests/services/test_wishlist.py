from datetime import date
from decimal import Decimal

import pytest

from errors import NotFoundError


class TestWishlistService:
    """Tests for WishlistService."""

    def test_add_item_planned(self, services):
        """Test a new item with nothing saved is planned."""
        item = services.wishlist.add("Mechanical Keyboard", 2500000, "low")

        assert item.status == "planned"
        assert item.current_saved == Decimal("0")

    def test_add_item_saving(self, services):
        """Test a new item with savings starts as saving."""
        item = services.wishlist.add("Monitor", 5000000, "medium", current_saved=2000000)

        assert item.status == "saving"

    def test_update_saved_amount(self, services):
        """Test the status follows the saved amount."""
        item = services.wishlist.add("Monitor", 5000000)

        saving = services.wishlist.update_saved_amount(item.id, 1000000)
        planned = services.wishlist.update_saved_amount(item.id, 0)

        assert saving.status == "saving"
        assert saving.current_saved == Decimal("1000000")
        assert planned.status == "planned"

    def test_bought_is_terminal(self, services):
        """Test updating the saved amount of a bought item keeps it bought."""
        item = services.wishlist.add("Monitor", 5000000)
        services.wishlist.mark_as_bought(item.id)

        updated = services.wishlist.update_saved_amount(item.id, 0)

        assert updated.status == "bought"

    def test_mark_as_bought_with_transaction(self, services, expense_category):
        """Test buying an item can record an expense for its price."""
        item = services.wishlist.add("Monitor", 5000000)

        transaction = services.wishlist.mark_as_bought(
            item.id, create_transaction=True, category_id=expense_category.id, date="2024-03-10"
        )

        assert services.wishlist.get(item.id).status == "bought"
        assert transaction.amount == Decimal("5000000")
        assert transaction.date == date(2024, 3, 10)
        assert services.transactions.get(transaction.id) == transaction

    def test_mark_as_bought_without_transaction(self, services):
        """Test buying an item without a transaction."""
        item = services.wishlist.add("Monitor", 5000000)

        assert services.wishlist.mark_as_bought(item.id) is None
        assert services.transactions.count() == 0

    def test_mark_missing_item(self, services):
        """Test buying a missing item raises NotFoundError."""
        with pytest.raises(NotFoundError):
            services.wishlist.mark_as_bought("missing")

    def test_active_and_bought_views(self, services):
        """Test bought items are listed apart."""
        keep = services.wishlist.add("Monitor", 5000000)
        bought = services.wishlist.add("Mouse", 300000)
        services.wishlist.mark_as_bought(bought.id)

        assert [i.id for i in services.wishlist.find_active()] == [keep.id]
        assert [i.id for i in services.wishlist.find_bought()] == [bought.id]

    def test_sorted_by_priority(self, services):
        """Test sorting puts high priority first."""
        services.wishlist.add("Low", 100000, "low")
        services.wishlist.add("High", 100000, "high")
        services.wishlist.add("Medium", 100000, "medium")

        names = [i.name for i in services.wishlist.sorted_items("priority")]

        assert names == ["High", "Medium", "Low"]

    def test_progress_and_months_to_target(self, services):
        """Test progress uses the configured monthly savings rate."""
        services.wishlist.add("Laptop", 25000000, "high", current_saved=8000000)

        progress = services.wishlist.with_progress()[0]

        assert progress.progress == 32.0
        assert progress.remaining == Decimal("17000000")
        assert progress.months_to_target == 34

    def test_totals_exclude_bought(self, services):
        """Test totals only cover items not bought yet."""
        services.wishlist.add("Laptop", 25000000, current_saved=8000000)
        bought = services.wishlist.add("Mouse", 300000)
        services.wishlist.mark_as_bought(bought.id)

        totals = services.wishlist.totals()

        assert totals.total_target == Decimal("25000000")
        assert totals.total_saved == Decimal("8000000")
        assert totals.total_remaining == Decimal("17000000")
