from datetime import date
from decimal import Decimal

import pytest

from errors import NotFoundError


class TestAssetService:
    """Tests for AssetService."""

    def test_add_asset_starts_history(self, services):
        """Test a new asset has one history entry for today."""
        asset = services.assets.add("Tabungan BCA", "savings", 15000000)

        assert asset.current_value == Decimal("15000000")
        assert len(asset.value_history) == 1
        assert asset.value_history[0].date == date.today()

    def test_update_value_appends_history(self, services):
        """Test revaluing never rewrites earlier history."""
        asset = services.assets.add("Emas", "gold", 3000000)

        services.assets.update_value(asset.id, 3100000, on="2024-02-01")
        updated = services.assets.update_value(asset.id, 3200000, on="2024-02-01")

        assert updated.current_value == Decimal("3200000")
        assert [v.value for v in updated.value_history] == [
            Decimal("3000000"),
            Decimal("3100000"),
            Decimal("3200000"),
        ]

    def test_history_persists(self, services):
        """Test value history is reloaded from disk."""
        asset = services.assets.add("Emas", "gold", 3000000)
        updated = services.assets.update_value(asset.id, 3200000, on="2024-02-01")

        services.assets.reload()

        assert services.assets.get(asset.id) == updated

    def test_update_value_missing(self, services):
        """Test revaluing a missing asset raises NotFoundError."""
        with pytest.raises(NotFoundError):
            services.assets.update_value("missing", 1)

    def test_net_worth(self, services):
        """Test net worth is assets minus liabilities."""
        services.assets.add("Tabungan", "savings", 20000000)
        services.assets.add("Reksadana", "investment", 5000000)
        services.assets.add("Kartu Kredit", "debt", 3000000, is_liability=True)

        assert services.assets.total_assets() == Decimal("25000000")
        assert services.assets.total_liabilities() == Decimal("3000000")
        assert services.assets.net_worth() == Decimal("22000000")
        assert len(services.assets.find_liabilities()) == 1

    def test_value_change(self, services):
        """Test value change against the initial value."""
        asset = services.assets.add("Reksadana", "investment", 5000000)
        services.assets.update_value(asset.id, 5500000)

        change = services.assets.value_change(asset.id)

        assert change.amount == Decimal("500000")
        assert change.percentage == 10.0

    def test_net_worth_history(self, services):
        """Test month-end values come from the latest entry on or before them."""
        asset = services.assets.add("Tabungan", "savings", 1000000)
        services.assets.update_value(asset.id, 2000000, on="2024-01-15")
        services.assets.update_value(asset.id, 3000000, on="2024-03-02")

        history = services.assets.net_worth_history(3, today=date(2024, 3, 20))

        assert [p.month for p in history] == ["2024-01", "2024-02", "2024-03"]
        assert [p.net_worth for p in history] == [
            Decimal("2000000"),
            Decimal("2000000"),
            Decimal("3000000"),
        ]
