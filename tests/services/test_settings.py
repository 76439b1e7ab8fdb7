from decimal import Decimal

import pytest

from errors import PersistenceError
from services.settings import SettingsService


class TestSettingsService:
    """Tests for SettingsService."""

    def test_defaults_created_on_first_run(self, services, test_db):
        """Test initialize() writes the default settings row."""
        settings = services.settings.get()

        assert settings.currency == "IDR"
        assert settings.monthly_living_cost == Decimal("5000000")
        assert settings.emergency_fund_multiplier == 6
        assert settings.dark_mode is False
        assert settings.schema_version == 1
        assert test_db.execute("SELECT COUNT(*) FROM settings").fetchone()[0] == 1

    def test_update_persists(self, services, db_manager_with_schema):
        """Test changed settings are loaded by a fresh service."""
        services.settings.update(monthly_living_cost="7500000", dark_mode=True)

        fresh = SettingsService(db_manager_with_schema)
        fresh.initialize()

        assert fresh.get().monthly_living_cost == Decimal("7500000")
        assert fresh.get().dark_mode is True

    def test_update_rejects_unknown_fields(self, services):
        """Test the schema version cannot be changed through update()."""
        with pytest.raises(ValueError):
            services.settings.update(schema_version=2)

    def test_reset(self, services):
        """Test reset restores every default."""
        services.settings.update(currency="USD", emergency_fund_multiplier=12)

        settings = services.settings.reset()

        assert settings.currency == "IDR"
        assert settings.emergency_fund_multiplier == 6

    def test_failed_save_keeps_previous_settings(self, services, test_db):
        """Test a rejected write leaves the in-memory settings alone."""
        test_db.execute("DROP TABLE settings")

        with pytest.raises(PersistenceError):
            services.settings.update(currency="USD")

        assert services.settings.get().currency == "IDR"

    def test_listeners_notified(self, services):
        """Test listeners run after a successful update."""
        calls = []
        services.settings.subscribe(lambda: calls.append(1))

        services.settings.update(dark_mode=True)

        assert calls == [1]
