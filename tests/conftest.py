"""Shared pytest fixtures for all tests."""

import sqlite3
from decimal import Decimal
from pathlib import Path

import pytest

from cli.migrate import apply_pending
from config import Config, get_migrations_dir
from services.base import Services


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing.

    Yields:
        sqlite3.Connection: Connection to in-memory database.
    """
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


@pytest.fixture
def test_config(tmp_path):
    """Create a test configuration rooted in a temporary directory.

    Args:
        tmp_path: pytest tmp_path fixture for temporary directory.

    Returns:
        Config: Test configuration object with sync disabled.
    """
    base_dir = tmp_path / "pfm"
    return Config(
        base_dir=base_dir,
        db_data_dir=base_dir / "db",
        db_filename="test.db",
        log_level="DEBUG",
        log_dir=base_dir / "logs",
        backup_dir=base_dir / "backups",
        sync_enabled=False,
        sync_provider="directory",
        sync_user_id="tester",
        sync_remote_dir=tmp_path / "remote",
        sync_debounce_seconds=5.0,
        wishlist_monthly_savings=Decimal("500000"),
    )


class TestDatabaseManager:
    """Database manager that hands out one shared in-memory connection."""

    __test__ = False

    def __init__(self, conn):
        self.conn = conn

    def connect(self):
        """Return a context manager for the test connection."""
        return _TestConnectionContext(self.conn)

    def get_db_path(self):
        """Return a fake path for the test database."""
        return Path(":memory:")

    def get_migrations_dir(self):
        """Get the migrations directory path."""
        return get_migrations_dir()


class _TestConnectionContext:
    """Context manager for test database connections."""

    def __init__(self, conn):
        self.conn = conn

    def __enter__(self):
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        # Don't close the connection - let the fixture handle it
        pass


@pytest.fixture
def db_manager_with_schema(test_db):
    """Create a DatabaseManager with schema already set up.

    Args:
        test_db: In-memory database connection fixture.

    Returns:
        TestDatabaseManager: Database manager with all migrations applied.
    """
    db_manager = TestDatabaseManager(test_db)
    apply_pending(db_manager)
    return db_manager


@pytest.fixture
def services(test_config, db_manager_with_schema):
    """Create an initialized Services container with a test database.

    The default categories and settings exist, every other collection is
    empty.

    Args:
        test_config: Test configuration fixture.
        db_manager_with_schema: Database manager with schema set up.

    Returns:
        Services: Services container for testing.
    """
    services = Services(test_config, db_manager=db_manager_with_schema)
    services.initialize()
    return services


@pytest.fixture
def expense_category(services):
    """The default 'Makan' expense category."""
    return services.categories.find_by_name("Makan", "expense")
