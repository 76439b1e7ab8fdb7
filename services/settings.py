"""Application settings: a single row that is created on first run and never deleted."""

import dataclasses
import sqlite3
from typing import Callable, List

from errors import PersistenceError
from logger import get_logger
from models.fields import to_money
from models.settings import AppSettings

logger = get_logger()

SETTINGS_ID = "app_settings"

_UPDATABLE = {"currency", "monthly_living_cost", "emergency_fund_multiplier", "dark_mode"}


class SettingsService:
    """Service for reading and changing the settings record."""

    def __init__(self, db_manager):
        """Initialize the settings service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager
        self._settings = AppSettings()
        self._listeners: List[Callable[[], None]] = []

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def initialize(self) -> None:
        """Load the settings row, creating it with defaults if missing."""
        with self.db_manager.connect() as conn:
            row = conn.execute(
                """
                SELECT currency, monthly_living_cost, emergency_fund_multiplier,
                       dark_mode, schema_version
                FROM settings WHERE id = ?
                """,
                (SETTINGS_ID,),
            ).fetchone()

        if row is None:
            logger.info("No settings found, creating defaults")
            self._save(AppSettings())
            return

        self._settings = AppSettings(
            currency=row[0],
            monthly_living_cost=to_money(row[1]),
            emergency_fund_multiplier=row[2],
            dark_mode=bool(row[3]),
            schema_version=row[4],
        )

    reload = initialize

    def get(self) -> AppSettings:
        return self._settings

    def update(self, **changes) -> AppSettings:
        """Change one or more settings.

        Raises:
            ValueError: If a field cannot be updated this way.
            PersistenceError: If the settings could not be saved.
        """
        unsupported = set(changes) - _UPDATABLE
        if unsupported:
            raise ValueError(f"Unsupported field names: {sorted(unsupported)}")
        if "monthly_living_cost" in changes:
            changes["monthly_living_cost"] = to_money(changes["monthly_living_cost"])
        return self._save(dataclasses.replace(self._settings, **changes))

    def reset(self) -> AppSettings:
        """Restore the default settings."""
        logger.info("Resetting settings to defaults")
        return self._save(AppSettings())

    def write(self, conn, settings: AppSettings) -> None:
        """Upsert the settings row inside the caller's transaction."""
        conn.execute(
            """
            INSERT OR REPLACE INTO settings
                (id, currency, monthly_living_cost, emergency_fund_multiplier,
                 dark_mode, schema_version)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                SETTINGS_ID,
                settings.currency,
                str(settings.monthly_living_cost),
                settings.emergency_fund_multiplier,
                int(settings.dark_mode),
                settings.schema_version,
            ),
        )

    def _save(self, settings: AppSettings) -> AppSettings:
        with self.db_manager.connect() as conn:
            try:
                self.write(conn, settings)
                conn.commit()
            except sqlite3.Error as e:
                conn.rollback()
                logger.error(f"Failed to save settings: {e}")
                raise PersistenceError(f"Failed to save settings: {e}") from e

        self._settings = settings
        for listener in self._listeners:
            listener()
        return settings
