"""Configuration management for pfm.

Reads configuration from ~/.config/pfm.toml and creates default config if needed.
"""

from pathlib import Path
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
import tomllib
import tomli_w


@dataclass
class Config:
    """Application configuration."""

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    backup_dir: Path
    enable_reset: bool = False
    sync_enabled: bool = False
    sync_provider: Optional[str] = "directory"
    sync_user_id: str = ""
    sync_remote_dir: Optional[Path] = None
    sync_debounce_seconds: float = 5.0
    wishlist_monthly_savings: Decimal = Decimal("500000")

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        """Create a Config with default values."""
        home = Path.home()
        base_dir = home / "data" / "pfm"
        return cls(
            base_dir=base_dir,
            db_data_dir=base_dir / "db",
            db_filename="pfm.db",
            log_level="INFO",
            log_dir=base_dir / "logs",
            backup_dir=base_dir / "backups",
            sync_remote_dir=base_dir / "remote",
        )


def get_config_path() -> Path:
    """Get the path to the config file."""
    return Path.home() / ".config" / "pfm.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return Path(__file__).parent / "db" / "migrations"


def load_config() -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Returns:
        Config object with loaded or default values.
    """
    config_path = get_config_path()

    # If config doesn't exist, create it with defaults
    if not config_path.exists():
        config = Config.default()
        _write_config(config)
        return config

    with open(config_path, "rb") as f:
        data = tomllib.load(f)

    return parse_config(data)


def parse_config(data: dict) -> Config:
    """Build a Config from parsed TOML data, filling in defaults.

    Args:
        data: Dictionary as returned by tomllib.

    Returns:
        Config object.
    """
    base_dir = Path(data.get("base_dir", Path.home() / "data" / "pfm"))
    enable_reset = data.get("enable_reset", False)

    db_config = data.get("database", {})
    db_data_dir = Path(db_config.get("data_dir", base_dir / "db"))
    db_filename = db_config.get("filename", "pfm.db")

    log_config = data.get("logging", {})
    log_level = log_config.get("level", "INFO")
    log_dir = Path(log_config.get("log_dir", base_dir / "logs"))

    backup_config = data.get("backup", {})
    backup_dir = Path(backup_config.get("backup_dir", base_dir / "backups"))

    sync_config = data.get("sync", {})
    sync_enabled = sync_config.get("enabled", False)
    sync_provider = sync_config.get("provider", "directory")
    sync_user_id = sync_config.get("user_id", "")
    sync_remote_dir = Path(sync_config.get("remote_dir", base_dir / "remote"))
    sync_debounce_seconds = float(sync_config.get("debounce_seconds", 5.0))

    wishlist_config = data.get("wishlist", {})
    # Parsed through str so a TOML float like 250000.5 stays exact
    wishlist_monthly_savings = Decimal(
        str(wishlist_config.get("monthly_savings", 500000))
    )

    return Config(
        base_dir=base_dir,
        db_data_dir=db_data_dir,
        db_filename=db_filename,
        log_level=log_level,
        log_dir=log_dir,
        backup_dir=backup_dir,
        enable_reset=enable_reset,
        sync_enabled=sync_enabled,
        sync_provider=sync_provider,
        sync_user_id=sync_user_id,
        sync_remote_dir=sync_remote_dir,
        sync_debounce_seconds=sync_debounce_seconds,
        wishlist_monthly_savings=wishlist_monthly_savings,
    )


def _write_config(config: Config) -> None:
    """Write config to the config file.

    Args:
        config: Config object to write.
    """
    config_path = get_config_path()

    # Ensure config directory exists
    config_path.parent.mkdir(parents=True, exist_ok=True)

    # Convert config to TOML structure
    data = {
        "base_dir": str(config.base_dir),
        "enable_reset": config.enable_reset,
        "database": {
            "data_dir": str(config.db_data_dir),
            "filename": config.db_filename,
        },
        "logging": {
            "level": config.log_level,
            "log_dir": str(config.log_dir),
        },
        "backup": {
            "backup_dir": str(config.backup_dir),
        },
        "sync": {
            "enabled": config.sync_enabled,
            "provider": config.sync_provider or "",
            "user_id": config.sync_user_id,
            "remote_dir": str(config.sync_remote_dir or config.base_dir / "remote"),
            "debounce_seconds": config.sync_debounce_seconds,
        },
        "wishlist": {
            "monthly_savings": int(config.wishlist_monthly_savings),
        },
    }

    with open(config_path, "wb") as f:
        tomli_w.dump(data, f)
