"""Factory for creating sync provider instances."""

from typing import Optional

from config import Config
from logger import get_logger
from sync.providers.base import SyncProvider
from sync.providers.directory import DirectoryProvider

logger = get_logger()


def get_sync_provider(config: Config) -> Optional[SyncProvider]:
    """Create a sync provider instance based on configuration.

    Args:
        config: Application configuration.

    Returns:
        SyncProvider instance, or None if sync is disabled.

    Raises:
        ValueError: If the provider is unknown or its settings are incomplete.
    """
    if not config.sync_enabled:
        logger.debug("Cloud sync is disabled")
        return None

    provider_name = config.sync_provider

    if provider_name == "directory":
        if not config.sync_remote_dir:
            raise ValueError("Directory sync provider selected but remote_dir not configured")
        logger.debug(f"Initializing directory sync provider ({config.sync_remote_dir})")
        return DirectoryProvider(config.sync_remote_dir)

    elif provider_name is None:
        logger.info("No sync provider configured")
        return None

    else:
        raise ValueError(f"Unknown sync provider: {provider_name}")
