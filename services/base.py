"""Base services container for dependency injection."""

from config import Config
from db.manager import DatabaseManager
from logger import get_logger

logger = get_logger()


class Services:
    """Container for all application services.

    This class provides a centralized way to access all services and makes
    it easy to inject mock services for testing. Nothing is read from disk
    until ``initialize()`` is called.

    Args:
        config: Application configuration object.
        db_manager: Optional database manager for testing. If provided, config
            is only used for non-database settings.
        sync_scheduler: Optional scheduler for the sync coordinator (testing).
    """

    def __init__(self, config: Config, db_manager=None, sync_scheduler=None):
        """Initialize services with configuration.

        Args:
            config: Config object containing application configuration.
            db_manager: Optional database manager for dependency injection (testing).
                       If None, creates DatabaseManager from config.
            sync_scheduler: Optional ``scheduler(delay, callback)`` for the
                       sync coordinator.
        """
        self.config = config
        self.db_manager = db_manager or DatabaseManager(config)

        # Lazy import to avoid circular dependencies
        from services.assets import AssetService
        from services.categories import CategoryService
        from services.installments import InstallmentService
        from services.monthly_needs import MonthlyNeedService
        from services.savings import SavingsService
        from services.settings import SettingsService
        from services.snapshots import SnapshotService
        from services.transactions import TransactionService
        from services.wishlist import WishlistService
        from sync.coordinator import SyncCoordinator
        from sync.factory import get_sync_provider
        from sync.service import CloudSyncService

        self.transactions = TransactionService(self.db_manager)
        self.categories = CategoryService(self.db_manager)
        self.savings = SavingsService(self.db_manager)
        self.installments = InstallmentService(self.db_manager, self.transactions)
        self.monthly_needs = MonthlyNeedService(self.db_manager, self.transactions)
        self.wishlist = WishlistService(
            self.db_manager, self.transactions, config.wishlist_monthly_savings
        )
        self.assets = AssetService(self.db_manager)
        self.settings = SettingsService(self.db_manager)

        self.snapshots = SnapshotService(
            self.db_manager,
            {
                "transactions": self.transactions,
                "categories": self.categories,
                "wishlist": self.wishlist,
                "installments": self.installments,
                "monthlyNeeds": self.monthly_needs,
                "monthlyNeedPayments": self.monthly_needs.payments,
                "assets": self.assets,
                "savings": self.savings,
            },
            self.settings,
            config.backup_dir,
        )

        self.cloud_sync = None
        self.sync_coordinator = None
        provider = get_sync_provider(config)
        if provider is not None:
            self.cloud_sync = CloudSyncService(
                provider, self.snapshots, self.db_manager, config.sync_user_id
            )
            self.sync_coordinator = SyncCoordinator(
                self.cloud_sync, config.sync_debounce_seconds, sync_scheduler
            )

    def stores(self):
        """Every per-entity store, in load order."""
        return [
            self.categories,
            self.transactions,
            self.savings,
            self.installments,
            self.monthly_needs,
            self.wishlist,
            self.assets,
        ]

    def initialize(self) -> None:
        """Load every store from disk and create first-run defaults.

        Stores are loaded one after another: they are independent, but an
        sqlite3 connection must not be shared across threads.
        """
        for store in self.stores():
            store.initialize()
        self.settings.initialize()
        self.categories.ensure_defaults()

        if self.sync_coordinator is not None:
            for store in self.stores():
                store.subscribe(self.sync_coordinator.notify_change)
            self.settings.subscribe(self.sync_coordinator.notify_change)
            self.snapshots.subscribe(self.sync_coordinator.notify_change)
        logger.debug("Services initialized")

    def close(self) -> None:
        """Push any change still waiting for the sync debounce."""
        if self.sync_coordinator is not None:
            self.sync_coordinator.flush()
