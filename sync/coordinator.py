"""Debounced background sync.

Local changes schedule a push after a quiet period. The coordinator is a
small state machine:

    IDLE --change--> PENDING --timer--> SYNCING --done--> IDLE

A change while PENDING restarts the timer. A change while SYNCING is
remembered and causes exactly one more push right after the current one,
so at most one push is ever in flight and no change is left unpushed.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from logger import get_logger

logger = get_logger()

IDLE = "idle"
PENDING = "pending"
SYNCING = "syncing"


def timer_scheduler(delay: float, callback: Callable[[], None]):
    """Run ``callback`` after ``delay`` seconds on a daemon thread.

    Returns:
        The started threading.Timer; its ``cancel()`` stops a pending run.
    """
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


@dataclass(frozen=True)
class SyncStatus:
    state: str
    last_synced: Optional[datetime]
    last_error: Optional[str]

    @property
    def is_syncing(self) -> bool:
        return self.state == SYNCING


class SyncCoordinator:
    """Schedules pushes of local changes through a CloudSyncService.

    Args:
        sync_service: Service whose ``save_to_cloud`` performs the push.
        debounce_seconds: Quiet period after the last change.
        scheduler: ``scheduler(delay, callback)`` returning a handle with
            ``cancel()``. Defaults to threading.Timer.
    """

    def __init__(self, sync_service, debounce_seconds: float = 5.0, scheduler=None):
        self.sync_service = sync_service
        self.debounce_seconds = debounce_seconds
        self.scheduler = scheduler or timer_scheduler
        self.state = IDLE
        self.last_error: Optional[str] = None
        self._handle = None
        self._changed_while_syncing = False
        self._lock = threading.Lock()

    def notify_change(self) -> None:
        """Report a local change."""
        with self._lock:
            if self.state == SYNCING:
                self._changed_while_syncing = True
                return
            if self.state == PENDING and self._handle is not None:
                self._handle.cancel()
            self.state = PENDING
            self._handle = self.scheduler(self.debounce_seconds, self._on_timer)
        logger.debug(f"Sync scheduled in {self.debounce_seconds}s")

    def _on_timer(self) -> None:
        with self._lock:
            if self.state != PENDING:
                return
            self.state = SYNCING
            self._handle = None
        self._run()

    def _run(self) -> None:
        while True:
            try:
                result = self.sync_service.save_to_cloud()
            except Exception as e:
                with self._lock:
                    self.state = IDLE
                    self.last_error = str(e)
                    self._changed_while_syncing = False
                raise
            with self._lock:
                self.last_error = None if result.success else result.error
                if not self._changed_while_syncing:
                    self.state = IDLE
                    break
                self._changed_while_syncing = False
            logger.debug("Changes arrived during sync, pushing again")

        if result.success:
            logger.info("Background sync complete")
        else:
            logger.error(f"Background sync failed: {result.error}")

    def flush(self) -> None:
        """Push a pending change now instead of waiting for the timer."""
        with self._lock:
            if self.state != PENDING:
                return
            if self._handle is not None:
                self._handle.cancel()
                self._handle = None
            self.state = SYNCING
        self._run()

    def cancel(self) -> None:
        """Drop a pending push. A push already in flight is not interrupted."""
        with self._lock:
            if self.state != PENDING:
                return
            if self._handle is not None:
                self._handle.cancel()
                self._handle = None
            self.state = IDLE
        logger.debug("Pending sync cancelled")

    def status(self) -> SyncStatus:
        return SyncStatus(
            state=self.state,
            last_synced=self.sync_service.last_synced(),
            last_error=self.last_error,
        )
