from datetime import datetime, timezone

import pytest

from sync.coordinator import IDLE, PENDING, SyncCoordinator
from sync.service import SyncResult


class FakeHandle:
    def __init__(self, delay, callback):
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Collects scheduled callbacks instead of starting timers."""

    def __init__(self):
        self.handles = []

    def __call__(self, delay, callback):
        handle = FakeHandle(delay, callback)
        self.handles.append(handle)
        return handle

    def fire(self):
        """Run the most recent callback that was not cancelled."""
        live = [h for h in self.handles if not h.cancelled]
        live[-1].callback()


class FakeSyncService:
    def __init__(self, results=None):
        self.results = list(results or [])
        self.pushes = 0
        self.during_push = None

    def save_to_cloud(self):
        self.pushes += 1
        if self.during_push:
            hook, self.during_push = self.during_push, None
            hook()
        if self.results:
            return self.results.pop(0)
        return SyncResult(success=True)

    def last_synced(self):
        return datetime(2024, 3, 1, tzinfo=timezone.utc)


@pytest.fixture
def scheduler():
    return FakeScheduler()


class TestSyncCoordinator:
    """Tests for SyncCoordinator."""

    def test_change_schedules_push(self, scheduler):
        """Test a change waits for the debounce before pushing."""
        service = FakeSyncService()
        coordinator = SyncCoordinator(service, 5.0, scheduler)

        coordinator.notify_change()

        assert coordinator.state == PENDING
        assert scheduler.handles[0].delay == 5.0
        assert service.pushes == 0

        scheduler.fire()

        assert service.pushes == 1
        assert coordinator.state == IDLE

    def test_changes_reset_debounce(self, scheduler):
        """Test a burst of changes results in one push."""
        service = FakeSyncService()
        coordinator = SyncCoordinator(service, 5.0, scheduler)

        coordinator.notify_change()
        coordinator.notify_change()
        coordinator.notify_change()

        assert [h.cancelled for h in scheduler.handles] == [True, True, False]
        scheduler.fire()
        assert service.pushes == 1

    def test_stale_timer_ignored(self, scheduler):
        """Test a callback that fires after cancel does nothing."""
        service = FakeSyncService()
        coordinator = SyncCoordinator(service, 5.0, scheduler)
        coordinator.notify_change()
        coordinator.cancel()

        scheduler.handles[0].callback()

        assert service.pushes == 0
        assert coordinator.state == IDLE

    def test_change_during_sync_pushes_once_more(self, scheduler):
        """Test changes made while pushing cause exactly one more push."""
        service = FakeSyncService()
        coordinator = SyncCoordinator(service, 5.0, scheduler)

        def change_twice():
            coordinator.notify_change()
            coordinator.notify_change()

        service.during_push = change_twice
        coordinator.notify_change()
        scheduler.fire()

        assert service.pushes == 2
        assert coordinator.state == IDLE
        assert len(scheduler.handles) == 1

    def test_flush_pushes_now(self, scheduler):
        service = FakeSyncService()
        coordinator = SyncCoordinator(service, 5.0, scheduler)
        coordinator.notify_change()

        coordinator.flush()

        assert service.pushes == 1
        assert scheduler.handles[0].cancelled is True
        assert coordinator.state == IDLE

    def test_flush_without_pending_change(self, scheduler):
        service = FakeSyncService()
        coordinator = SyncCoordinator(service, 5.0, scheduler)

        coordinator.flush()

        assert service.pushes == 0

    def test_failure_recorded(self, scheduler):
        """Test a failed push is kept as last_error until the next success."""
        service = FakeSyncService([SyncResult(success=False, error="offline")])
        coordinator = SyncCoordinator(service, 5.0, scheduler)

        coordinator.notify_change()
        scheduler.fire()

        status = coordinator.status()
        assert status.last_error == "offline"
        assert status.state == IDLE
        assert status.is_syncing is False

        coordinator.notify_change()
        scheduler.fire()
        assert coordinator.last_error is None

    def test_unexpected_error_recorded(self, scheduler):
        """Test an exception from the push is kept as last_error and re-raised."""

        class BrokenSyncService(FakeSyncService):
            def save_to_cloud(self):
                raise RuntimeError("disk full")

        coordinator = SyncCoordinator(BrokenSyncService(), 5.0, scheduler)
        coordinator.notify_change()

        with pytest.raises(RuntimeError):
            scheduler.fire()

        assert coordinator.last_error == "disk full"
        assert coordinator.state == IDLE
