"""
Tests for the suspension cleanup scheduler.

Ticks are driven directly with a fake clock; only the start/stop test runs
the real thread.
"""
from datetime import timedelta

import pytest

from pos_register.core.errors import PersistenceError
from pos_register.services.cleanup import SuspensionCleanupScheduler
from pos_register.services.suspension import SuspensionManager
from pos_register.services.transaction import Transaction


def _suspend(manager, item):
    tx = Transaction()
    tx.add_item(item)
    return manager.suspend(tx)


class TestTick:
    """Test the day-change check."""

    def test_same_day_tick_does_nothing(self, manager, clock, soda):
        scheduler = SuspensionCleanupScheduler(manager, clock, retention_days=7)
        _suspend(manager, soda)
        clock.advance(hours=10)

        assert scheduler.tick() is None
        assert manager.count == 1

    def test_new_day_runs_retention_cleanup(self, manager, clock, soda):
        scheduler = SuspensionCleanupScheduler(manager, clock, retention_days=7)
        old = _suspend(manager, soda)
        clock.advance(days=5)
        recent = _suspend(manager, soda)
        clock.advance(days=3)

        removed = scheduler.tick()

        assert removed == 1
        assert manager.get(old) is None
        assert manager.get(recent) is not None
        assert scheduler.last_run_day == clock.today()

    def test_runs_once_per_day(self, manager, clock):
        scheduler = SuspensionCleanupScheduler(manager, clock)
        clock.advance(days=1)

        assert scheduler.tick() == 0
        clock.advance(hours=1)
        assert scheduler.tick() is None

    def test_failed_pass_retries_next_tick(self, manager, clock, monkeypatch):
        scheduler = SuspensionCleanupScheduler(manager, clock)
        start_day = scheduler.last_run_day
        clock.advance(days=1)

        def fail(cutoff):
            raise PersistenceError("disk full")

        monkeypatch.setattr(manager, "cleanup_older_than", fail)
        assert scheduler.tick() is None
        assert scheduler.last_run_day == start_day

        monkeypatch.undo()
        assert scheduler.tick() == 0
        assert scheduler.last_run_day == clock.today()

    def test_force_cleanup_ignores_day(self, manager, clock, soda):
        scheduler = SuspensionCleanupScheduler(manager, clock, retention_days=1)
        _suspend(manager, soda)
        clock.advance(days=2)
        assert scheduler.perform_cleanup() == 1


class TestLifecycle:

    def test_start_and_stop(self, manager, clock):
        scheduler = SuspensionCleanupScheduler(manager, clock, interval_seconds=60, shutdown_timeout=2)
        scheduler.start()
        assert scheduler.is_running

        assert scheduler.stop() is True
        assert not scheduler.is_running

    def test_stop_without_start(self, manager, clock):
        scheduler = SuspensionCleanupScheduler(manager, clock)
        assert scheduler.stop() is True

    def test_stopped_scheduler_leaves_manager_usable(self, manager, clock, soda):
        scheduler = SuspensionCleanupScheduler(manager, clock, interval_seconds=60, shutdown_timeout=2)
        scheduler.start()
        scheduler.stop()
        assert _suspend(manager, soda) == "S-20240115-001"
