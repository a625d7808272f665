"""Tests for the recent-change display and the auto-phase reminder."""

from scouting.auto_reminder import AutoPhaseReminder
from scouting.change_tracker import ChangeTracker, CounterChangeSet


class TestChangeTracker:
    def test_accumulates_within_window(self, clock):
        tracker = ChangeTracker(clock=clock)
        tracker.record(1)
        clock.advance(2)
        tracker.record(1)
        clock.advance(2)
        tracker.record(-1)
        assert tracker.accumulated_delta == 1

    def test_clears_after_idle_window(self, clock):
        tracker = ChangeTracker(clock=clock)
        tracker.record(10)
        clock.advance(9.9)
        assert tracker.accumulated_delta == 10
        clock.advance(0.1)
        assert tracker.accumulated_delta is None
        assert tracker.visible_until is None

    def test_each_update_extends_the_window(self, clock):
        tracker = ChangeTracker(clock=clock)
        tracker.record(1)
        clock.advance(9)
        tracker.record(1)
        clock.advance(9)
        assert tracker.accumulated_delta == 2
        assert tracker.remaining() == 1

    def test_new_total_after_expiry(self, clock):
        tracker = ChangeTracker(clock=clock)
        tracker.record(10)
        clock.advance(15)
        assert tracker.record(-1) == -1

    def test_cancel(self, clock):
        tracker = ChangeTracker(clock=clock)
        tracker.record(1)
        tracker.cancel()
        assert tracker.accumulated_delta is None
        assert tracker.remaining() == 0.0


class TestCounterChangeSet:
    def test_counters_are_independent(self, clock):
        changes = CounterChangeSet(clock=clock)
        changes.record("auto_fuel", 1)
        changes.record("teleop_passes", 10)
        assert changes.snapshot() == {
            "auto_fuel": 1,
            "auto_passes": None,
            "teleop_fuel": None,
            "teleop_passes": 10,
        }

    def test_cancel_all(self, clock):
        changes = CounterChangeSet(clock=clock)
        changes.record("auto_fuel", 1)
        changes.cancel_all()
        assert changes["auto_fuel"].accumulated_delta is None


class TestAutoPhaseReminder:
    def test_idle_until_first_auto_touch(self, clock):
        reminder = AutoPhaseReminder(clock=clock)
        clock.advance(60)
        assert not reminder.armed
        assert not reminder.is_signalling()

    def test_signals_after_budget(self, clock):
        reminder = AutoPhaseReminder(clock=clock)
        reminder.touch_auto()
        clock.advance(19.5)
        assert not reminder.is_signalling()
        assert reminder.seconds_until_signal() == 0.5
        clock.advance(0.5)
        assert reminder.is_signalling()
        clock.advance(30)
        assert reminder.is_signalling()

    def test_only_first_auto_touch_starts_timer(self, clock):
        reminder = AutoPhaseReminder(clock=clock)
        reminder.touch_auto()
        clock.advance(15)
        reminder.touch_auto()
        clock.advance(5)
        assert reminder.is_signalling()

    def test_teleop_touch_clears_for_good(self, clock):
        reminder = AutoPhaseReminder(clock=clock)
        reminder.touch_auto()
        clock.advance(25)
        reminder.touch_teleop()
        assert not reminder.is_signalling()
        reminder.touch_auto()
        clock.advance(25)
        assert not reminder.is_signalling()
        assert reminder.cleared

    def test_collapse_clears(self, clock):
        reminder = AutoPhaseReminder(clock=clock)
        reminder.touch_auto()
        clock.advance(21)
        reminder.collapse_auto()
        assert not reminder.is_signalling()
        assert reminder.seconds_until_signal() is None
