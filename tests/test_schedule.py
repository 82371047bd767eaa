"""Tests for the weekly trigger and the scheduler loop."""

from datetime import datetime, timedelta

import pytest

from conftest import NEW_YORK
from summary_clients.schedule import WeeklyScheduler, WeeklyTrigger


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start.timestamp()

    def __call__(self):
        return self.now


class FakeStopEvent:
    """Stop event whose wait() advances the fake clock instead of sleeping."""

    def __init__(self, clock, jumps=None):
        self.clock = clock
        self.jumps = list(jumps or [])
        self._set = False

    def is_set(self):
        return self._set

    def set(self):
        self._set = True

    def wait(self, timeout):
        self.clock.now += timeout
        if self.jumps:
            self.clock.now += self.jumps.pop(0)
        return self._set


def _local(ts):
    return datetime.fromtimestamp(ts, NEW_YORK)


# --- WeeklyTrigger ---

def test_next_after_midweek_is_following_monday():
    trigger = WeeklyTrigger(NEW_YORK)

    fire = trigger.next_after(datetime(2026, 10, 21, 12, 0, tzinfo=NEW_YORK))

    assert fire == datetime(2026, 10, 26, 8, 0, tzinfo=NEW_YORK)


def test_next_after_monday_before_eight_is_same_day():
    trigger = WeeklyTrigger(NEW_YORK)

    fire = trigger.next_after(datetime(2026, 10, 19, 7, 59, tzinfo=NEW_YORK))

    assert fire == datetime(2026, 10, 19, 8, 0, tzinfo=NEW_YORK)


def test_next_after_exact_fire_time_is_next_week():
    trigger = WeeklyTrigger(NEW_YORK)

    fire = trigger.next_after(datetime(2026, 10, 19, 8, 0, tzinfo=NEW_YORK))

    assert fire == datetime(2026, 10, 26, 8, 0, tzinfo=NEW_YORK)


def test_next_after_handles_other_timezones():
    trigger = WeeklyTrigger(NEW_YORK)
    # 13:30 UTC on Monday is 09:30 in New York, after the trigger.
    moment = datetime.fromisoformat("2026-10-19T13:30:00+00:00")

    assert trigger.next_after(moment) == datetime(2026, 10, 26, 8, 0, tzinfo=NEW_YORK)


def test_trigger_keeps_wall_clock_across_dst_end():
    trigger = WeeklyTrigger(NEW_YORK)

    fire = trigger.next_after(datetime(2026, 10, 30, 12, 0, tzinfo=NEW_YORK))

    assert fire.isoformat() == "2026-11-02T08:00:00-05:00"


def test_trigger_keeps_wall_clock_across_dst_start():
    trigger = WeeklyTrigger(NEW_YORK)

    fire = trigger.next_after(datetime(2027, 3, 12, 12, 0, tzinfo=NEW_YORK))

    assert fire.isoformat() == "2027-03-15T08:00:00-04:00"


def test_trigger_rejects_bad_weekday():
    with pytest.raises(ValueError):
        WeeklyTrigger(NEW_YORK, weekday=7)


# --- WeeklyScheduler ---

def test_scheduler_fires_every_monday_at_eight():
    clock = FakeClock(datetime(2026, 10, 19, 7, 0, tzinfo=NEW_YORK))
    stop = FakeStopEvent(clock)
    fired = []

    def callback():
        fired.append(_local(clock()))
        if len(fired) == 2:
            stop.set()

    WeeklyScheduler(WeeklyTrigger(NEW_YORK), callback, clock=clock).run_forever(stop)

    assert fired == [
        datetime(2026, 10, 19, 8, 0, tzinfo=NEW_YORK),
        datetime(2026, 10, 26, 8, 0, tzinfo=NEW_YORK),
    ]


def test_scheduler_survives_callback_errors():
    clock = FakeClock(datetime(2026, 10, 19, 7, 0, tzinfo=NEW_YORK))
    stop = FakeStopEvent(clock)
    calls = []

    def callback():
        calls.append(_local(clock()))
        if len(calls) == 2:
            stop.set()
        raise RuntimeError("boom")

    WeeklyScheduler(WeeklyTrigger(NEW_YORK), callback, clock=clock).run_forever(stop)

    assert len(calls) == 2
    assert calls[1] - calls[0] == timedelta(days=7)


def test_scheduler_skips_a_run_missed_while_suspended():
    start = datetime(2026, 10, 19, 7, 59, tzinfo=NEW_YORK)
    clock = FakeClock(start)
    # First wait oversleeps by an hour, as after a host suspend.
    stop = FakeStopEvent(clock, jumps=[3600])
    fired = []

    def callback():
        fired.append(_local(clock()))
        stop.set()

    WeeklyScheduler(WeeklyTrigger(NEW_YORK), callback, clock=clock).run_forever(stop)

    assert fired == [datetime(2026, 10, 26, 8, 0, tzinfo=NEW_YORK)]


def test_scheduler_returns_when_stopped_before_firing():
    clock = FakeClock(datetime(2026, 10, 19, 7, 0, tzinfo=NEW_YORK))
    stop = FakeStopEvent(clock)
    stop.set()
    fired = []

    WeeklyScheduler(WeeklyTrigger(NEW_YORK), lambda: fired.append(1), clock=clock).run_forever(stop)

    assert fired == []
