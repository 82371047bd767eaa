"""
Weekly wall-clock trigger and the loop that waits for it.
"""

import logging
import threading
import time
from datetime import datetime, time as clock_time, timedelta, tzinfo
from typing import Callable, Optional

logger = logging.getLogger(__name__)

MONDAY = 0

# Upper bound on a single wait so a suspended host or clock change is noticed.
MAX_WAIT_SECONDS = 60.0
# A fire time missed by more than this is skipped instead of run late.
MISFIRE_GRACE = timedelta(minutes=5)


class WeeklyTrigger:
    def __init__(self, tz: tzinfo, weekday: int = MONDAY, hour: int = 8, minute: int = 0):
        if not 0 <= weekday <= 6:
            raise ValueError(f"weekday must be 0-6, got {weekday}")
        self.tz = tz
        self.weekday = weekday
        self.at = clock_time(hour, minute)

    def next_after(self, moment: datetime) -> datetime:
        """Next fire time strictly after ``moment``.

        Computed from local calendar dates so the trigger stays on the same
        wall-clock time across DST changes.
        """
        local = moment.astimezone(self.tz)
        day = local.date() + timedelta(days=(self.weekday - local.weekday()) % 7)
        candidate = datetime.combine(day, self.at, tzinfo=self.tz)
        # Aware datetimes sharing a tzinfo compare by wall clock, so use timestamps.
        if candidate.timestamp() <= local.timestamp():
            candidate = datetime.combine(day + timedelta(days=7), self.at, tzinfo=self.tz)
        return candidate

    def __repr__(self):
        return f"WeeklyTrigger(weekday={self.weekday}, at={self.at:%H:%M}, tz={self.tz})"


class WeeklyScheduler:
    def __init__(self, trigger: WeeklyTrigger, callback: Callable[[], object],
                 clock: Optional[Callable[[], float]] = None):
        self.trigger = trigger
        self.callback = callback
        self.clock = clock or time.time

    def now(self) -> datetime:
        return datetime.fromtimestamp(self.clock(), self.trigger.tz)

    def run_forever(self, stop_event: Optional[threading.Event] = None) -> None:
        """Fire the callback at every trigger time until ``stop_event`` is set."""
        stop_event = stop_event or threading.Event()
        while not stop_event.is_set():
            fire_at = self.trigger.next_after(self.now())
            logger.info("Next weekly summary scheduled for %s", fire_at.isoformat())

            if not self._wait_until(fire_at, stop_event):
                return

            late = timedelta(seconds=self.clock() - fire_at.timestamp())
            if late > MISFIRE_GRACE:
                logger.warning("Skipping run scheduled for %s (missed by %s)", fire_at.isoformat(), late)
                continue

            try:
                self.callback()
            except Exception:
                logger.exception("Scheduled run raised an unexpected error")

    def _wait_until(self, fire_at: datetime, stop_event: threading.Event) -> bool:
        """Block until ``fire_at``; return False if stopped first."""
        while True:
            remaining = fire_at.timestamp() - self.clock()
            if remaining <= 0:
                return True
            if stop_event.wait(min(remaining, MAX_WAIT_SECONDS)):
                return False
