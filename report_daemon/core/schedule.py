"""Fixed time-of-day schedule for the privileged pipeline."""

from datetime import datetime
from typing import Optional, Tuple


class DailySchedule:
    """Level-triggered daily schedule: due whenever the clock reads HH:MM.

    A minute in which a run already happened is not due again, so a loop that
    wakes up early inside the same minute does not repeat the run.
    """

    def __init__(self, hour: int = 1, minute: int = 0):
        self.hour = hour
        self.minute = minute
        self._last_run: Optional[Tuple] = None

    def is_due(self, now: datetime) -> bool:
        if now.hour != self.hour or now.minute != self.minute:
            return False
        return self._last_run != self._minute_key(now)

    def mark_ran(self, now: datetime) -> None:
        self._last_run = self._minute_key(now)

    def describe(self) -> str:
        return f"daily at {self.hour:02d}:{self.minute:02d}"

    @staticmethod
    def _minute_key(now: datetime) -> Tuple:
        return (now.date(), now.hour, now.minute)
