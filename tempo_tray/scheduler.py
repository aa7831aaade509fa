"""Daily rollover timer firing at each local midnight."""
from __future__ import annotations

import datetime as dt
import threading
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="scheduler")


def next_midnight(now: dt.datetime) -> dt.datetime:
    """Return the first midnight strictly after `now`, in the zone of `now`.

    For an aware `now` carrying a ZoneInfo, the result gets the offset valid at
    that midnight, so DST changes during the day are accounted for. A naive
    `now` is treated as local time of the machine.
    """
    tomorrow = now.date() + dt.timedelta(days=1)
    if now.tzinfo is None:
        return dt.datetime.combine(tomorrow, dt.time.min)
    return dt.datetime.combine(tomorrow, dt.time.min, tzinfo=now.tzinfo)


def seconds_until_next_midnight(now: dt.datetime) -> float:
    """Seconds from `now` to the next midnight; 24h when `now` is midnight itself."""
    target = next_midnight(now)
    if now.tzinfo is None:
        # Resolve both ends through the local zone to pick up DST offsets.
        return (target.astimezone() - now.astimezone()).total_seconds()
    # Aware datetimes sharing a tzinfo subtract as wall time; go through UTC.
    return (target.astimezone(dt.timezone.utc) - now.astimezone(dt.timezone.utc)).total_seconds()


def local_now_factory(timezone: Optional[str] = None) -> Callable[[], dt.datetime]:
    """Clock returning the current time in `timezone`, or naive local time."""
    if timezone is None:
        return dt.datetime.now
    tz = ZoneInfo(timezone)
    return lambda: dt.datetime.now(tz)


class MidnightScheduler:
    """Runs `on_midnight` once per calendar day at midnight.

    The wait is recomputed from the wall clock before each sleep rather than
    being a fixed 24h interval, so clock adjustments and DST changes do not
    accumulate drift. `stop()` wakes the thread and ends the loop.
    """

    def __init__(
        self,
        on_midnight: Callable[[], None],
        *,
        now: Callable[[], dt.datetime] = dt.datetime.now,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.on_midnight = on_midnight
        self._now = now
        self._stop = stop_event or threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.fired = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="tempo-midnight", daemon=True)
        self._thread.start()
        logger.info("Midnight scheduler started")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)
        logger.info("Midnight scheduler stopped")

    def run(self) -> None:
        """Loop between waiting for midnight and firing until stopped."""
        target: Optional[dt.datetime] = None
        while not self._stop.is_set():
            now = self._now()
            if target is None:
                target = next_midnight(now)
            elif now >= target:
                self.fire()
                now = self._now()
                target = next_midnight(now)
            # A wake-up slightly before midnight just sleeps the remainder.
            wait = seconds_until_next_midnight(now)
            logger.debug("Waiting until next midnight", extra={"seconds": wait})
            if self._stop.wait(wait):
                break

    def fire(self) -> None:
        """Run the rollover callback once; errors are logged, never raised."""
        logger.info("Midnight rollover")
        self.fired += 1
        try:
            self.on_midnight()
        except Exception:
            logger.exception("Midnight rollover failed")
