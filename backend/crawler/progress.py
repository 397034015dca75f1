"""
Crawl progress reporting.

A ProgressReporter belongs to one crawl. Stages call report() with a
0-100 estimate; the reporter keeps the latest value and pushes it to
every registered observer. How observers deliver the value (SSE, log
line, progress bar) is not its concern.
"""

import math
from typing import Callable, List
import logging

logger = logging.getLogger(__name__)

ProgressObserver = Callable[[int], None]


def interpolate_progress(processed: int, total: int, start: int, end: int) -> int:
    """
    Progress estimate for a stage that spans start..end percent.

    Rounds half up and never exceeds end.

    Examples:
        interpolate_progress(2, 4, 70, 95) -> 83
        interpolate_progress(4, 4, 70, 95) -> 95
        interpolate_progress(0, 0, 70, 95) -> 95
    """
    if total <= 0:
        return end
    value = start + (processed / total) * (end - start)
    return min(end, int(math.floor(value + 0.5)))


class ProgressReporter:
    """Current completion percentage of one crawl plus its observers."""

    def __init__(self, percent: int = 0):
        self._percent = self._clamp(percent)
        self._observers: List[ProgressObserver] = []

    @staticmethod
    def _clamp(percent) -> int:
        return max(0, min(100, int(percent)))

    @property
    def percent(self) -> int:
        return self._percent

    @property
    def observer_count(self) -> int:
        return len(self._observers)

    def subscribe(self, observer: ProgressObserver) -> ProgressObserver:
        """Register an observer; returns it so callers can unsubscribe later."""
        if observer not in self._observers:
            self._observers.append(observer)
        return observer

    def unsubscribe(self, observer: ProgressObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def report(self, percent: int) -> None:
        """
        Record a new completion estimate and push it to all observers.

        Delivery is best effort: an observer that raises is logged and
        skipped, and stays registered until its owner unsubscribes it.
        """
        self._percent = self._clamp(percent)
        for observer in list(self._observers):
            try:
                observer(self._percent)
            except Exception as e:
                logger.warning(f"Progress observer failed: {e}")
