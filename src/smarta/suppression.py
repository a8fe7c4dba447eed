"""
Optional suppression of repeated boarding alerts.

By default every poll cycle alerts for every boarding train, so a train
that stays boarding for N cycles produces N alerts. With a positive
window, a train already alerted within the last ``window_seconds`` is
skipped.
"""

import time
from typing import Callable, Dict, Tuple

from src.smarta.models import Train


def train_key(train: Train) -> Tuple[str, ...]:
    """Identity of a train across cycles: train id when the feed has one."""
    if train.train_id:
        return ("id", train.train_id, train.station)
    return ("route", train.station, train.direction, train.destination or "")


class BoardingSuppressor:
    """Remembers recent boarding alerts. Owned by a single poll loop."""

    def __init__(self, window_seconds: int = 0, clock: Callable[[], float] = time.monotonic):
        self.window_seconds = window_seconds
        self._clock = clock
        self._last_alert: Dict[Tuple[str, ...], float] = {}

    @property
    def enabled(self) -> bool:
        return self.window_seconds > 0

    def should_notify(self, train: Train) -> bool:
        """True if an alert for ``train`` should go out now; records it if so."""
        if not self.enabled:
            return True

        now = self._clock()
        self._expire(now)

        key = train_key(train)
        if key in self._last_alert:
            return False

        self._last_alert[key] = now
        return True

    def _expire(self, now: float) -> None:
        cutoff = now - self.window_seconds
        self._last_alert = {k: t for k, t in self._last_alert.items() if t > cutoff}
