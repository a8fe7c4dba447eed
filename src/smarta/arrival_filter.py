"""Pure filters over a sequence of trains."""

from typing import List, Sequence

from src.smarta.models import Train

BOARDING = "Boarding"


def filter_by_station(trains: Sequence[Train], station: str) -> List[Train]:
    """Trains at exactly ``station`` (case-sensitive), in feed order."""
    return [train for train in trains if train.station == station]


def detect_boarding(trains: Sequence[Train]) -> List[Train]:
    """Trains whose wait time is the ``Boarding`` sentinel, in feed order."""
    return [train for train in trains if train.waiting_time == BOARDING]
