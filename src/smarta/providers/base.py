"""Base train feed interface."""

from abc import ABC, abstractmethod
from typing import List

from src.smarta.models import Train


class FetchError(Exception):
    """Exception raised when the feed is unreachable or returns malformed data."""
    pass


class TrainFeed(ABC):
    """
    Abstract source of current train predictions.

    Implementations must be safe to call concurrently: the poll scheduler
    and the command endpoint share a single instance.
    """

    @abstractmethod
    async def fetch_trains(self) -> List[Train]:
        """
        Fetch the current set of trains.

        Returns:
            List[Train]: Trains in feed order

        Raises:
            FetchError: If the feed cannot be read
        """
        pass

    async def aclose(self) -> None:
        """Release any held connections."""
        pass
