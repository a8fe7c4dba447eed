"""Train feed providers."""

from src.smarta.providers.base import FetchError, TrainFeed
from src.smarta.providers.marta import MartaClient

__all__ = ["FetchError", "TrainFeed", "MartaClient"]
