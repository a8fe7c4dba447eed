"""Shared test fixtures and helpers for SMARTA Slack tests."""

import asyncio
from typing import List, Optional

import pytest

from src.smarta.models import NotificationMessage, Train
from src.smarta.notifier import BaseNotifier, DispatchError
from src.smarta.providers.base import FetchError, TrainFeed
from src.smarta.verifier import SlackVerifier


# =============================================================================
# Constants
# =============================================================================


SIGNING_SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
WEBHOOK_URL = "https://hooks.slack.com/services/T000/B000/XXXX"

# A fixed "now" for deterministic signature checks
FIXED_TIMESTAMP = "1700000000"


# =============================================================================
# Test data helpers
# =============================================================================


def create_test_train(
    station: str = "FIVE POINTS STATION",
    direction: str = "N",
    waiting_time: str = "3 min",
    destination: Optional[str] = None,
    train_id: Optional[str] = None,
) -> Train:
    """Create a test train."""
    return Train(
        station=station,
        direction=direction,
        waiting_time=waiting_time,
        destination=destination,
        train_id=train_id,
    )


# =============================================================================
# Doubles
# =============================================================================


class StaticFeed(TrainFeed):
    """Feed returning the same trains on every call."""

    def __init__(self, trains: Optional[List[Train]] = None):
        self.trains = trains or []
        self.calls = 0

    async def fetch_trains(self) -> List[Train]:
        self.calls += 1
        return list(self.trains)


class FailingFeed(TrainFeed):
    """Feed that always fails."""

    def __init__(self, message: str = "MARTA request failed: timed out"):
        self.message = message
        self.calls = 0

    async def fetch_trains(self) -> List[Train]:
        self.calls += 1
        raise FetchError(self.message)


class GatedFeed(TrainFeed):
    """Feed whose fetch blocks until released, to hold a cycle in flight."""

    def __init__(self, trains: Optional[List[Train]] = None):
        self.trains = trains or []
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0
        self.completed = 0

    async def fetch_trains(self) -> List[Train]:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        self.completed += 1
        return list(self.trains)


class RecordingNotifier(BaseNotifier):
    """Notifier that records messages; optionally fails for chosen calls."""

    def __init__(self, fail_on: Optional[set] = None):
        self.sent: List[tuple] = []
        self.fail_on = fail_on or set()
        self.calls = 0
        self.closed = False

    async def send(self, webhook_url: str, message: NotificationMessage) -> None:
        self.calls += 1
        if self.calls in self.fail_on:
            raise DispatchError("Webhook returned HTTP 500: internal_error")
        self.sent.append((webhook_url, message))

    async def aclose(self) -> None:
        self.closed = True


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def verifier() -> SlackVerifier:
    """Verifier whose clock is pinned to FIXED_TIMESTAMP."""
    return SlackVerifier(secret=SIGNING_SECRET, clock=lambda: float(FIXED_TIMESTAMP))


@pytest.fixture
def five_points_trains() -> List[Train]:
    return [
        create_test_train(station="FIVE POINTS STATION", direction="N", waiting_time="Boarding"),
        create_test_train(station="FIVE POINTS STATION", direction="S", waiting_time="3 min"),
    ]
