"""
Poll scheduler for boarding alerts.

Runs fetch -> detect boarding -> notify -> sleep on a fixed interval.

Cancellation is cooperative and checked once per cycle, at the top of
the loop. A cycle that has started always finishes its fetch and its
dispatches, so shutdown waits at most one fetch plus its dispatches
(each bounded by the HTTP timeout). The sleep between cycles is woken
early by cancel() and does not add to that bound.
"""

import asyncio
from datetime import datetime
from typing import Dict, Optional

from src.smarta.arrival_filter import detect_boarding
from src.smarta.formatter import FormatError, build_alert_message
from src.smarta.models import SchedulerState
from src.smarta.notifier import BaseNotifier, DispatchError
from src.smarta.providers.base import FetchError, TrainFeed
from src.smarta.suppression import BoardingSuppressor
from src.utils.logger import get_logger


class PollScheduler:
    """
    Background worker relaying boarding trains to a webhook.

    State moves RUNNING -> CANCELLED exactly once; it never goes back.
    """

    def __init__(
        self,
        feed: TrainFeed,
        notifier: BaseNotifier,
        webhook_url: str,
        poll_interval: float,
        suppressor: Optional[BoardingSuppressor] = None,
        logger=None,
    ):
        """
        Initialize poll scheduler.

        Args:
            feed: Train feed (shared with the command endpoint)
            notifier: Notifier for boarding alerts
            webhook_url: Slack webhook receiving the alerts
            poll_interval: Seconds to sleep between cycles
            suppressor: Optional repeated-alert suppression (default: alert every cycle)
            logger: Logger to use (defaults to the application logger)
        """
        self.feed = feed
        self.notifier = notifier
        self.webhook_url = webhook_url
        self.poll_interval = poll_interval
        self.suppressor = suppressor or BoardingSuppressor()
        self.logger = logger or get_logger("scheduler")

        self.state = SchedulerState.RUNNING
        self._cancelled = asyncio.Event()
        self.task: Optional[asyncio.Task] = None

        self.last_cycle: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.cycle_count = 0
        self.error_count = 0
        self.notification_count = 0

    @property
    def is_running(self) -> bool:
        return self.state == SchedulerState.RUNNING

    def cancel(self) -> bool:
        """
        Request shutdown.

        Returns:
            True if this call moved the scheduler to CANCELLED,
            False if it was already cancelled
        """
        if self.state == SchedulerState.CANCELLED:
            self.logger.debug("Cancel requested but scheduler already cancelled")
            return False

        self.state = SchedulerState.CANCELLED
        self._cancelled.set()
        self.logger.info("Poll scheduler cancelled")
        return True

    async def start(self):
        """Start the poll loop as a background task."""
        if self.task is not None:
            self.logger.warning("Poll scheduler already started")
            return

        self.task = asyncio.create_task(self.run())
        self.logger.info(f"Started poll scheduler - interval: {self.poll_interval}s")

    async def stop(self):
        """
        Cancel the loop, wait for the current cycle to finish and close
        the notifier.

        The loop task is shielded, so cancelling the caller while it waits
        never aborts a cycle mid-fetch or mid-dispatch. The first such
        cancellation is held back until the loop has exited, then re-raised.
        """
        self.cancel()
        try:
            if self.task:
                try:
                    await asyncio.shield(self.task)
                except asyncio.CancelledError:
                    if self.task.done():
                        raise
                    self.logger.warning("Interrupted while stopping, waiting for the current cycle")
                    await asyncio.shield(self.task)
                    raise
        finally:
            await self.notifier.aclose()
        self.logger.info("Poll scheduler stopped")

    async def run(self):
        """Main poll loop."""
        self.logger.info("Poll loop started")

        while True:
            if self.state == SchedulerState.CANCELLED:
                break

            try:
                await self.run_cycle()

            except FetchError as e:
                self.error_count += 1
                self.last_error = str(e)
                self.logger.error(f"Failed to fetch trains: {e} (error count: {self.error_count})")

            except Exception as e:
                self.error_count += 1
                self.last_error = str(e)
                self.logger.exception(f"Unexpected error in poll loop: {e}")

            await self._sleep()

        self.logger.info(f"Poll loop exited after {self.cycle_count} cycle(s)")

    async def run_cycle(self) -> int:
        """
        Perform one fetch and dispatch an alert per boarding train.

        Returns:
            Number of notifications delivered

        Raises:
            FetchError: If the feed could not be read
        """
        self.cycle_count += 1
        self.last_cycle = datetime.now()
        self.last_error = None
        self.logger.debug(f"Performing cycle #{self.cycle_count}: getting trains")

        trains = await self.feed.fetch_trains()
        boarding = detect_boarding(trains)

        sent = 0
        for train in boarding:
            if not self.suppressor.should_notify(train):
                self.logger.debug(f"Suppressed repeat alert for {train.station} {train.direction}")
                continue

            self.logger.info(f"Train is boarding: {train.station} {train.direction}")
            try:
                await self.notifier.send(self.webhook_url, build_alert_message(train))
                sent += 1
            except (DispatchError, FormatError) as e:
                self.error_count += 1
                self.last_error = str(e)
                self.logger.error(f"Failed to send notification for {train.station}: {e}")

        self.notification_count += sent
        return sent

    async def _sleep(self):
        """Wait one interval, returning early if cancelled."""
        try:
            await asyncio.wait_for(self._cancelled.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            pass

    def get_health_status(self) -> Dict:
        """
        Get health status for the scheduler.

        Returns:
            Health status dictionary
        """
        return {
            "state": self.state.value,
            "last_cycle": self.last_cycle.isoformat() if self.last_cycle else None,
            "cycle_count": self.cycle_count,
            "error_count": self.error_count,
            "notification_count": self.notification_count,
            "last_error": self.last_error,
            "poll_interval_seconds": self.poll_interval,
        }
