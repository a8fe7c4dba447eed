"""
Slack webhook notifier for boarding alerts.

Supports two modes:
1. PRODUCTION - POST to the configured Slack incoming webhook
2. DRY_RUN (development) - logging only, no actual sending

A send is a single attempt. Failures raise DispatchError and the caller
decides whether to carry on.
"""

import httpx
from typing import Optional
from abc import ABC, abstractmethod

from src.smarta.formatter import to_payload
from src.smarta.models import NotificationMessage
from src.utils.logger import get_logger


class DispatchError(Exception):
    """Exception raised when a webhook POST fails."""
    pass


class BaseNotifier(ABC):
    """Abstract base class for notifiers."""

    @abstractmethod
    async def send(self, webhook_url: str, message: NotificationMessage) -> None:
        """
        Deliver a message to a webhook.

        Args:
            webhook_url: Slack incoming webhook URL
            message: Message to deliver

        Raises:
            DispatchError: If delivery failed
        """
        pass

    async def aclose(self) -> None:
        """Release any held connections."""
        pass


class LogNotifier(BaseNotifier):
    """
    Notifier for development mode - logging only.

    Payloads are written to the log but never sent.
    """

    def __init__(self, logger=None):
        """Initialize LogNotifier."""
        self.logger = logger or get_logger("notifier")
        self.logger.info("🔧 LogNotifier initialized (DRY-RUN mode)")

    async def send(self, webhook_url: str, message: NotificationMessage) -> None:
        """Log notification instead of sending."""
        payload = to_payload(message)
        self.logger.info("📢 [DRY-RUN] SLACK NOTIFICATION (NOT SENT)")
        self.logger.info(f"📨 {payload}")


class WebhookNotifier(BaseNotifier):
    """
    Notifier for production - POSTs JSON to a Slack incoming webhook.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger=None,
    ):
        """
        Initialize WebhookNotifier.

        Args:
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
            logger: Logger to use (defaults to the application logger)
        """
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logger or get_logger("notifier")
        self.logger.info("✅ WebhookNotifier initialized (PRODUCTION mode)")

    def _get_client(self) -> httpx.AsyncClient:
        """Return the shared client, opening it on first use."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def send(self, webhook_url: str, message: NotificationMessage) -> None:
        """POST the message to ``webhook_url``."""
        payload = to_payload(message)
        self.logger.debug(f"Sending message: {payload}")

        try:
            response = await self._get_client().post(
                webhook_url,
                content=payload,
                headers={"Content-Type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise DispatchError(f"Webhook request failed: {e}") from e

        if not response.is_success:
            raise DispatchError(
                f"Webhook returned HTTP {response.status_code}: {response.text[:200]}"
            )

        self.logger.info(f"✅ Notification sent ({len(message.blocks)} block(s))")


def get_notifier(dry_run: bool = False, timeout: float = 10.0) -> BaseNotifier:
    """
    Factory for creating notifiers.

    Args:
        dry_run: If True - LogNotifier (logs only), else WebhookNotifier
        timeout: Webhook request timeout in seconds

    Returns:
        BaseNotifier: Notifier instance
    """
    if dry_run:
        return LogNotifier()
    return WebhookNotifier(timeout=timeout)
