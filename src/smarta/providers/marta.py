"""
MARTA real-time rail client.

Fetches current train predictions from the MARTA developer API.
Single attempt per call with a bounded timeout; the poll loop decides
what to do on failure.
"""

from typing import List, Optional

import httpx
from pydantic import ValidationError

from src.smarta.models import Train
from src.smarta.providers.base import FetchError, TrainFeed
from src.utils.config import MARTA_REALTIME_URL
from src.utils.logger import get_logger


class MartaClient(TrainFeed):
    """Client for the MARTA RealtimeTrain REST service."""

    def __init__(
        self,
        api_key: str,
        api_url: str = MARTA_REALTIME_URL,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger=None,
    ):
        """
        Initialize MARTA client.

        Args:
            api_key: MARTA developer API key
            api_url: Realtime arrivals endpoint
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (used by tests)
            logger: Logger to use (defaults to the application logger)
        """
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self.logger = logger or get_logger("marta")

        if not api_key:
            self.logger.warning("⚠️ MARTA API key not configured!")

    def _get_client(self) -> httpx.AsyncClient:
        """Return the shared client, opening it on first use."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the shared HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_trains(self) -> List[Train]:
        """Fetch all current train predictions."""
        self.logger.debug("Fetching trains from MARTA")

        try:
            response = await self._get_client().get(self.api_url, params={"apikey": self.api_key})
        except httpx.HTTPError as e:
            raise FetchError(f"MARTA request failed: {e}") from e

        if response.status_code != 200:
            raise FetchError(
                f"MARTA returned status {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(f"MARTA returned invalid JSON: {e}") from e

        return self._parse_trains(data)

    def _parse_trains(self, data) -> List[Train]:
        """
        Parse the MARTA JSON array into Train models.

        Individual malformed entries are skipped; a payload that is not a
        list is treated as a failed fetch.
        """
        if not isinstance(data, list):
            raise FetchError(f"Unexpected MARTA payload type: {type(data).__name__}")

        trains = []
        for raw in data:
            try:
                trains.append(Train.model_validate(raw))
            except ValidationError as e:
                self.logger.warning(f"Failed to parse train entry: {e.error_count()} error(s)")
                continue

        self.logger.debug(f"Fetched {len(trains)} trains")
        return trains
