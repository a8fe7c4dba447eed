"""
Handler for the /find-arrival slash command.

Each call works only on its arguments and on the shared, immutable
verifier and feed handles, so the handler is safe to run concurrently.
"""

import json
from typing import Optional, Union
from urllib.parse import parse_qs

from pydantic import ValidationError

from src.smarta.arrival_filter import filter_by_station
from src.smarta.formatter import build_message
from src.smarta.models import ArrivalQuery, NotificationMessage
from src.smarta.providers.base import TrainFeed
from src.smarta.verifier import SlackVerifier
from src.utils.logger import get_logger


class CommandError(Exception):
    """Exception raised for a malformed command body."""
    pass


def parse_query(body: bytes, content_type: Optional[str]) -> ArrivalQuery:
    """
    Parse the command body.

    Slack sends slash commands form-encoded with ``text`` and
    ``response_url``; a JSON object with the same keys is also accepted.

    Raises:
        CommandError: If the body cannot be parsed or has no station
    """
    try:
        text_body = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CommandError("Request body is not valid UTF-8") from e

    if content_type and content_type.split(";")[0].strip().lower() == "application/json":
        try:
            data = json.loads(text_body or "{}")
        except json.JSONDecodeError as e:
            raise CommandError(f"Invalid JSON body: {e.msg}") from e
        if not isinstance(data, dict):
            raise CommandError("JSON body must be an object")
    else:
        data = {key: values[0] for key, values in parse_qs(text_body, keep_blank_values=True).items()}

    try:
        query = ArrivalQuery(
            text=str(data.get("text") or "").strip(),
            response_url=data.get("response_url") or None,
        )
    except ValidationError as e:
        raise CommandError(f"Invalid command fields: {e.error_count()} error(s)") from e

    if not query.text:
        raise CommandError("Usage: /find-arrival <station name>")

    return query


class CommandHandler:
    """Answers "next arrivals at station X" requests."""

    def __init__(
        self,
        feed: TrainFeed,
        verifier: Optional[SlackVerifier],
        skip_verification: bool = False,
        logger=None,
    ):
        """
        Initialize command handler.

        Args:
            feed: Train feed (shared with the poll scheduler)
            verifier: Signature verifier
            skip_verification: Accept unsigned requests (local debugging only)
            logger: Logger to use (defaults to the application logger)
        """
        self.feed = feed
        self.verifier = verifier
        self.skip_verification = skip_verification
        self.logger = logger or get_logger("command")

        if skip_verification:
            self.logger.warning("⚠️ Signature verification DISABLED - do not expose this endpoint")
        elif verifier is None:
            raise ValueError("A verifier is required unless verification is skipped")

    async def handle(
        self,
        body: Union[bytes, str],
        content_type: Optional[str],
        timestamp: Optional[str],
        signature: Optional[str],
    ) -> NotificationMessage:
        """
        Authenticate and answer one command.

        Returns:
            NotificationMessage: One block per arrival at the station;
                no blocks if nothing matched

        Raises:
            AuthError: If the signature is missing, stale, or wrong
            CommandError: If the body is malformed
            FetchError: If the feed could not be read
        """
        if isinstance(body, str):
            body = body.encode("utf-8")

        if not self.skip_verification:
            self.verifier.check_request(body, timestamp, signature)

        query = parse_query(body, content_type)
        self.logger.info(f"Looking up arrivals for '{query.text}'")
        if query.response_url:
            self.logger.debug(f"Reply target: {query.response_url}")

        trains = await self.feed.fetch_trains()
        matches = filter_by_station(trains, query.text)

        self.logger.info(f"Found {len(matches)} arrival(s) for '{query.text}'")
        return build_message(matches)
