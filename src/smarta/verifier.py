"""
Slack request signature verification.

Implements Slack's v0 signing scheme:

    basestring = "v0:" + timestamp + ":" + body
    signature  = "v0=" + hex(HMAC-SHA256(signing_secret, basestring))

Requests whose timestamp is more than ``max_age_seconds`` away from the
local clock are rejected to block replays.
"""

import hashlib
import hmac
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Union

from src.utils.logger import get_logger


class AuthError(Exception):
    """Exception raised when a request fails signature verification."""
    pass


@dataclass(frozen=True)
class SlackVerifier:
    """
    Verifies Slack request signatures.

    Attributes:
        secret: Slack signing secret (never logged or shown in repr)
        version: Signature version prefix
        max_age_seconds: Accepted clock skew for the request timestamp
        clock: Returns current unix time (injectable for tests)
        logger: Logger to use (defaults to the application logger)
    """

    secret: str = field(repr=False)
    version: str = "v0"
    max_age_seconds: int = 300
    clock: Callable[[], float] = field(default=time.time, repr=False, compare=False)
    logger: Any = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        if not self.secret:
            raise ValueError("Slack signing secret must not be empty")
        if self.logger is None:
            object.__setattr__(self, "logger", get_logger("verifier"))

    def sign(self, body: Union[str, bytes], timestamp: str) -> str:
        """Compute the signature Slack would send for ``body`` at ``timestamp``."""
        if isinstance(body, str):
            body = body.encode("utf-8")
        basestring = f"{self.version}:{timestamp}:".encode("utf-8") + body
        digest = hmac.new(self.secret.encode("utf-8"), basestring, hashlib.sha256).hexdigest()
        return f"{self.version}={digest}"

    def check_request(
        self,
        body: Union[str, bytes],
        timestamp: Optional[str],
        signature: Optional[str],
    ) -> None:
        """
        Verify a request, raising on failure.

        Raises:
            AuthError: Missing headers, malformed or stale timestamp,
                or signature mismatch
        """
        if not timestamp or not signature:
            raise AuthError("Missing signature headers")

        try:
            age = abs(self.clock() - int(timestamp))
        except (ValueError, OverflowError):
            raise AuthError("Malformed request timestamp")

        if age > self.max_age_seconds:
            self.logger.debug(f"Rejecting request timestamp {timestamp} (age {age:.0f}s)")
            raise AuthError("Request timestamp outside allowed window")

        expected = self.sign(body, timestamp)
        self.logger.debug(f"slack signature {signature}")
        self.logger.debug(f"generated signature {expected}")

        if not hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8")):
            raise AuthError("Signature mismatch")

    def verify(
        self,
        body: Union[str, bytes],
        timestamp: Optional[str],
        signature: Optional[str],
    ) -> bool:
        """True iff the request carries a valid, fresh signature."""
        try:
            self.check_request(body, timestamp, signature)
        except AuthError as e:
            self.logger.debug(f"Signature verification failed: {e}")
            return False
        return True
