"""
Slack message formatting for trains.

Shared by the boarding alert path and the /find-arrival command.
All functions are pure: no I/O and no mutation of their inputs.
"""

import re
from typing import List, Sequence

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from src.smarta.models import NotificationBlock, NotificationMessage, TextObject, Train

# C0/C1 control characters, including newlines and tabs
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")


class FormatError(Exception):
    """Exception raised when a message cannot be serialized."""
    pass


def escape_mrkdwn(value: str) -> str:
    """
    Make feed-supplied text safe to embed in Slack mrkdwn.

    Control characters are dropped and the three characters Slack treats
    as markup (&, <, >) are replaced by their HTML entities.
    """
    value = _CONTROL_CHARS.sub("", value)
    return value.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def format_train_line(train: Train) -> str:
    """Human-readable single line for a train, e.g. ``*FIVE POINTS STATION* N to Airport - 3 min``."""
    line = f"*{escape_mrkdwn(train.station)}* {escape_mrkdwn(train.direction)}"
    if train.destination:
        line += f" to {escape_mrkdwn(train.destination)}"
    return f"{line} - {escape_mrkdwn(train.waiting_time)}"


def build_blocks(trains: Sequence[Train]) -> List[NotificationBlock]:
    """One section block per train, in input order."""
    return [
        NotificationBlock(text=TextObject(text=format_train_line(train)))
        for train in trains
    ]


def build_boarding_alert(train: Train) -> str:
    """Alert text for a train that has started boarding."""
    return f"{escape_mrkdwn(train.station)} {escape_mrkdwn(train.direction)} is now boarding"


def build_message(trains: Sequence[Train]) -> NotificationMessage:
    """Wrap the blocks for ``trains`` in a message."""
    return NotificationMessage(blocks=build_blocks(trains))


def build_alert_message(train: Train) -> NotificationMessage:
    """Message sent to the webhook when ``train`` is boarding."""
    alert = build_boarding_alert(train)
    return NotificationMessage(
        blocks=[NotificationBlock(text=TextObject(text=f":train: {alert}"))],
        text=alert,
    )


def to_payload(message: NotificationMessage) -> str:
    """
    Serialize a message to the JSON body Slack expects.

    ``blocks`` is always present, so an empty message serializes as
    ``{"blocks":[]}``.

    Raises:
        FormatError: If the message cannot be serialized
    """
    try:
        return message.model_dump_json(exclude_none=True)
    except (PydanticSerializationError, ValidationError) as e:
        raise FormatError(f"Failed to serialize message: {e}") from e
