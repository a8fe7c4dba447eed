"""Pydantic models for the SMARTA Slack relay."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class SchedulerState(str, Enum):
    """Poll scheduler lifecycle state."""
    RUNNING = "running"
    CANCELLED = "cancelled"


class Train(BaseModel):
    """A single train prediction from the MARTA real-time feed."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        json_schema_extra={
            "example": {
                "STATION": "FIVE POINTS STATION",
                "DIRECTION": "N",
                "WAITING_TIME": "Boarding",
                "DESTINATION": "North Springs",
                "LINE": "RED",
                "TRAIN_ID": "403206",
                "NEXT_ARR": "08:14:32 PM",
                "WAITING_SECONDS": "-12",
                "EVENT_TIME": "10/17/2026 8:14:20 PM",
            }
        },
    )

    station: str = Field(..., alias="STATION", description="Station name")
    direction: str = Field(..., alias="DIRECTION", description="Direction of travel (N, S, E, W)")
    waiting_time: str = Field(
        ...,
        alias="WAITING_TIME",
        description="Free-form wait (e.g. '3 min') or the sentinel 'Boarding'"
    )

    destination: Optional[str] = Field(None, alias="DESTINATION", description="Destination station")
    line: Optional[str] = Field(None, alias="LINE", description="Line colour")
    train_id: Optional[str] = Field(None, alias="TRAIN_ID", description="Train identifier")
    next_arrival: Optional[str] = Field(None, alias="NEXT_ARR", description="Next arrival clock time")
    waiting_seconds: Optional[str] = Field(None, alias="WAITING_SECONDS", description="Wait in seconds")
    event_time: Optional[str] = Field(None, alias="EVENT_TIME", description="Prediction timestamp")


class TextObject(BaseModel):
    """Slack text object."""

    model_config = ConfigDict(frozen=True)

    type: str = "mrkdwn"
    text: str


class NotificationBlock(BaseModel):
    """Slack section block."""

    model_config = ConfigDict(frozen=True)

    type: str = "section"
    text: TextObject


class NotificationMessage(BaseModel):
    """Ordered sequence of blocks, optionally with a plain-text fallback."""

    blocks: List[NotificationBlock] = Field(default_factory=list)
    text: Optional[str] = Field(None, description="Fallback text shown in notification previews")


class ArrivalQuery(BaseModel):
    """Parsed slash command asking for arrivals at a station."""

    text: str = Field(..., description="Station name as typed by the user")
    response_url: Optional[str] = Field(None, description="Slack reply target (form mode only)")
