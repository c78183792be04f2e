"""
Pydantic models for the Twilio Media Streams WebSocket protocol.

Incoming messages are JSON objects discriminated by their ``event`` field. Parsing maps
each message onto exactly one case of a tagged variant: one model per recognized event,
``UnrecognizedEvent`` for any other discriminator, and ``MalformedMessage`` when the
message is not a valid event at all.
"""

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from realtime_relay.config.constants import (
    TWILIO_EVENT_MEDIA,
    TWILIO_EVENT_START,
    TWILIO_EVENT_STOP,
)
from realtime_relay.models.base import MalformedMessage, truncate


# Start
class StreamStart(BaseModel):
    """Payload of the start event."""

    streamSid: str = Field(..., min_length=1, description="Identifier of the media stream")
    callSid: Optional[str] = None
    accountSid: Optional[str] = None
    tracks: List[str] = Field(default_factory=list)
    mediaFormat: Optional[Dict[str, Any]] = None
    customParameters: Dict[str, Any] = Field(default_factory=dict)


class StartEvent(BaseModel):
    """Model for the start event, sent once when the stream begins."""

    event: Literal["start"]
    start: StreamStart
    sequenceNumber: Optional[str] = None


# Media
class MediaPayload(BaseModel):
    """Payload of an inbound media event."""

    payload: str = Field(..., description="Base64-encoded audio")
    timestamp: int = Field(0, description="Milliseconds since the stream started")
    track: Optional[str] = None
    chunk: Optional[str] = None


class MediaEvent(BaseModel):
    """Model for an inbound media event carrying caller audio."""

    event: Literal["media"]
    media: MediaPayload
    streamSid: Optional[str] = None
    sequenceNumber: Optional[str] = None


# Stop
class StopEvent(BaseModel):
    """Model for the stop event, sent when the stream ends."""

    event: Literal["stop"]
    stop: Optional[Dict[str, Any]] = None
    streamSid: Optional[str] = None


class UnrecognizedEvent(BaseModel):
    """Any event with a discriminator the relay does not act on."""

    event: str
    data: Dict[str, Any] = Field(default_factory=dict)


# Outgoing
class OutboundMedia(BaseModel):
    payload: str


class OutboundMediaEvent(BaseModel):
    """Model for a media event sent back to Twilio for playback."""

    event: Literal["media"] = "media"
    streamSid: str = Field(..., min_length=1)
    media: OutboundMedia


TwilioEvent = Union[StartEvent, MediaEvent, StopEvent, UnrecognizedEvent, MalformedMessage]

_EVENT_MODELS = {
    TWILIO_EVENT_START: StartEvent,
    TWILIO_EVENT_MEDIA: MediaEvent,
    TWILIO_EVENT_STOP: StopEvent,
}


def build_media_event(stream_sid: str, payload: str) -> OutboundMediaEvent:
    return OutboundMediaEvent(streamSid=stream_sid, media=OutboundMedia(payload=payload))


def parse_twilio_message(text: Union[str, bytes]) -> TwilioEvent:
    """
    Parse one message received from Twilio.

    Args:
        text: The raw WebSocket message

    Returns:
        The matching event model, UnrecognizedEvent, or MalformedMessage. Never raises.
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        return MalformedMessage(raw=truncate(text), error=f"Invalid JSON: {e}")

    if not isinstance(data, dict):
        return MalformedMessage(raw=truncate(text), error="Message is not a JSON object")

    event = data.get("event")
    if not isinstance(event, str):
        return MalformedMessage(raw=truncate(text), error="Missing event discriminator")

    model = _EVENT_MODELS.get(event)
    if model is None:
        return UnrecognizedEvent(event=event, data=data)

    try:
        return model.model_validate(data)
    except ValidationError as e:
        return MalformedMessage(raw=truncate(text), error=str(e))
