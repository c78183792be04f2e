"""
Pydantic models for OpenAI Realtime API message structures.

This module provides type-safe models for the commands the relay sends to the Realtime
API and the server events it reacts to.
"""

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from realtime_relay.config.constants import (
    AUDIO_FORMAT_G711_ULAW,
    MODALITIES,
    OPENAI_ERROR,
    OPENAI_RESPONSE_AUDIO_DELTA,
    TURN_DETECTION_SERVER_VAD,
)
from realtime_relay.config.settings import RelaySettings
from realtime_relay.models.base import MalformedMessage, truncate


class TurnDetection(BaseModel):
    """Turn detection settings for a Realtime session."""
    type: str = TURN_DETECTION_SERVER_VAD


class SessionConfig(BaseModel):
    """Session parameters applied by a session.update command."""
    turn_detection: TurnDetection = Field(default_factory=TurnDetection)
    input_audio_format: str = AUDIO_FORMAT_G711_ULAW
    output_audio_format: str = AUDIO_FORMAT_G711_ULAW
    voice: str
    instructions: str
    modalities: List[str] = Field(default_factory=lambda: list(MODALITIES))
    temperature: float


class SessionUpdateCommand(BaseModel):
    """Command configuring the session, sent once per connection."""
    type: Literal["session.update"] = "session.update"
    session: SessionConfig


class InputAudioBufferAppendCommand(BaseModel):
    """Command appending caller audio to the input buffer."""
    type: Literal["input_audio_buffer.append"] = "input_audio_buffer.append"
    audio: str


class ResponseAudioDeltaEvent(BaseModel):
    """Incremental chunk of synthesized audio."""
    type: Literal["response.audio.delta"]
    delta: str = ""
    response_id: Optional[str] = None
    item_id: Optional[str] = None


class RealtimeErrorEvent(BaseModel):
    """Error reported by the Realtime API."""
    type: Literal["error"]
    error: Dict[str, Any] = Field(default_factory=dict)


class OtherRealtimeEvent(BaseModel):
    """Any server event the relay does not act on."""
    type: str


RealtimeEvent = Union[ResponseAudioDeltaEvent, RealtimeErrorEvent, OtherRealtimeEvent, MalformedMessage]


def build_session_update(settings: RelaySettings) -> SessionUpdateCommand:
    return SessionUpdateCommand(
        session=SessionConfig(
            voice=settings.voice,
            instructions=settings.system_message,
            temperature=settings.temperature,
        )
    )


def parse_realtime_event(text: Union[str, bytes]) -> RealtimeEvent:
    """
    Parse one server event from the Realtime API.

    Args:
        text: The raw WebSocket message

    Returns:
        The matching event model or MalformedMessage. Never raises.
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        return MalformedMessage(raw=truncate(text), error=f"Invalid JSON: {e}")

    if not isinstance(data, dict) or not isinstance(data.get("type"), str):
        return MalformedMessage(raw=truncate(text), error="Missing type discriminator")

    event_type = data["type"]
    try:
        if event_type == OPENAI_RESPONSE_AUDIO_DELTA:
            return ResponseAudioDeltaEvent.model_validate(data)
        if event_type == OPENAI_ERROR:
            return RealtimeErrorEvent.model_validate(data)
    except ValidationError as e:
        return MalformedMessage(raw=truncate(text), error=str(e))
    return OtherRealtimeEvent(type=event_type)
