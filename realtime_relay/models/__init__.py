"""
Models module for the wire protocols spoken by the relay.

This module defines the schemas for both sides of a relayed call, and maps every
incoming message onto a tagged variant so handlers can dispatch on the model type
instead of on raw strings.

Key components:
- twilio_schemas: Pydantic models for the Twilio Media Streams events (start, media,
  stop) and the outbound media event used for playback.
- openai_schemas: Pydantic models for the OpenAI Realtime commands (session.update,
  input_audio_buffer.append) and server events (response.audio.delta, error).
- base: The MalformedMessage outcome shared by both parsers.

Usage examples:
```python
from realtime_relay.models import StartEvent, parse_twilio_message

event = parse_twilio_message('{"event": "start", "start": {"streamSid": "MZ123"}}')
if isinstance(event, StartEvent):
    print(event.start.streamSid)
```
"""

from realtime_relay.models.base import MalformedMessage
from realtime_relay.models.openai_schemas import (
    InputAudioBufferAppendCommand,
    OtherRealtimeEvent,
    RealtimeErrorEvent,
    RealtimeEvent,
    ResponseAudioDeltaEvent,
    SessionConfig,
    SessionUpdateCommand,
    build_session_update,
    parse_realtime_event,
)
from realtime_relay.models.twilio_schemas import (
    MediaEvent,
    OutboundMediaEvent,
    StartEvent,
    StopEvent,
    TwilioEvent,
    UnrecognizedEvent,
    build_media_event,
    parse_twilio_message,
)
