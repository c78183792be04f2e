import json
import sys

import pytest

from realtime_relay.config.settings import RelaySettings
from realtime_relay.models.base import MalformedMessage
from realtime_relay.models.openai_schemas import (
    InputAudioBufferAppendCommand,
    OtherRealtimeEvent,
    RealtimeErrorEvent,
    ResponseAudioDeltaEvent,
    build_session_update,
    parse_realtime_event,
)


def test_build_session_update_uses_settings():
    settings = RelaySettings(
        openai_api_key="key", voice="shimmer", system_message="Be brief.", temperature=0.6
    )

    command = json.loads(build_session_update(settings).model_dump_json())

    assert command["type"] == "session.update"
    assert command["session"]["voice"] == "shimmer"
    assert command["session"]["instructions"] == "Be brief."
    assert command["session"]["temperature"] == 0.6
    assert command["session"]["turn_detection"] == {"type": "server_vad"}
    assert command["session"]["input_audio_format"] == "g711_ulaw"
    assert command["session"]["output_audio_format"] == "g711_ulaw"
    assert command["session"]["modalities"] == ["text", "audio"]


def test_input_audio_buffer_append_shape():
    command = InputAudioBufferAppendCommand(audio="AAAA")

    assert json.loads(command.model_dump_json()) == {"type": "input_audio_buffer.append", "audio": "AAAA"}


def test_parse_audio_delta():
    event = parse_realtime_event(
        json.dumps({"type": "response.audio.delta", "response_id": "resp_1", "item_id": "item_1", "delta": "BBBB"})
    )

    assert isinstance(event, ResponseAudioDeltaEvent)
    assert event.delta == "BBBB"
    assert event.response_id == "resp_1"


def test_parse_audio_delta_accepts_bytes():
    event = parse_realtime_event(b'{"type": "response.audio.delta", "delta": "BBBB"}')

    assert isinstance(event, ResponseAudioDeltaEvent)


def test_parse_error_event():
    event = parse_realtime_event(json.dumps({"type": "error", "error": {"type": "invalid_request_error"}}))

    assert isinstance(event, RealtimeErrorEvent)
    assert event.error["type"] == "invalid_request_error"


def test_parse_other_event():
    event = parse_realtime_event(json.dumps({"type": "session.created", "session": {}}))

    assert isinstance(event, OtherRealtimeEvent)
    assert event.type == "session.created"


def test_parse_malformed_event():
    assert isinstance(parse_realtime_event("not json"), MalformedMessage)
    assert isinstance(parse_realtime_event(json.dumps({"delta": "BBBB"})), MalformedMessage)
    assert isinstance(
        parse_realtime_event(json.dumps({"type": "response.audio.delta", "delta": 5})), MalformedMessage
    )


def test_parse_deeply_nested_event():
    assert isinstance(parse_realtime_event("[" * 100000), MalformedMessage)


@pytest.mark.skipif(not hasattr(sys, "set_int_max_str_digits"), reason="no integer digit limit")
def test_parse_oversized_integer_event():
    raw = '{"type": "response.audio.delta", "delta": "BBBB", "n": ' + "1" * 5000 + "}"

    assert isinstance(parse_realtime_event(raw), MalformedMessage)
