import json
import pytest
from unittest.mock import AsyncMock

from fastapi import WebSocket, WebSocketDisconnect
from starlette.websockets import WebSocketState

from realtime_relay.websocket_manager import WebSocketManager

START = json.dumps({"event": "start", "start": {"streamSid": "CA123"}})
MEDIA = json.dumps({"event": "media", "media": {"payload": "AAAA", "timestamp": 100}})
STOP = json.dumps({"event": "stop"})


@pytest.fixture
def websocket():
    websocket = AsyncMock(spec=WebSocket)
    websocket.client_state = WebSocketState.CONNECTED
    websocket.application_state = WebSocketState.CONNECTED
    return websocket


@pytest.fixture
def websocket_manager(settings, channel_factory):
    return WebSocketManager(settings, channel_factory=channel_factory)


@pytest.mark.asyncio
async def test_websocket_manager_initialization(websocket_manager, settings):
    """Test that WebSocketManager initializes correctly"""
    assert websocket_manager.settings is settings
    assert websocket_manager.active_sessions == set()


@pytest.mark.asyncio
async def test_handle_websocket_flow(websocket_manager, websocket, channel_factory):
    """Test the full flow of a call: start, media, stop"""
    websocket.receive_text.side_effect = [START, MEDIA, STOP]

    await websocket_manager.handle_websocket(websocket)

    websocket.accept.assert_called_once()
    assert websocket.receive_text.call_count == 3

    assert len(channel_factory.instances) == 1
    upstream = channel_factory.instances[0]
    assert upstream.sent == [{"type": "input_audio_buffer.append", "audio": "AAAA"}]
    assert upstream.close_calls == 1

    # The session closes the Twilio side after stop
    websocket.close.assert_called_once()
    assert websocket_manager.active_sessions == set()


@pytest.mark.asyncio
async def test_handle_websocket_disconnect(websocket_manager, websocket, channel_factory):
    """Test that a client disconnect tears the session down"""
    websocket.receive_text.side_effect = [START, WebSocketDisconnect(code=1000)]

    await websocket_manager.handle_websocket(websocket)

    upstream = channel_factory.instances[0]
    assert upstream.close_calls == 1
    assert not upstream.is_open
    assert websocket_manager.active_sessions == set()


@pytest.mark.asyncio
async def test_handle_websocket_exception(websocket_manager, websocket, channel_factory):
    """Test that exceptions are handled properly"""
    websocket.receive_text.side_effect = Exception("Test exception")

    # Should not raise
    await websocket_manager.handle_websocket(websocket)

    websocket.accept.assert_called_once()
    websocket.close.assert_called_once()
    assert channel_factory.instances[0].close_calls == 1


@pytest.mark.asyncio
async def test_sessions_are_independent(websocket_manager, channel_factory):
    """Two calls get their own session and upstream channel"""
    first = AsyncMock(spec=WebSocket)
    second = AsyncMock(spec=WebSocket)
    for ws, sid in ((first, "CA1"), (second, "CA2")):
        ws.client_state = WebSocketState.CONNECTED
        ws.application_state = WebSocketState.CONNECTED
        ws.receive_text.side_effect = [
            json.dumps({"event": "start", "start": {"streamSid": sid}}),
            STOP,
        ]

    await websocket_manager.handle_websocket(first)
    await websocket_manager.handle_websocket(second)

    assert len(channel_factory.instances) == 2
    assert channel_factory.instances[0] is not channel_factory.instances[1]
