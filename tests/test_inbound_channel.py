import pytest
from unittest.mock import AsyncMock

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from realtime_relay.bot.inbound import InboundCallChannel


@pytest.fixture
def websocket():
    websocket = AsyncMock(spec=WebSocket)
    websocket.client_state = WebSocketState.CONNECTED
    websocket.application_state = WebSocketState.CONNECTED
    return websocket


def test_is_open(websocket):
    channel = InboundCallChannel(websocket)
    assert channel.is_open

    websocket.client_state = WebSocketState.DISCONNECTED
    assert not channel.is_open


@pytest.mark.asyncio
async def test_send_text(websocket):
    await InboundCallChannel(websocket).send_text('{"event": "media"}')

    websocket.send_text.assert_called_once_with('{"event": "media"}')


@pytest.mark.asyncio
async def test_close_only_when_open(websocket):
    channel = InboundCallChannel(websocket)
    await channel.close()
    websocket.close.assert_called_once()

    websocket.application_state = WebSocketState.DISCONNECTED
    await channel.close()
    websocket.close.assert_called_once()


@pytest.mark.asyncio
async def test_close_race_with_client(websocket):
    websocket.close.side_effect = RuntimeError('Cannot call "send" once a close message has been sent.')

    # Should not raise
    await InboundCallChannel(websocket).close()


@pytest.mark.asyncio
async def test_ping_never_raises(websocket):
    channel = InboundCallChannel(websocket)
    await channel.ping()

    websocket.client_state = WebSocketState.DISCONNECTED
    await channel.ping()
