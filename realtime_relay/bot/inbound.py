"""
Inbound call channel: the Twilio side of a relayed call.

Wraps the FastAPI WebSocket accepted for one media stream so the relay session can
check liveness, send frames, probe the transport and close it without knowing about
Starlette's connection states.
"""

import logging

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from realtime_relay.config.constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)


class InboundCallChannel:
    """Adapter over the FastAPI WebSocket carrying a Twilio media stream."""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_text(self, text: str) -> None:
        await self.websocket.send_text(text)

    async def ping(self) -> None:
        """
        Transport-level liveness probe.

        ASGI has no message for WebSocket control frames, so the ping frame itself is
        written by the server keep-alive, which main() configures with the heartbeat
        interval (uvicorn ``ws_ping_interval``). Here we only confirm the transport is
        still up.
        """
        if not self.is_open:
            logger.debug("Skipping ping: Twilio connection is not open")
            return
        logger.debug("Heartbeat ping for Twilio connection")

    async def close(self) -> None:
        """Close the connection unless either side already closed it."""
        if not self.is_open:
            return
        try:
            await self.websocket.close()
        except RuntimeError as e:
            # Raced with the client closing first
            logger.debug(f"Twilio connection already closing: {e}")
