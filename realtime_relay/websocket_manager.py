"""
WebSocket connection manager for Twilio Media Streams.

This module implements the server-side handling of the media stream connection that
Twilio opens for each call, providing the infrastructure to:
- Accept the WebSocket connection
- Create one relay session per connection
- Feed incoming messages to the session in arrival order
- Tear the session down when the call ends or the connection drops
"""

import logging
from typing import Set

from fastapi import WebSocket, WebSocketDisconnect

from realtime_relay.bot.inbound import InboundCallChannel
from realtime_relay.bot.realtime_api import RealtimeChannel
from realtime_relay.bot.relay_session import ChannelFactory, RelaySession
from realtime_relay.config.constants import LOGGER_NAME
from realtime_relay.config.settings import RelaySettings

logger = logging.getLogger(LOGGER_NAME)


class WebSocketManager:
    """Accepts Twilio media stream connections and runs a RelaySession for each.

    Sessions are fully independent; the only thing they share is the read-only
    settings object carrying the OpenAI credential.
    """

    def __init__(self, settings: RelaySettings, channel_factory: ChannelFactory = RealtimeChannel):
        self.settings = settings
        self.channel_factory = channel_factory
        self.active_sessions: Set[RelaySession] = set()

    async def handle_websocket(self, websocket: WebSocket):
        """Handle a Twilio media stream connection throughout its lifecycle.

        Args:
            websocket (WebSocket): The FastAPI WebSocket connection object

        The connection stays open until Twilio sends a stop event or disconnects.
        Either way the session is torn down exactly once.
        """
        await websocket.accept()
        logger.info("Twilio client connected")

        session = RelaySession(
            InboundCallChannel(websocket), self.settings, channel_factory=self.channel_factory
        )
        self.active_sessions.add(session)
        session.start()

        try:
            while not session.closing:
                data = await websocket.receive_text()
                await session.handle_inbound(data)
        except WebSocketDisconnect:
            logger.warning("Twilio connection closed.")
        except Exception as e:
            logger.error(f"Error in WebSocket connection: {e}", exc_info=True)
        finally:
            await session.teardown("inbound connection closed")
            self.active_sessions.discard(session)
            logger.info("WebSocket connection closed")
