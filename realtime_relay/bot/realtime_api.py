import asyncio
import logging
import traceback
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

import websockets
from pydantic import BaseModel
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, ConnectionClosedOK

from realtime_relay.config.constants import (
    CONNECTION_TIMEOUT,
    LOGGER_NAME,
    OPENAI_BETA_HEADER,
    WS_MAX_QUEUE,
    WS_MAX_SIZE,
)
from realtime_relay.config.settings import RelaySettings
from realtime_relay.models.openai_schemas import build_session_update

logger = logging.getLogger(LOGGER_NAME)

MessageHandler = Callable[["RealtimeChannel", Union[str, bytes]], Awaitable[None]]
ClosedHandler = Callable[["RealtimeChannel"], Awaitable[None]]


class ChannelState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class RealtimeChannel:
    """
    A single connection to the OpenAI Realtime API.

    The channel moves CONNECTING -> OPEN -> CLOSED exactly once and is never reused:
    reconnecting means building a new channel. The owner is told about every received
    message through ``on_message`` and about the close transition through ``on_closed``.
    """

    def __init__(self, settings: RelaySettings, on_message: MessageHandler,
                 on_closed: ClosedHandler, connect=websockets.connect):
        self.settings = settings
        self.state = ChannelState.CONNECTING
        self.ws = None
        self._on_message = on_message
        self._on_closed = on_closed
        self._connect = connect
        self._task: Optional[asyncio.Task] = None
        self._close_requested = False

    @property
    def is_open(self) -> bool:
        return self.state is ChannelState.OPEN

    def start(self) -> asyncio.Task:
        """Schedule the connection and receive loop on the running event loop."""
        self._task = asyncio.create_task(self._run())
        return self._task

    async def _run(self) -> None:
        headers = {
            "Authorization": f"Bearer {self.settings.openai_api_key}",
            "OpenAI-Beta": OPENAI_BETA_HEADER,
        }
        try:
            logger.info(f"Connecting to OpenAI Realtime API with model: {self.settings.realtime_model}")
            self.ws = await asyncio.wait_for(
                self._connect(
                    self.settings.realtime_url,
                    additional_headers=headers,
                    max_size=WS_MAX_SIZE,
                    max_queue=WS_MAX_QUEUE,
                    compression=None,
                ),
                timeout=CONNECTION_TIMEOUT,
            )
        except asyncio.TimeoutError:
            logger.error(f"Timeout while connecting to OpenAI Realtime API (after {CONNECTION_TIMEOUT}s)")
            await self._mark_closed()
            return
        except asyncio.CancelledError:
            self.state = ChannelState.CLOSED
            raise
        except Exception as e:
            logger.error(f"OpenAI WebSocket error: {e}")
            logger.debug(f"Connection error details: {traceback.format_exc()}")
            await self._mark_closed()
            return

        if self._close_requested:
            logger.info("OpenAI connection established after close was requested; closing it")
            await self.ws.close()
            await self._mark_closed()
            return

        self.state = ChannelState.OPEN
        logger.info("Connected to OpenAI Realtime API")

        try:
            await self.send(build_session_update(self.settings))
            async for message in self.ws:
                try:
                    await self._on_message(self, message)
                except Exception as e:
                    logger.error(f"Error processing OpenAI message: {e}", exc_info=True)
        except ConnectionClosedOK:
            logger.info("OpenAI WebSocket closed normally")
        except ConnectionClosedError as e:
            logger.warning(f"OpenAI WebSocket closed unexpectedly: {e}")
        except Exception as e:
            logger.error(f"OpenAI WebSocket error: {e}")
            logger.debug(f"Receive loop error details: {traceback.format_exc()}")
        finally:
            await self._mark_closed()

    async def _mark_closed(self) -> None:
        if self.state is ChannelState.CLOSED:
            return
        self.state = ChannelState.CLOSED
        try:
            await self._on_closed(self)
        except Exception as e:
            logger.error(f"Error in OpenAI close handler: {e}", exc_info=True)

    async def send(self, command: BaseModel) -> bool:
        """
        Send a command to the Realtime API.

        Args:
            command: The pydantic command model to serialize

        Returns:
            bool: True if the command was sent, False if the channel is not open
        """
        if not self.is_open or self.ws is None:
            logger.debug(f"Dropping {getattr(command, 'type', 'command')}: OpenAI channel not open")
            return False
        try:
            await self.ws.send(command.model_dump_json())
            return True
        except ConnectionClosed as e:
            logger.warning(f"OpenAI connection closed while sending: {e}")
            return False

    async def close(self) -> None:
        """Close the connection, or arrange for it to close as soon as it opens."""
        self._close_requested = True
        if self.state is ChannelState.OPEN and self.ws is not None:
            logger.info("Closing OpenAI Realtime connection")
            await self.ws.close()
