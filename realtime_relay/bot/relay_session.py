"""
Relay session connecting one Twilio media stream with the OpenAI Realtime API.

A session owns the inbound call channel and the current upstream channel for the
duration of a call. It translates between the two protocols, keeps the Twilio
connection alive during silence, and replaces the upstream channel whenever it closes
until the call ends.

All state is mutated from the session's own handlers, which run on a single event
loop, so no locking is needed.
"""

import asyncio
import logging
from typing import Callable, Optional, Union

from pydantic import BaseModel

from realtime_relay.bot.realtime_api import RealtimeChannel
from realtime_relay.config.constants import LOGGER_NAME, SILENCE_PAYLOAD
from realtime_relay.config.settings import RelaySettings
from realtime_relay.models.base import MalformedMessage
from realtime_relay.models.openai_schemas import (
    InputAudioBufferAppendCommand,
    RealtimeErrorEvent,
    ResponseAudioDeltaEvent,
    parse_realtime_event,
)
from realtime_relay.models.twilio_schemas import (
    MediaEvent,
    StartEvent,
    StopEvent,
    UnrecognizedEvent,
    build_media_event,
    parse_twilio_message,
)

logger = logging.getLogger(LOGGER_NAME)

ChannelFactory = Callable[..., RealtimeChannel]


class RelaySession:
    """
    Per-call relay between Twilio and the OpenAI Realtime API.

    This class handles:
    - Translating Twilio start/media/stop events into Realtime commands
    - Forwarding synthesized audio deltas back to Twilio
    - The keep-alive heartbeat on the Twilio connection
    - Replacing the upstream channel after it closes, until teardown
    """

    def __init__(self, inbound, settings: RelaySettings,
                 channel_factory: ChannelFactory = RealtimeChannel):
        self.inbound = inbound
        self.settings = settings
        self.stream_sid: Optional[str] = None
        self.latest_media_timestamp = 0
        self.upstream: Optional[RealtimeChannel] = None
        self.closing = False
        self._channel_factory = channel_factory
        self._heartbeat_task: Optional[asyncio.Task] = None
        self._reconnect_task: Optional[asyncio.Task] = None

    def start(self) -> None:
        """Open the upstream channel and start the heartbeat."""
        self._open_upstream()
        self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())
        logger.info("Relay session started")

    # Upstream lifecycle

    def _open_upstream(self) -> None:
        channel = self._channel_factory(
            self.settings,
            on_message=self.handle_upstream,
            on_closed=self._handle_upstream_closed,
        )
        self.upstream = channel
        channel.start()

    async def _handle_upstream_closed(self, channel: RealtimeChannel) -> None:
        if channel is not self.upstream:
            return
        if self.closing:
            logger.info("OpenAI WebSocket closed after session teardown; not reconnecting")
            return
        logger.warning(f"OpenAI WebSocket closed. Reconnecting in {self.settings.reconnect_delay}s...")
        self._reconnect_task = asyncio.create_task(self._reconnect_after_delay())

    async def _reconnect_after_delay(self) -> None:
        await asyncio.sleep(self.settings.reconnect_delay)
        if self.closing:
            logger.info("Session torn down before reconnect; dropping reconnect")
            return
        self._open_upstream()

    # Twilio -> OpenAI

    async def handle_inbound(self, text: Union[str, bytes]) -> None:
        """
        Handle one message from Twilio.

        Args:
            text: The raw WebSocket message
        """
        if self.closing:
            logger.debug("Ignoring Twilio message received after teardown")
            return

        event = parse_twilio_message(text)

        if isinstance(event, MediaEvent):
            self.latest_media_timestamp = event.media.timestamp
            upstream = self.upstream
            if upstream is not None and upstream.is_open:
                await upstream.send(InputAudioBufferAppendCommand(audio=event.media.payload))
        elif isinstance(event, StartEvent):
            self.stream_sid = event.start.streamSid
            logger.info(f"Stream started: {self.stream_sid}")
        elif isinstance(event, StopEvent):
            logger.info("Twilio stream ended.")
            await self.teardown("stop event")
        elif isinstance(event, UnrecognizedEvent):
            logger.info(f"Received unknown event: {event.event}")
        elif isinstance(event, MalformedMessage):
            logger.error(f"Error parsing message: {event.error} Message: {event.raw}")

    # OpenAI -> Twilio

    async def handle_upstream(self, channel: RealtimeChannel, text: Union[str, bytes]) -> None:
        """
        Handle one server event from an upstream channel.

        Args:
            channel: The channel the event arrived on
            text: The raw WebSocket message
        """
        if self.closing or channel is not self.upstream:
            return

        event = parse_realtime_event(text)

        if isinstance(event, ResponseAudioDeltaEvent):
            if not event.delta:
                return
            if not self.stream_sid:
                logger.debug("Dropping audio delta received before the stream started")
                return
            await self._send_inbound(build_media_event(self.stream_sid, event.delta))
        elif isinstance(event, RealtimeErrorEvent):
            logger.error(f"Received error from OpenAI: {event.error}")
        elif isinstance(event, MalformedMessage):
            logger.error(f"Error processing OpenAI message: {event.error} Raw message: {event.raw}")

    async def _send_inbound(self, message: BaseModel) -> bool:
        if not self.inbound.is_open:
            return False
        try:
            await self.inbound.send_text(message.model_dump_json())
            return True
        except Exception as e:
            logger.warning(f"Failed to send to Twilio: {e}")
            return False

    # Heartbeat

    async def _heartbeat_loop(self) -> None:
        while True:
            await asyncio.sleep(self.settings.heartbeat_interval)
            await self.send_keepalive()

    async def send_keepalive(self) -> None:
        """Send a silent media frame and a transport ping to Twilio."""
        if self.inbound.is_open:
            if self.stream_sid:
                await self._send_inbound(build_media_event(self.stream_sid, SILENCE_PAYLOAD))
            else:
                logger.debug("Skipping silence packet: stream not started yet")
        try:
            await self.inbound.ping()
        except Exception as e:
            logger.warning(f"Heartbeat ping failed: {e}")

    def cancel_heartbeat(self) -> bool:
        """
        Cancel the heartbeat. Safe to call any number of times.

        Returns:
            bool: True if this call cancelled a running heartbeat
        """
        task = self._heartbeat_task
        if task is None:
            return False
        self._heartbeat_task = None
        task.cancel()
        logger.debug("Heartbeat cancelled")
        return True

    # Teardown

    async def teardown(self, reason: str) -> None:
        """
        End the session: stop the heartbeat and any pending reconnect, then close both channels.

        Args:
            reason: Why the session ends, for the log
        """
        if self.closing:
            return
        self.closing = True
        logger.info(f"Tearing down relay session ({reason})")

        self.cancel_heartbeat()

        if self._reconnect_task is not None and not self._reconnect_task.done():
            self._reconnect_task.cancel()
        self._reconnect_task = None

        if self.upstream is not None:
            await self.upstream.close()

        await self.inbound.close()
