import json
import logging

import pytest

from realtime_relay.bot.realtime_api import ChannelState
from realtime_relay.config.settings import RelaySettings


@pytest.fixture(autouse=True)
def reset_logging():
    """Reset logging configuration before each test"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    logging.basicConfig(level=logging.NOTSET)
    yield


class FakeInboundChannel:
    """Records everything the relay sends towards Twilio."""

    def __init__(self):
        self.sent = []
        self.pings = 0
        self.close_calls = 0
        self.open = True

    @property
    def is_open(self):
        return self.open

    async def send_text(self, text):
        if not self.open:
            raise RuntimeError("Cannot send on a closed connection")
        self.sent.append(json.loads(text))

    async def ping(self):
        self.pings += 1

    async def close(self):
        self.close_calls += 1
        self.open = False


class FakeRealtimeChannel:
    """Stands in for RealtimeChannel; tests drive its state transitions."""

    def __init__(self, settings, on_message, on_closed):
        self.settings = settings
        self.state = ChannelState.CONNECTING
        self.sent = []
        self.started = False
        self.close_calls = 0
        self._on_message = on_message
        self._on_closed = on_closed

    @property
    def is_open(self):
        return self.state is ChannelState.OPEN

    def start(self):
        self.started = True

    async def send(self, command):
        if not self.is_open:
            return False
        self.sent.append(json.loads(command.model_dump_json()))
        return True

    async def close(self):
        self.close_calls += 1
        if self.is_open:
            await self.simulate_close()

    def simulate_open(self):
        self.state = ChannelState.OPEN

    async def simulate_close(self):
        if self.state is ChannelState.CLOSED:
            return
        self.state = ChannelState.CLOSED
        await self._on_closed(self)

    async def deliver(self, payload):
        text = payload if isinstance(payload, str) else json.dumps(payload)
        await self._on_message(self, text)


class FakeChannelFactory:
    """Builds FakeRealtimeChannels and remembers every one it built."""

    def __init__(self, open_immediately=True):
        self.instances = []
        self.open_immediately = open_immediately

    def __call__(self, settings, on_message, on_closed):
        channel = FakeRealtimeChannel(settings, on_message, on_closed)
        if self.open_immediately:
            channel.simulate_open()
        self.instances.append(channel)
        return channel


@pytest.fixture
def settings():
    return RelaySettings(
        openai_api_key="test-api-key",
        heartbeat_interval=60,
        reconnect_delay=0.01,
    )


@pytest.fixture
def inbound():
    return FakeInboundChannel()


@pytest.fixture
def channel_factory():
    return FakeChannelFactory()


@pytest.fixture
def connecting_channel_factory():
    return FakeChannelFactory(open_immediately=False)
