"""
Bot module relaying Twilio media streams to the OpenAI Realtime API.

Key components:
- InboundCallChannel: Adapter over the FastAPI WebSocket carrying one call's
  Twilio media stream.
- RealtimeChannel: One connection to OpenAI's Realtime API; sends the session
  configuration on open and reports its close so the owner can replace it.
- RelaySession: Per-call relay that translates between the two protocols, runs the
  keep-alive heartbeat and reconnects the upstream channel until the call ends.

Usage examples:
```python
from realtime_relay.bot import InboundCallChannel, RelaySession
from realtime_relay.config import load_settings

async def relay_call(websocket):
    session = RelaySession(InboundCallChannel(websocket), load_settings())
    session.start()
    try:
        while not session.closing:
            await session.handle_inbound(await websocket.receive_text())
    finally:
        await session.teardown("call finished")
```
"""

from realtime_relay.bot.inbound import InboundCallChannel
from realtime_relay.bot.realtime_api import ChannelState, RealtimeChannel
from realtime_relay.bot.relay_session import RelaySession

__all__ = ["ChannelState", "InboundCallChannel", "RealtimeChannel", "RelaySession"]
