"""
Realtime Relay - Twilio Media Streams to OpenAI Realtime API Bridge

This application connects phone calls arriving through Twilio to a speech-to-speech
session on OpenAI's Realtime API, relaying audio in both directions while the call
lasts.

Architecture Overview:
- FastAPI server exposing the Twilio voice webhook and the media stream WebSocket
- One relay session per call, owning the Twilio connection and the upstream
  Realtime connection
- Protocol translation between Twilio media events and Realtime commands/events
- Keep-alive heartbeat on the Twilio side, automatic reconnection on the OpenAI side

Key Components:
- bot: Inbound and upstream channels and the per-call relay session
- config: Constants, environment settings and logging setup
- models: Pydantic schemas for both wire protocols
- websocket_manager: Accepts media stream connections and drives their sessions

Getting Started:
1. Set up environment variables (or a .env file):
   - OPENAI_API_KEY: Your OpenAI API key (required)
   - PORT: Port to run the server on (default 5050)
   - HOST: Host to bind the server to (default 0.0.0.0)
   - OPENAI_REALTIME_MODEL: Realtime model to use
   - LOG_LEVEL: Logging level (default INFO)

2. Start the server:
   ```bash
   python -m realtime_relay.main
   ```

   main() passes the heartbeat interval to uvicorn as its WebSocket ping interval.
   When serving the module-level app with the uvicorn CLI instead, pass it yourself:
   ```bash
   uvicorn realtime_relay.main:app --port 5050 --ws-ping-interval 5
   ```
   Without the flag uvicorn pings the Twilio connection every 20 seconds only.

3. Point the voice webhook of your Twilio number at https://your-host/incoming-call
"""
