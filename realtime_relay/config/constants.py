"""
Constants and configuration values used throughout the application.

This module defines constants that are used across different parts of the application,
providing a centralized location for protocol names, policy values and defaults so the
Twilio and OpenAI vocabularies stay consistent throughout the codebase.
"""

# Logger name used throughout the application
LOGGER_NAME = "realtime_relay"

# OpenAI Realtime API
OPENAI_REALTIME_URL = "wss://api.openai.com/v1/realtime"
OPENAI_BETA_HEADER = "realtime=v1"
DEFAULT_REALTIME_MODEL = "gpt-4o-realtime-preview-2024-10-01"

# Session configuration sent once per upstream connection
DEFAULT_VOICE = "alloy"
DEFAULT_SYSTEM_MESSAGE = "You are a helpful AI assistant."
DEFAULT_TEMPERATURE = 0.8
AUDIO_FORMAT_G711_ULAW = "g711_ulaw"
TURN_DETECTION_SERVER_VAD = "server_vad"
MODALITIES = ["text", "audio"]

# Policy values (seconds)
HEARTBEAT_INTERVAL = 5
RECONNECT_DELAY = 5
CONNECTION_TIMEOUT = 30

# Encoded silence in G.711 u-law, used for keep-alive media frames
SILENCE_PAYLOAD = "UklGRgA="

# Twilio media stream event types
TWILIO_EVENT_START = "start"
TWILIO_EVENT_MEDIA = "media"
TWILIO_EVENT_STOP = "stop"

# OpenAI Realtime message types
OPENAI_SESSION_UPDATE = "session.update"
OPENAI_INPUT_AUDIO_BUFFER_APPEND = "input_audio_buffer.append"
OPENAI_RESPONSE_AUDIO_DELTA = "response.audio.delta"
OPENAI_ERROR = "error"

# HTTP surface
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5050
MEDIA_STREAM_PATH = "/media-stream"
CONNECT_NOTICE = "Connecting you to the AI assistant."
CONNECT_PAUSE_SECONDS = 1

# WebSocket limits for both legs of the relay
WS_MAX_SIZE = 16 * 1024 * 1024  # 16MB - large enough for audio chunks
WS_MAX_QUEUE = 32
WS_PING_TIMEOUT = 20
