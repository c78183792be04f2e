"""
FastAPI server relaying Twilio phone calls to the OpenAI Realtime API.

This module builds the FastAPI application that Twilio talks to. The /incoming-call
webhook answers each call with TwiML that opens a bidirectional media stream back to
/media-stream, where a relay session bridges the call audio with a Realtime session.

The Twilio-side ping frames come from uvicorn, so main() sets ws_ping_interval to the
heartbeat interval. Serving ``app`` from the uvicorn CLI needs ``--ws-ping-interval``.
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Request, Response, WebSocket
from twilio.twiml.voice_response import Connect, VoiceResponse

from realtime_relay.config.constants import (
    CONNECT_NOTICE,
    CONNECT_PAUSE_SECONDS,
    LOGGER_NAME,
    MEDIA_STREAM_PATH,
    WS_MAX_SIZE,
    WS_PING_TIMEOUT,
)
from realtime_relay.config.logging_config import configure_logging
from realtime_relay.config.settings import ConfigurationError, RelaySettings, load_settings
from realtime_relay.websocket_manager import WebSocketManager

logger = logging.getLogger(LOGGER_NAME)

APP_NAME = "Realtime Relay"
APP_DESCRIPTION = "Relays Twilio Media Streams to the OpenAI Realtime API"
APP_VERSION = "1.0.0"

router = APIRouter()


def build_connect_twiml(host: str) -> str:
    """
    Build the TwiML answering an incoming call.

    Args:
        host: Public host name the media stream should connect back to

    Returns:
        str: The XML document
    """
    response = VoiceResponse()
    response.say(CONNECT_NOTICE)
    response.pause(length=CONNECT_PAUSE_SECONDS)
    connect = Connect()
    connect.stream(url=f"wss://{host}{MEDIA_STREAM_PATH}")
    response.append(connect)
    return str(response)


@router.api_route("/incoming-call", methods=["GET", "POST"])
async def incoming_call(request: Request):
    """Twilio voice webhook: speak a notice, then connect the call to the media stream."""
    host = request.headers.get("host", request.url.netloc)
    logger.info(f"Incoming call, streaming to wss://{host}{MEDIA_STREAM_PATH}")
    return Response(content=build_connect_twiml(host), media_type="text/xml")


@router.websocket(MEDIA_STREAM_PATH)
async def media_stream(websocket: WebSocket):
    """WebSocket endpoint for the Twilio media stream of one call."""
    await websocket.app.state.websocket_manager.handle_websocket(websocket)


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Status information, whether a key is configured and the number of active calls.
    """
    manager: Optional[WebSocketManager] = request.app.state.websocket_manager
    return {
        "status": "healthy",
        "openai_api_key_configured": request.app.state.settings is not None,
        "active_sessions": len(manager.active_sessions) if manager else 0,
    }


@router.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": APP_NAME,
        "description": APP_DESCRIPTION,
        "version": APP_VERSION,
        "endpoints": {
            "/incoming-call": "Twilio voice webhook returning TwiML",
            MEDIA_STREAM_PATH: "WebSocket endpoint for Twilio Media Streams",
            "/health": "Health check endpoint",
        },
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.settings is None:
        # Raises ConfigurationError, which aborts startup
        settings = load_settings()
        app.state.settings = settings
        app.state.websocket_manager = WebSocketManager(settings)
    yield


def create_app(settings: Optional[RelaySettings] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Relay settings; loaded from the environment at startup when omitted

    Returns:
        FastAPI: The configured application
    """
    app = FastAPI(
        title=APP_NAME,
        description=APP_DESCRIPTION,
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.websocket_manager = WebSocketManager(settings) if settings else None
    app.include_router(router)
    return app


app = create_app()


def main() -> None:
    """Entry point: validate configuration, then serve until interrupted."""
    configure_logging()
    try:
        settings = load_settings()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    import uvicorn

    logger.info(f"Server is listening on port {settings.port}")
    # uvicorn exits with status 1 itself when the port cannot be bound
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        ws_ping_interval=settings.heartbeat_interval,
        ws_ping_timeout=WS_PING_TIMEOUT,
        ws_max_size=WS_MAX_SIZE,
        http="h11",
    )


if __name__ == "__main__":
    main()
