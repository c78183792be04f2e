"""
Process configuration for the relay.

Settings are read once at startup from the environment (optionally seeded from a
``.env`` file) and passed explicitly to every component that needs them. The OpenAI
credential is therefore never held in a module-level global.
"""

import os
from pathlib import Path
from typing import Mapping, Optional

import dotenv
from pydantic import BaseModel, ConfigDict, Field

from realtime_relay.config.constants import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    DEFAULT_REALTIME_MODEL,
    DEFAULT_SYSTEM_MESSAGE,
    DEFAULT_TEMPERATURE,
    DEFAULT_VOICE,
    HEARTBEAT_INTERVAL,
    OPENAI_REALTIME_URL,
    RECONNECT_DELAY,
)


class ConfigurationError(Exception):
    """Raised when the process configuration is missing or invalid."""


class RelaySettings(BaseModel):
    """Immutable configuration shared read-only by all relay sessions."""

    model_config = ConfigDict(frozen=True)

    openai_api_key: str = Field(..., min_length=1, repr=False)
    realtime_model: str = DEFAULT_REALTIME_MODEL
    host: str = DEFAULT_HOST
    port: int = Field(DEFAULT_PORT, ge=1, le=65535)
    voice: str = DEFAULT_VOICE
    system_message: str = DEFAULT_SYSTEM_MESSAGE
    temperature: float = DEFAULT_TEMPERATURE
    heartbeat_interval: float = Field(HEARTBEAT_INTERVAL, gt=0)
    reconnect_delay: float = Field(RECONNECT_DELAY, ge=0)

    @property
    def realtime_url(self) -> str:
        return f"{OPENAI_REALTIME_URL}?model={self.realtime_model}"


def load_settings(environ: Optional[Mapping[str, str]] = None) -> RelaySettings:
    """
    Build settings from the environment.

    Args:
        environ: Mapping to read from instead of ``os.environ`` (no ``.env`` loading then)

    Returns:
        RelaySettings: The validated settings

    Raises:
        ConfigurationError: If OPENAI_API_KEY is missing or PORT is not a valid port
    """
    if environ is None:
        # Load environment variables from .env file if it exists
        env_path = Path(".") / ".env"
        if env_path.exists():
            dotenv.load_dotenv(env_path)
        environ = os.environ

    api_key = (environ.get("OPENAI_API_KEY") or "").strip()
    if not api_key:
        raise ConfigurationError("Missing OpenAI API key. Please set OPENAI_API_KEY in the environment or .env file.")

    raw_port = environ.get("PORT") or str(DEFAULT_PORT)
    try:
        port = int(raw_port)
    except ValueError:
        raise ConfigurationError(f"Invalid PORT value: {raw_port!r}")
    if not 1 <= port <= 65535:
        raise ConfigurationError(f"PORT out of range: {port}")

    return RelaySettings(
        openai_api_key=api_key,
        realtime_model=environ.get("OPENAI_REALTIME_MODEL") or DEFAULT_REALTIME_MODEL,
        host=environ.get("HOST") or DEFAULT_HOST,
        port=port,
    )
