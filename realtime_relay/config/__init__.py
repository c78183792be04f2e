"""
Configuration module for the realtime relay.

This module provides centralized configuration management for the entire application,
including constants, logging setup, and environment-based settings.

Key components:
- constants: Application-wide constants, including the Twilio and OpenAI message
  types, audio format, keep-alive payload and policy intervals.
- logging_config: Console and rotating file logging for the application logger.
- settings: The validated, immutable process settings and the ConfigurationError
  raised when the environment is incomplete.

Usage examples:
```python
from realtime_relay.config.logging_config import configure_logging
from realtime_relay.config.settings import load_settings

logger = configure_logging()
settings = load_settings()
logger.info(f"Relaying with model {settings.realtime_model}")
```
"""

from realtime_relay.config.settings import ConfigurationError, RelaySettings, load_settings

__all__ = ["ConfigurationError", "RelaySettings", "load_settings"]
