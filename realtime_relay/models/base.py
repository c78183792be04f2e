"""Shared parse outcome for both wire protocols."""

from pydantic import BaseModel, Field


class MalformedMessage(BaseModel):
    """A message that could not be parsed into any known structure."""

    raw: str = Field(..., description="The raw message text, possibly truncated")
    error: str = Field(..., description="Why parsing failed")


def truncate(raw, limit: int = 200) -> str:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8", errors="replace")
    return raw if len(raw) <= limit else f"{raw[:limit]}..."
