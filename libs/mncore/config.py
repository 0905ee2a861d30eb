"""Configuration loading for Minuet libraries and pods.

Reads environment variables into a typed settings object using Pydantic v2.

Env variables:
- MN_LOG_LEVEL (default: INFO)
- MN_LOG_FORMAT (default: json) - json or text
- MN_ENV (default: development)
- MN_OTEL_ENDPOINT (optional)
- MN_TEMPO_BPM (default: 120) - fixed playback tempo
- MN_SAMPLE_RATE (default: 48000) - synthesized audio sample rate
- MN_DEFAULT_MEASURES (default: 4) - measure count used when a caller omits one
"""

from __future__ import annotations

import os
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator


class Settings(BaseModel):
    MN_LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    MN_LOG_FORMAT: str = Field(default="json", description="Log output: json or text")
    MN_ENV: str = Field(default="development", description="Environment name")
    MN_OTEL_ENDPOINT: Optional[str] = Field(
        default=None, description="OTLP HTTP endpoint (e.g., http://localhost:4318)"
    )

    MN_TEMPO_BPM: int = Field(default=120, ge=20, le=300, description="Playback tempo")
    MN_SAMPLE_RATE: int = Field(default=48_000, ge=8_000, le=96_000, description="Audio sample rate")
    MN_DEFAULT_MEASURES: int = Field(default=4, description="Default measure count (2 or 4)")

    model_config = {"extra": "ignore"}

    @field_validator("MN_LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        value = value.lower()
        if value not in ("json", "text"):
            raise ValueError("MN_LOG_FORMAT must be 'json' or 'text'")
        return value

    @field_validator("MN_DEFAULT_MEASURES")
    @classmethod
    def validate_measures(cls, value: int) -> int:
        if value not in (2, 4):
            raise ValueError("MN_DEFAULT_MEASURES must be 2 or 4")
        return value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment and memoize.

    Raises:
        ValueError: if an environment variable holds an invalid value.
    """

    env = {
        "MN_LOG_LEVEL": os.getenv("MN_LOG_LEVEL", "INFO"),
        "MN_LOG_FORMAT": os.getenv("MN_LOG_FORMAT", "json"),
        "MN_ENV": os.getenv("MN_ENV", "development"),
        "MN_OTEL_ENDPOINT": os.getenv("MN_OTEL_ENDPOINT") or None,
        "MN_TEMPO_BPM": os.getenv("MN_TEMPO_BPM", "120"),
        "MN_SAMPLE_RATE": os.getenv("MN_SAMPLE_RATE", "48000"),
        "MN_DEFAULT_MEASURES": os.getenv("MN_DEFAULT_MEASURES", "4"),
    }

    try:
        return Settings.model_validate(env)
    except ValidationError as exc:
        invalid = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        raise ValueError(
            f"Invalid environment variables: {', '.join(invalid)}"
        ) from exc


__all__ = ["Settings", "get_settings"]
