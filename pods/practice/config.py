"""Practice pod configuration and initialization."""

import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Configuration for practice pod."""

    # Service
    SERVICE_NAME = "practice"
    SERVICE_VERSION = "0.1.0"
    SERVICE_PORT = int(os.getenv("PRACTICE_PORT", 8010))
    ENV = os.getenv("ENV", "dev")

    # Limits
    MAX_SEED = int(os.getenv("MAX_SEED", 2**31 - 1))


config = Config()

__all__ = ["Config", "config"]
