"""
MODULE OVERVIEW:
Client-wide configuration using Pydantic Settings.

WHAT IS HAPPENING HERE:
All watch timings live here instead of deep inside the polling loop.
The long-poll wait and the grace buffer on top of it are tuned together:
the client must never give up before the server's own long-poll deadline.
Every field can be overridden with a CENTRALDOGMA_* environment variable or a .env file.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    BASE_URL: str = "http://localhost:36462"
    TOKEN: str | None = None
    LOG_LEVEL: str = "INFO"

    # Plain request/response calls
    REQUEST_TIMEOUT_S: float = 10.0

    # Watch (long polling)
    WATCH_TIMEOUT_S: float = 60.0
    WATCH_TIMEOUT_BUFFER_S: float = 5.0

    model_config = SettingsConfigDict(
        env_prefix="CENTRALDOGMA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

settings = Settings()
