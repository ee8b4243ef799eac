from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Upstream catalog (override via env)
    SWAPI_BASE_URL: str = "https://swapi.py4e.com/api"
    REQUEST_TIMEOUT: Optional[float] = None  # seconds; None waits forever

    # API
    PAGE_LIMIT: int = Field(10, ge=1)
    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 3000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: Optional[str] = None  # also log to this file when set


settings = Settings()
