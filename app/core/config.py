from functools import lru_cache
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000

    mongo_uri: str = "mongodb://localhost:27017/taskdb"
    mongo_database: str = "taskdb"  # used when the URI names no database
    mongo_timeout_ms: int = 5000

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    metrics_interval_seconds: float = 5.0

    @field_validator("log_level", mode="before")
    def normalize_log_level(cls, v: Any):
        if isinstance(v, str):
            return v.upper()
        return v

    model_config = SettingsConfigDict(extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
