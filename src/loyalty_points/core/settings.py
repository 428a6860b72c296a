from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="allow")

    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "sqlite+aiosqlite:///./loyalty.db"

    # Loyalty store
    loyalty_store_backend: Literal["memory", "sql"] = "memory"
    loyalty_store_lock_timeout_seconds: float = Field(5.0, gt=0)

    # Member directory
    member_directory_url: str | None = None
    member_directory_api_key: str | None = None
    member_directory_timeout_seconds: float = Field(5.0, gt=0)

    # Operator API security
    operator_api_key: str = ""


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[arg-type]


settings = get_settings()
