from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    storage_backend: Literal["memory", "database"] = Field(default="memory", alias="STORAGE_BACKEND")
    database_url: str = Field(default="", alias="DATABASE_URL")
    db_pool_timeout_seconds: float = Field(default=5.0, alias="DB_POOL_TIMEOUT_SECONDS")
    db_connect_timeout_seconds: int = Field(default=5, alias="DB_CONNECT_TIMEOUT_SECONDS")

    inactivity_threshold_ms: int = Field(default=2 * 60 * 1000, alias="INACTIVITY_THRESHOLD_MS", gt=0)
    visit_increment_policy: Literal["always", "on_request"] = Field(default="always", alias="VISIT_INCREMENT_POLICY")

    cors_allow_origins: str = Field(default="*", alias="CORS_ALLOW_ORIGINS")
    enable_metrics_endpoint: bool = Field(default=True, alias="ENABLE_METRICS_ENDPOINT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    host: str = Field(default="127.0.0.1", alias="HOST")
    port: int = Field(default=8000, alias="PORT")

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
