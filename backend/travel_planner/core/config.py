from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Travel Plan Generator"
    environment: str = "local"
    log_level: str = "INFO"

    llm_provider: str = "mock"
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "llama3"
    llm_timeout_sec: float = Field(60.0, gt=0)
    llm_temperature: float = 0.7

    rate_limit_max_requests: int = Field(10, ge=1)
    rate_limit_window_ms: int = Field(60 * 60 * 1000, ge=1)

    max_destination_length: int = 200
    default_trip_duration: int = 7
    max_trip_duration: int = 30
    flexible_start_offset_days: int = 30

    storage_backend: str = "memory"
    storage_path: str = "data/travel_planner.json"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
