import os
from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    max_days: int = Field(365, ge=1, alias="STUDY_PLANNER_MAX_DAYS")
    fill_attempts_per_slot: int = Field(3, ge=1, alias="STUDY_PLANNER_FILL_ATTEMPTS_PER_SLOT")
    cache_enabled: bool = Field(True, alias="STUDY_PLANNER_CACHE_ENABLED")
    cache_max_entries: int = Field(64, ge=1, alias="STUDY_PLANNER_CACHE_MAX_ENTRIES")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid study planner configuration: {exc}") from exc
