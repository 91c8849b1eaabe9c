"""Application configuration."""

import os

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    fdc_api_key: str
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    environment: str = _ENVIRONMENT
    log_level: str = "INFO"
    meal_tolerance: float = Field(default=0.05, gt=0, lt=1)
    min_plan_foods: int = Field(default=10, ge=1)
    food_cache_entries: int = Field(default=1024, ge=1)

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
