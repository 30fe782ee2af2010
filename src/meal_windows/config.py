"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from meal_windows.domain.redistribution import RedistributionConstraints

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    api_token: str
    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_reasoning_effort: str = "high"
    openai_store: bool = False
    advanced_engine: Literal["proximity", "none"] = "proximity"
    deviation_threshold: float = 0.25
    bedtime_buffer_hours: float = 3.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def build_constraints(settings: Settings) -> RedistributionConstraints:
    """Build advanced engine constraints from settings."""
    return RedistributionConstraints(
        deviation_threshold=settings.deviation_threshold,
        bedtime_buffer_hours=settings.bedtime_buffer_hours,
    )
