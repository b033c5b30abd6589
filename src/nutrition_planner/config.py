"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    openai_api_key: str
    openai_model: str = "gpt-4-turbo-preview"
    generation_temperature: float = 0.7
    generation_max_output_tokens: int = 4000
    diagnostic_max_output_tokens: int = 300
    generation_timeout_seconds: float = 120
    generation_max_attempts: int = 2
    input_cost_per_1k_tokens: float = 0.01
    output_cost_per_1k_tokens: float = 0.03
    app_url: str = "http://localhost:3000"
    log_level: str = "INFO"
    notification_webhook_url: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )
