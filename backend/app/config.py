"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    stringart_env: str = "development"
    stringart_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Request limits
    max_pin_count: int = 1000
    max_line_count: int = 20000
    max_output_size: int = 2048

    # Generation
    scoring_workers: int = 1
    progress_every: int = 25

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
