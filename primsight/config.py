"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    primsight_env: str = "development"
    primsight_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Defaults for requests that leave a knob unset
    default_shape_count: int = 100
    default_max_age: int = 100
    default_candidates: int = 32
    max_workers: int = 1

    # Largest W*H the approximate endpoint accepts
    max_canvas_pixels: int = 65_536

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
