"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    layerforge_env: str = "development"
    layerforge_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Storage
    data_dir: str = "./data"
    upload_dir: str = "./uploads"

    # Export
    render_workers: int = 0  # 0 = one worker per CPU core
    export_timeout_seconds: float = 60.0
    resample_filter: str = "bilinear"

    # Asset fetching (remote locators only)
    asset_fetch_retries: int = 2
    asset_fetch_timeout_seconds: float = 10.0

    # Interactive placement
    snap_tolerance: float = 6.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
