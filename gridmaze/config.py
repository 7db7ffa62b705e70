"""Application configuration using Pydantic settings."""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Project root directory (one level above the gridmaze package)
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="GRIDMAZE_",
        env_file=os.path.join(BASE_DIR, ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Grid Maze"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:3000,http://localhost:8080,http://127.0.0.1:5500"

    # Rate limiting
    rate_limit_requests: int = 60  # maze creations per minute per client

    # Maze generation
    default_rows: int = 15
    default_cols: int = 20
    min_dimension: int = 5
    max_dimension: int = 200
    open_probability: float = 0.4
    carve_attempts: int = 10
    relocation_attempts: int = 20
    repair_attempts: int = 100

    # Workspaces
    max_workspaces: int = 64

    # Sample maze files
    mazes_dir: Path = BASE_DIR / "mazes"

    @field_validator("open_probability")
    @classmethod
    def validate_open_probability(cls, v: float) -> float:
        if not 0.0 < v < 1.0:
            raise ValueError("OPEN_PROBABILITY must be between 0 and 1 (exclusive)")
        return v

    @field_validator("min_dimension")
    @classmethod
    def validate_min_dimension(cls, v: int) -> int:
        if v < 5:
            raise ValueError("MIN_DIMENSION cannot be below 5")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        if self.debug:
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
