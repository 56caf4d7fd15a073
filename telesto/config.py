"""Configuration management for telesto using pydantic-settings."""

import os
from typing import TYPE_CHECKING

from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from telesto.grid.config import GridParameters


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TELESTO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    database_path: str = "./data/telesto.db"

    # API Server
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # Grid generation defaults
    default_num_layers: int = 5
    samples_per_axis: int = 50
    influence_radius: float = 100.0
    vertical_separation: float = 50.0

    # Sampling positions processed between cooperative yields
    yield_interval: int = 100

    # Storage
    exports_dir: str = "./exports"
    data_dir: str = "./data"

    def default_parameters(self, seed: int | None = None) -> "GridParameters":
        """Build generation parameters from the configured defaults."""
        from telesto.grid.config import GridParameters

        return GridParameters(
            num_layers=self.default_num_layers,
            samples_per_axis=self.samples_per_axis,
            influence_radius=self.influence_radius,
            seed=seed,
        )

    def ensure_directories(self) -> None:
        """Create necessary directories if they don't exist."""
        for dir_path in [self.exports_dir, self.data_dir]:
            os.makedirs(dir_path, exist_ok=True)


# Global settings instance
settings = Settings()
