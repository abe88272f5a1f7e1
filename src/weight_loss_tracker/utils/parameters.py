"""
Configuration and parameter loading using Pydantic.

This module provides centralized configuration management for the entire application.
All parameters are loaded from YAML and validated using Pydantic models.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from weight_loss_tracker.utils.exceptions import ConfigurationError


class StorageConfig(BaseModel):
    """Local key-value store configuration."""

    path: str = "data/store.json"
    goal_key: str = "weightLossGoals"
    entries_key: str = "weeklyLogs"


class IdentityConfig(BaseModel):
    """Identity service (Supabase auth) configuration."""

    url: str | None = None
    key: str | None = None
    session_path: str = "data/session.json"
    users_table: str = "users"

    def resolved_url(self) -> str | None:
        """Configured URL, falling back to the SUPABASE_URL environment variable."""
        return self.url or os.environ.get("SUPABASE_URL")

    def resolved_key(self) -> str | None:
        """Configured key, falling back to the SUPABASE_ANON_KEY environment variable."""
        return self.key or os.environ.get("SUPABASE_ANON_KEY")


class DisplayConfig(BaseModel):
    """Presentation configuration."""

    timezone: str = "America/Santiago"
    date_format: str = "%Y-%m-%d"


class OutputFilesConfig(BaseModel):
    """Output file names configuration."""

    entries_csv: str = "weekly_logs.csv"
    entries_parquet: str = "weekly_logs.parquet"
    weight_series_csv: str = "weight_series.csv"
    waist_series_csv: str = "waist_series.csv"
    progress_report: str = "progress_report.json"


class ParquetConfig(BaseModel):
    """Parquet output configuration."""

    compression: str = "snappy"
    engine: str = "pyarrow"


class OutputConfig(BaseModel):
    """Output configuration."""

    dir: str = "output"
    files: OutputFilesConfig = Field(default_factory=OutputFilesConfig)
    formats: list[str] = Field(default_factory=lambda: ["csv"])
    parquet: ParquetConfig = Field(default_factory=ParquetConfig)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str | None = None
    console: bool = True


class AppConfig(BaseSettings):
    """Main application configuration."""

    storage: StorageConfig = Field(default_factory=StorageConfig)
    identity: IdentityConfig = Field(default_factory=IdentityConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="WLT_", env_nested_delimiter="__", case_sensitive=False
    )


class ParameterLoader:
    """
    Centralized parameter loader for the application.

    Loads and validates configuration from YAML files using Pydantic models.
    Provides type-safe access to all configuration parameters.
    """

    def __init__(self, config_path: str = "config/config.yaml") -> None:
        """
        Initialize parameter loader.

        Args:
            config_path: Path to the YAML configuration file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        self.config_path = Path(config_path)
        self.config: AppConfig
        self._load_config()

    def _load_config(self) -> None:
        """
        Load configuration from YAML file.

        Raises:
            ConfigurationError: If configuration file cannot be loaded or is invalid.
        """
        if not self.config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, encoding="utf-8") as f:
                config_dict = yaml.safe_load(f) or {}

            self.config = AppConfig(**config_dict)

        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse YAML configuration: {e}") from e
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

    def get_storage_config(self) -> StorageConfig:
        """Get local store configuration."""
        return self.config.storage

    def get_identity_config(self) -> IdentityConfig:
        """Get identity service configuration."""
        return self.config.identity

    def get_display_config(self) -> DisplayConfig:
        """Get presentation configuration."""
        return self.config.display

    def get_output_config(self) -> OutputConfig:
        """Get output configuration."""
        return self.config.output

    def get_logging_config(self) -> LoggingConfig:
        """Get logging configuration."""
        return self.config.logging

    def get_raw_config(self) -> dict[str, Any]:
        """
        Get raw configuration dictionary.

        Returns:
            Dictionary representation of the configuration.
        """
        return self.config.model_dump()
