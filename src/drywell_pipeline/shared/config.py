"""
Drywell Pipeline - Configuration Loader

Pydantic-based configuration management with:
- Environment-based configuration (dev/prod)
- YAML file loading with inheritance
- Environment variable overrides
- Type validation via Pydantic

Usage:
    from drywell_pipeline.shared.config import get_config

    config = get_config()  # Uses DW_ENVIRONMENT env var
    config = get_config("dev")  # Explicit environment

    # Access config values
    target_crs = config.projection.target_crs
    start_year = config.date_window.start_year
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# Configuration Models
# =============================================================================

WORLD_MERCATOR = "+proj=merc +lon_0=0 +k=1 +x_0=0 +y_0=0 +ellps=WGS84 +datum=WGS84 +units=m +no_defs"


class ProjectConfig(BaseModel):
    """Project metadata configuration."""

    name: str = "drywell-pipeline"
    version: str = "0.1.0"
    description: str = "Reported domestic well failures prepared for model calibration"


class PathsConfig(BaseModel):
    """Input and output locations."""

    points: str = "data/raw/drywells/drywells.shp"
    boundary: str = "data/raw/boundary/study_area.shp"
    reports: str = "data/raw/shortage_reports.xlsx"
    output: str = "data/processed/drywells_filtered.shp"
    summary: str | None = None


class ProjectionConfig(BaseModel):
    """Shared planar coordinate reference system."""

    target_crs: str = WORLD_MERCATOR


class DateWindowConfig(BaseModel):
    """Inclusive issue-year window."""

    start_year: int = 2012
    end_year: int = 2016

    @model_validator(mode="after")
    def validate_bounds(self) -> DateWindowConfig:
        """Ensure the window is not inverted."""
        if self.start_year > self.end_year:
            raise ValueError(
                f"start_year ({self.start_year}) must not be after end_year ({self.end_year})"
            )
        return self


class NormalizationConfig(BaseModel):
    """Shortage category normalization."""

    category_column: str = "Shortages"
    canonical_label: str = "Dry well (groundwater)"
    source_phrases: list[str] = Field(
        default_factory=lambda: [
            "Pump not working",
            "Dry Well (groundwater)",
            "Well went dry",
        ]
    )

    @field_validator("source_phrases")
    @classmethod
    def validate_phrases(cls, v: list[str]) -> list[str]:
        """Reject empty phrases, which would match everywhere."""
        if any(not phrase for phrase in v):
            raise ValueError("source_phrases must not contain empty strings")
        return v

    @property
    def substitutions(self) -> dict[str, str]:
        """Source phrase -> canonical label mapping."""
        return {phrase: self.canonical_label for phrase in self.source_phrases}


class ColumnsConfig(BaseModel):
    """Field names on the point layer and the report table."""

    point_id: str = "Drywell_ID"
    point_report_date: str = "Report_Dat"
    report_id: str = "Drywell ID"
    report_issue_date: str = "Approximate Issue Start Date"
    report_creation_date: str = "Record Creation Date"


class ExportConfig(BaseModel):
    """Export configuration."""

    driver: str | None = None
    # Applied only for drivers with a field-name length limit (shapefile)
    short_field_names: dict[str, str] = Field(
        default_factory=lambda: {"report_date": "rep_date"}
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Main configuration class for the drywell pipeline.

    Loads configuration from:
    1. YAML files in configs/environments/
    2. Environment variables

    Environment variables take precedence over YAML values.
    """

    model_config = SettingsConfigDict(
        env_prefix="DW_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment
    environment: Literal["dev", "prod"] = "dev"

    # Configuration sections
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    projection: ProjectionConfig = Field(default_factory=ProjectionConfig)
    date_window: DateWindowConfig = Field(default_factory=DateWindowConfig)
    normalization: NormalizationConfig = Field(default_factory=NormalizationConfig)
    columns: ColumnsConfig = Field(default_factory=ColumnsConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"dev", "prod"}
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _get_config_dir() -> Path:
    """Get the configuration directory path."""
    # Repository root when running from a source checkout
    config_dir = Path(__file__).resolve().parents[3] / "configs"
    if config_dir.exists():
        return config_dir

    config_dir = Path.cwd() / "configs"
    if config_dir.exists():
        return config_dir

    raise FileNotFoundError(
        "Could not find configs directory. Ensure you're running from the project root."
    )


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_config_for_environment(environment: str) -> dict[str, Any]:
    """Load and merge configuration for a specific environment."""
    env_dir = _get_config_dir() / "environments"

    base_config = _load_yaml_file(env_dir / "base.yaml")
    env_config = _load_yaml_file(env_dir / f"{environment}.yaml")

    # Remove inheritance marker if present
    env_config.pop("_inherit", None)

    merged = _deep_merge(base_config, env_config)
    merged["environment"] = environment

    return merged


@lru_cache(maxsize=4)
def get_config(environment: str | None = None) -> Settings:
    """
    Get configuration for the specified environment.

    Args:
        environment: Environment name (dev, prod).
                    If None, uses DW_ENVIRONMENT env var, defaulting to "dev".

    Returns:
        Settings: Validated configuration object.
    """
    if environment is None:
        environment = os.getenv("DW_ENVIRONMENT", "dev")

    yaml_config = _load_config_for_environment(environment)

    # Create Settings object (also loads env vars)
    return Settings(**yaml_config)


def reload_config(environment: str | None = None) -> Settings:
    """
    Reload configuration, clearing the cache.

    Useful for testing or when config files have changed.
    """
    get_config.cache_clear()
    return get_config(environment)
