"""Configuration settings and data models."""

import json
import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("duodebate_config.json")
API_URL_ENV_VAR = "DUODEBATE_API_URL"


class ApiConfig(BaseModel):
    """Connection settings for the DuoDebate service."""

    base_url: str = Field(
        default="http://localhost:8080", description="DuoDebate API base URL"
    )
    timeout: float = Field(
        default=600.0,
        description="Read timeout in seconds; a debate stream stays open up to 10 minutes",
    )
    connect_timeout: float = Field(
        default=10.0, description="Connection timeout in seconds"
    )
    health_timeout: float = Field(
        default=2.0, description="Timeout for health and config probes"
    )

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")


class DebateDefaults(BaseModel):
    """Defaults applied to new debate submissions."""

    max_rounds: int = Field(default=10, description="Maximum debate iterations")

    @field_validator("max_rounds")
    @classmethod
    def validate_max_rounds(cls, v: int) -> int:
        if not 1 <= v <= 20:
            raise ValueError("max_rounds must be between 1 and 20")
        return v


class SystemConfig(BaseModel):
    """Client-wide settings."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AppConfig(BaseModel):
    """Complete application configuration."""

    api: ApiConfig = Field(default_factory=ApiConfig)
    debate: DebateDefaults = Field(default_factory=DebateDefaults)
    system: SystemConfig = Field(default_factory=SystemConfig)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a JSON or YAML (.yaml, .yml) file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")

        return cls(**data)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
            )


def get_default_config(config_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load configuration from duodebate_config.json, falling back to the template.

    The DUODEBATE_API_URL environment variable overrides the API base URL.
    """
    if config_path.exists():
        config = AppConfig.load_from_file(config_path)
    else:
        logger.debug(f"No config file at {config_path}, using template config")
        config = get_template_config()

    api_url = os.getenv(API_URL_ENV_VAR)
    if api_url:
        config.api = ApiConfig(**{**config.api.model_dump(), "base_url": api_url})

    return config


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        api=ApiConfig(
            base_url="http://localhost:8080",
            timeout=600.0,
            connect_timeout=10.0,
            health_timeout=2.0,
        ),
        debate=DebateDefaults(max_rounds=10),
        system=SystemConfig(log_level="INFO"),
    )
