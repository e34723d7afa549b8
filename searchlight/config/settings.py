"""
Configuration management for the highlighting service.

Uses pydantic-settings to load configuration from environment variables
and YAML files with proper validation.
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationException
from ..highlighting.store import InMemorySettingsStore, RedisSettingsStore, SettingsStore


class SearchlightSettings(BaseSettings):
    """
    Service settings loaded from environment variables and configuration files.
    """

    model_config = SettingsConfigDict(
        env_prefix="SEARCHLIGHT_", env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Environment
    environment: str = Field("dev", description="Environment name (dev/staging/prod)")

    # Settings store
    settings_backend: Literal["memory", "redis"] = Field("memory", description="Where highlight options are kept")
    redis_url: Optional[str] = Field(None, description="Redis connection URL for the redis backend")
    redis_key_prefix: str = Field("searchlight:")

    # Search backend
    opensearch_endpoint: Optional[str] = None
    opensearch_index: str = Field("documents")
    opensearch_username: Optional[str] = None
    opensearch_password: Optional[str] = None
    opensearch_timeout: int = Field(30, ge=1, le=300)

    # Excerpt
    default_excerpt_length: int = Field(55, ge=0)

    # Logging
    log_level: str = Field("INFO", description="Logging level")
    json_logs: bool = Field(True, description="Whether to output JSON format logs")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        valid_envs = ["dev", "test", "staging", "prod"]
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v

    @model_validator(mode="after")
    def validate_backend(self) -> "SearchlightSettings":
        if self.settings_backend == "redis" and not self.redis_url:
            raise ValueError("redis_url is required when settings_backend is 'redis'")
        return self


_ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<default>[^}]*))?\}")


def _expand_env_variables(obj: Any) -> Any:
    """Substitute ${NAME} / ${NAME:default} in every string of a parsed YAML tree."""
    if isinstance(obj, dict):
        return {key: _expand_env_variables(value) for key, value in obj.items()}
    if isinstance(obj, list):
        return [_expand_env_variables(item) for item in obj]
    if not isinstance(obj, str):
        return obj

    def substitute(match: "re.Match[str]") -> str:
        default = match.group("default")
        # Unset variables without a default are left as written
        return os.getenv(match.group("name"), match.group(0) if default is None else default)

    return _ENV_REFERENCE.sub(substitute, obj)


def load_config_from_yaml(file_path: Path) -> Dict[str, Any]:
    """
    Read a YAML settings file and expand environment references in it.

    Raises:
        FileNotFoundError: If the file is missing
        yaml.YAMLError: If the YAML is malformed
    """
    if not file_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {file_path}")
    data = yaml.safe_load(file_path.read_text(encoding="utf-8")) or {}
    return _expand_env_variables(data)


def load_settings(
    environment: Optional[str] = None, config_file: Optional[Path] = None, **overrides: Any
) -> SearchlightSettings:
    """
    Build settings from an optional YAML file, environment variables and overrides.

    Args:
        environment: Environment name; SEARCHLIGHT_ENVIRONMENT or "dev" when None
        config_file: YAML file to read; defaults to config/<environment>.yaml when it exists
        **overrides: Values that win over the file

    Returns:
        Validated SearchlightSettings
    """
    environment = environment or os.getenv("SEARCHLIGHT_ENVIRONMENT", "dev")
    default_file = Path(__file__).parent / f"{environment}.yaml"

    config_data: Dict[str, Any] = {}
    if config_file is not None:
        config_data = load_config_from_yaml(config_file)
    elif default_file.exists():
        config_data = load_config_from_yaml(default_file)
    config_data.update(overrides, environment=environment)
    return SearchlightSettings(**config_data)


def build_settings_store(settings: SearchlightSettings) -> SettingsStore:
    """Create the settings store selected by settings_backend."""
    if settings.settings_backend == "redis":
        if not settings.redis_url:
            raise ConfigurationException("redis_url is required for the redis settings backend")
        return RedisSettingsStore.from_url(settings.redis_url, key_prefix=settings.redis_key_prefix)
    return InMemorySettingsStore()
