"""Configuration management for the arXiv search MCP server."""

import json
import os
from pathlib import Path
from typing import Optional, Literal

import yaml
from pydantic import Field, field_validator, ConfigDict
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError


class LoggingConfig(BaseSettings):
    """Logging configuration settings."""

    level: str = Field(default="INFO", description="Log level")
    format: Literal["json", "text", "colored"] = Field(
        default="colored",
        description="Log format style"
    )
    file_path: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )
    max_file_size: int = Field(
        default=10_000_000,  # 10MB
        description="Maximum log file size in bytes"
    )
    backup_count: int = Field(
        default=5,
        description="Number of backup log files to keep"
    )

    @field_validator('level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    model_config = ConfigDict(env_prefix="ARXIV_SEARCH_LOG_")


class ArxivAPIConfig(BaseSettings):
    """arXiv API configuration settings."""

    base_url: str = Field(
        default="http://export.arxiv.org/api/query",
        description="arXiv search endpoint"
    )
    pdf_base_url: str = Field(
        default="http://arxiv.org/pdf",
        description="Base URL used to build PDF links missing from the feed"
    )
    abs_base_url: str = Field(
        default="http://arxiv.org/abs",
        description="Base URL used to build abstract page links missing from the feed"
    )
    user_agent: str = Field(
        default="ArxivMCPServer/1.0",
        description="User agent string for API requests"
    )
    timeout: float = Field(
        default=10.0,
        gt=0,
        le=300,
        description="Timeout for a single request attempt in seconds"
    )
    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first attempt"
    )
    retry_delay: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Fixed delay between attempts in seconds"
    )
    default_max_results: int = Field(
        default=10,
        ge=1,
        description="Results returned when the caller does not ask for a count"
    )
    max_results_limit: int = Field(
        default=50,
        ge=1,
        le=2000,
        description="Maximum results allowed per search"
    )

    @field_validator('max_results_limit')
    @classmethod
    def validate_max_results_limit(cls, v, info):
        default = info.data.get('default_max_results')
        if default is not None and v < default:
            raise ValueError("max_results_limit must be >= default_max_results")
        return v

    model_config = ConfigDict(env_prefix="ARXIV_SEARCH_API_")


class ServerConfig(BaseSettings):
    """Server configuration settings."""

    name: str = Field(
        default="arxiv-search-server",
        description="Server name"
    )
    version: str = Field(
        default="1.0.0",
        description="Server version"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    model_config = ConfigDict(env_prefix="ARXIV_SEARCH_SERVER_")


class Settings(BaseSettings):
    """Main application settings."""

    # Sub-configurations
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    arxiv_api: ArxivAPIConfig = Field(default_factory=ArxivAPIConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    environment: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Application environment"
    )
    config_file: Optional[str] = Field(
        default=None,
        description="Path to configuration file"
    )

    def __init__(self, **kwargs):
        config_file = kwargs.get('config_file') or os.getenv('ARXIV_SEARCH_CONFIG_FILE')
        if config_file:
            for key, value in load_config_file(config_file).items():
                if key not in kwargs:
                    kwargs[key] = value

        super().__init__(**kwargs)

    model_config = ConfigDict(env_prefix="ARXIV_SEARCH_", case_sensitive=False)


def load_config_file(config_file: str) -> dict:
    """
    Read a YAML or JSON settings file.

    Args:
        config_file: Path to the file

    Returns:
        Mapping of settings keys to values

    Raises:
        ConfigurationError: If the file is missing, unreadable or not a mapping
    """
    config_path = Path(config_file)
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_file}", config_key="config_file")

    suffix = config_path.suffix.lower()
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            if suffix in ['.yaml', '.yml']:
                file_config = yaml.safe_load(f)
            elif suffix == '.json':
                file_config = json.load(f)
            else:
                raise ConfigurationError(
                    f"Unsupported config file format: {config_file}",
                    config_key="config_file"
                )
    except ConfigurationError:
        raise
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error loading config file {config_file}: {e}", config_key="config_file")

    if file_config is None:
        return {}
    if not isinstance(file_config, dict):
        raise ConfigurationError(
            f"Config file {config_file} must contain a mapping",
            config_key="config_file"
        )
    return file_config


# Global settings instance
_settings: Optional[Settings] = None


def get_settings(reload: bool = False) -> Settings:
    """
    Get the global settings instance.

    Args:
        reload: Force reload of settings

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None or reload:
        try:
            _settings = Settings()
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}")
    return _settings


def update_settings(**kwargs) -> Settings:
    """
    Replace the global settings with a new instance built from kwargs.

    Args:
        **kwargs: Settings to update

    Returns:
        Updated settings instance
    """
    global _settings
    try:
        _settings = Settings(**kwargs)
        return _settings
    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(f"Failed to update configuration: {e}")


def reset_settings() -> None:
    """Drop the cached settings so the next access reloads them."""
    global _settings
    _settings = None


# Alias for simpler naming
get_config = get_settings
