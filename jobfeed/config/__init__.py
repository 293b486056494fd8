"""Configuration management for the job feed importer."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config
from .models import (
    AppConfig,
    FeedDefinition,
    HttpConfig,
    ImportSettings,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PostStatusOption,
    ScheduleConfig,
)

__all__ = [
    # Loader functions
    "load_config",
    "load_environment_config",
    # Configuration models
    "AppConfig",
    "FeedDefinition",
    "ImportSettings",
    "HttpConfig",
    "ScheduleConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    "PostStatusOption",
    # Exceptions
    "ConfigurationError",
]
