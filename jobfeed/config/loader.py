"""Configuration loader for the job feed importer."""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .models import AppConfig
from .validators import check_for_warnings, emit_warnings

ENV_REFERENCE_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

DEFAULT_CONFIG_LOCATIONS = (
    Path("config.yaml"),
    Path("config") / "config.yaml",
)


def load_config(config_path: Optional[Path] = None) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load and validate configuration from a YAML file and environment variables.

    Config file lookup order:
    1. The provided config_path
    2. config.yaml in the current directory
    3. config/config.yaml

    ``${VAR}`` references inside feed ``auth`` values are replaced with the
    environment variable's value, so credentials can live in ``.env``.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Tuple of (AppConfig, EnvironmentConfig) with validated configuration

    Raises:
        ConfigurationError: If configuration is invalid or file not found
    """
    config_file = _find_config_file(config_path)
    config_dict = _read_yaml(config_file)

    warnings = check_for_warnings(config_dict)
    if warnings:
        emit_warnings(warnings)

    _expand_feed_credentials(config_dict)

    try:
        app_config = AppConfig.model_validate(config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration validation failed",
            errors=_describe_validation_errors(e),
            suggestions=[
                "Review config.example.yaml for correct format",
                "Check that every feed has a name and a url or provider",
            ],
        ) from e

    env_config = load_environment_config()
    return app_config, env_config


def _read_yaml(config_file: Path) -> Dict[str, Any]:
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse YAML configuration: {e}",
            suggestions=[
                "Check YAML syntax in your config file",
                "Ensure proper indentation (use spaces, not tabs)",
            ],
        ) from e
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            suggestions=[f"Ensure {config_file} exists and is readable"],
        ) from e

    if config_dict is None:
        # An empty file means "all defaults"
        return {}
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            "Configuration file must contain a mapping at the top level",
            suggestions=["Copy config.example.yaml to config.yaml and edit it"],
        )
    return config_dict


def _expand_feed_credentials(config_dict: Dict[str, Any]) -> None:
    """Replace ${VAR} references in feed auth values, in place."""
    missing: List[str] = []
    for feed in config_dict.get("feeds") or []:
        if not isinstance(feed, dict) or not isinstance(feed.get("auth"), dict):
            continue
        for key, value in feed["auth"].items():
            if isinstance(value, str):
                feed["auth"][key] = _expand_env_references(value, missing)

    if missing:
        raise ConfigurationError(
            "Feed credentials reference unset environment variables",
            errors=[f"Environment variable not set: {name}" for name in sorted(set(missing))],
            suggestions=["Add the variables to your .env file or export them"],
        )


def _expand_env_references(value: str, missing: List[str]) -> str:
    def replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        resolved = os.getenv(name)
        if resolved is None:
            missing.append(name)
            return ""
        return resolved

    return ENV_REFERENCE_RE.sub(replace, value)


def _describe_validation_errors(error: ValidationError) -> List[str]:
    """Turn pydantic errors into one readable line each."""
    messages = []
    for item in error.errors():
        field_path = " -> ".join(str(loc) for loc in item["loc"]) or "config"
        error_type = item["type"]
        if error_type == "missing":
            messages.append(f"Missing required field: {field_path}")
        elif error_type.endswith("_type") or error_type.endswith("_parsing"):
            messages.append(
                f"Invalid type for '{field_path}': {item['msg']} (got {item.get('input')!r})"
            )
        else:
            messages.append(f"{field_path}: {item['msg']}")
    return messages


def _find_config_file(config_path: Optional[Path] = None) -> Path:
    """
    Find configuration file using fallback logic.

    Raises:
        ConfigurationError: If no config file is found
    """
    if config_path:
        if not config_path.exists():
            raise ConfigurationError(
                f"Specified configuration file not found: {config_path}",
                suggestions=[f"Ensure {config_path} exists", "Check the path and try again"],
            )
        return config_path

    for candidate in DEFAULT_CONFIG_LOCATIONS:
        if candidate.exists():
            return candidate

    raise ConfigurationError(
        "Configuration file not found",
        errors=[f"Tried: {candidate}" for candidate in DEFAULT_CONFIG_LOCATIONS],
        suggestions=[
            "Copy config.example.yaml to config.yaml",
            "Use --config flag to specify a custom location",
        ],
    )
