"""Environment variable loading and validation."""

import ipaddress
import os
from typing import Optional

from .exceptions import ConfigurationError

DEFAULT_DATABASE_URL = "sqlite:///./data/job_feeds.db"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class EnvironmentConfig:
    """Environment variable configuration holder."""

    def __init__(
        self,
        database_url: Optional[str] = None,
        log_level: Optional[str] = None,
        environment: Optional[str] = None,
        client_ip: Optional[str] = None,
        client_user_agent: Optional[str] = None,
    ):
        self.database_url = database_url or DEFAULT_DATABASE_URL
        self.log_level = log_level.upper() if log_level else None
        self.environment = environment or "local"
        self.client_ip = client_ip
        self.client_user_agent = client_user_agent


def load_environment_config() -> EnvironmentConfig:
    """
    Load and validate environment variables.

    All variables are optional:
    - DATABASE_URL: SQLAlchemy database URL (default: sqlite:///./data/job_feeds.db)
    - LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - ENVIRONMENT: Label attached to log records (default: local)
    - CLIENT_IP: Caller IP sent to APIs that require one (default: loopback)
    - CLIENT_USER_AGENT: Caller user agent sent to APIs that require one

    Feed credentials referenced as ${VAR} in the config file are read
    separately by the loader.

    Returns:
        EnvironmentConfig object with validated values

    Raises:
        ConfigurationError: If a variable holds an invalid value
    """
    errors = []

    database_url = os.getenv("DATABASE_URL")
    log_level = os.getenv("LOG_LEVEL")
    environment = os.getenv("ENVIRONMENT")
    client_ip = os.getenv("CLIENT_IP")
    client_user_agent = os.getenv("CLIENT_USER_AGENT")

    if log_level and log_level.upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"Invalid LOG_LEVEL: '{log_level}'. Must be one of: {', '.join(VALID_LOG_LEVELS)}"
        )

    if client_ip:
        try:
            ipaddress.ip_address(client_ip.strip())
        except ValueError:
            errors.append(f"Invalid CLIENT_IP: '{client_ip}' is not an IP address")

    if database_url and "://" not in database_url:
        errors.append(
            f"Invalid DATABASE_URL: '{database_url}'. Expected a URL such as {DEFAULT_DATABASE_URL}"
        )

    if errors:
        raise ConfigurationError(
            "Environment variable validation failed",
            errors=errors,
            suggestions=[
                "Copy .env.example to .env and review the values",
                "Unset variables you do not need; all of them are optional",
            ],
        )

    return EnvironmentConfig(
        database_url=database_url,
        log_level=log_level,
        environment=environment,
        client_ip=client_ip.strip() if client_ip else None,
        client_user_agent=client_user_agent.strip() if client_user_agent else None,
    )
