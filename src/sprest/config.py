"""
Client configuration management.

This module handles loading client configuration from multiple sources with a
clear priority order:

    1. Environment variables (highest priority) - for CI jobs and containers
    2. Config file (config/client.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

The ClientConfig dataclass provides typed access to all settings.

Usage:
    from sprest.config import configure_logging, load_config

    cfg = load_config()
    configure_logging(cfg.logging)
    print(cfg.connection.site_url)

Environment Variable Mapping:
    SP_SITE_URL          -> connection.site_url
    SP_TIMEOUT_SECONDS   -> connection.timeout_seconds
    SP_VERIFY_SSL        -> connection.verify_ssl
    SP_USER_AGENT        -> connection.user_agent
    SP_ACCESS_TOKEN      -> connection.access_token
    SP_LOG_LEVEL         -> logging.level
    SP_LOG_FORMAT        -> logging.format
"""

from __future__ import annotations

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "client.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "client.example.ini"

# =============================================================================
# DEFAULT CONFIGURATION VALUES
# =============================================================================

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "sprest"

LOG_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
}


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class ConnectionSettings:
    """
    Where and how to reach the remote site.

    Attributes:
        site_url: Absolute url of the site or web (e.g.
                  "https://contoso.sharepoint.com/sites/dev"). Empty until
                  configured.
        timeout_seconds: HTTP timeout applied to every request.
        verify_ssl: Verify TLS certificates.
        user_agent: Value of the User-Agent header.
        access_token: Bearer token sent as the Authorization header, if any.
    """

    site_url: str = ""
    timeout_seconds: float = DEFAULT_TIMEOUT
    verify_ssl: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    access_token: str | None = field(default=None, repr=False)

    def validate(self) -> None:
        """
        Check the settings are usable for making requests.

        Raises:
            ValueError: If site_url is empty or timeout is not positive.
        """
        if not self.site_url:
            raise ValueError("site_url cannot be empty")
        if self.timeout_seconds <= 0:
            raise ValueError("timeout must be a positive number")


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class ClientConfig:
    """Complete client configuration, aggregating every settings section."""

    connection: ConnectionSettings = field(default_factory=ConnectionSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @property
    def site_url(self) -> str:
        """Convenience accessor for the configured site url."""
        return self.connection.site_url


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _load_from_ini(parser: configparser.ConfigParser, cfg: ClientConfig) -> None:
    """Load configuration from parsed INI file into ClientConfig."""
    if parser.has_section("connection"):
        if parser.has_option("connection", "site_url"):
            cfg.connection.site_url = parser.get("connection", "site_url").rstrip("/")
        if parser.has_option("connection", "timeout_seconds"):
            cfg.connection.timeout_seconds = parser.getfloat("connection", "timeout_seconds")
        if parser.has_option("connection", "verify_ssl"):
            cfg.connection.verify_ssl = _parse_bool(parser.get("connection", "verify_ssl"))
        if parser.has_option("connection", "user_agent"):
            cfg.connection.user_agent = parser.get("connection", "user_agent")

    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in LOG_FORMATS:
                cfg.logging.format = val  # type: ignore[assignment]


def _apply_env_overrides(cfg: ClientConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_site := os.getenv("SP_SITE_URL"):
        cfg.connection.site_url = env_site.rstrip("/")
    if env_timeout := os.getenv("SP_TIMEOUT_SECONDS"):
        cfg.connection.timeout_seconds = float(env_timeout)
    if env_verify := os.getenv("SP_VERIFY_SSL"):
        cfg.connection.verify_ssl = _parse_bool(env_verify)
    if env_agent := os.getenv("SP_USER_AGENT"):
        cfg.connection.user_agent = env_agent
    if env_token := os.getenv("SP_ACCESS_TOKEN"):
        cfg.connection.access_token = env_token

    if env_log := os.getenv("SP_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()
    if env_format := os.getenv("SP_LOG_FORMAT"):
        if env_format.lower() in LOG_FORMATS:
            cfg.logging.format = env_format.lower()  # type: ignore[assignment]


def load_config(config_file: Path | str | None = None) -> ClientConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. ``config_file`` if given, else config/client.ini
        3. config/client.example.ini (fallback for development)
        4. Built-in defaults

    Args:
        config_file: Explicit INI file to read instead of the project files.

    Returns:
        ClientConfig: Fully populated configuration object.
    """
    cfg = ClientConfig()

    source: Path | None = None
    if config_file is not None:
        source = Path(config_file)
    elif CONFIG_FILE.exists():
        source = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        source = CONFIG_EXAMPLE

    if source is not None and source.exists():
        parser = configparser.ConfigParser()
        parser.read(source)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def configure_logging(settings: LoggingSettings) -> None:
    """
    Configure the root logger from LoggingSettings.

    Meant for applications such as the bundled CLI. Library code only ever
    creates module loggers and leaves handler setup to the caller.
    """
    logging.basicConfig(
        level=getattr(logging, settings.level.upper(), logging.INFO),
        format=LOG_FORMATS.get(settings.format, LOG_FORMATS["detailed"]),
        force=True,
    )
