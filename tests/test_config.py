"""Tests for sprest.config: defaults, INI loading and environment overrides."""

import configparser
import logging
from unittest.mock import patch

import pytest

from sprest.config import (
    LOG_FORMATS,
    ClientConfig,
    ConnectionSettings,
    LoggingSettings,
    _load_from_ini,
    configure_logging,
    load_config,
)
from tests.constants import SITE_URL


@pytest.fixture
def ini_file(tmp_path):
    path = tmp_path / "client.ini"
    path.write_text(
        "[connection]\n"
        f"site_url = {SITE_URL}/\n"
        "timeout_seconds = 12.5\n"
        "verify_ssl = no\n"
        "user_agent = nightly-sync\n"
        "\n"
        "[logging]\n"
        "level = debug\n"
        "format = simple\n"
    )
    return path


@pytest.mark.unit
def test_defaults():
    cfg = ClientConfig()

    assert cfg.site_url == ""
    assert cfg.connection.timeout_seconds == 30.0
    assert cfg.connection.verify_ssl is True
    assert cfg.connection.access_token is None
    assert cfg.logging.level == "INFO"
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
def test_access_token_hidden_from_repr():
    settings = ConnectionSettings(site_url=SITE_URL, access_token="secret")

    assert "secret" not in repr(settings)


@pytest.mark.unit
def test_validate_rejects_empty_site_url():
    with pytest.raises(ValueError, match="site_url cannot be empty"):
        ConnectionSettings().validate()


@pytest.mark.unit
def test_validate_rejects_non_positive_timeout():
    with pytest.raises(ValueError, match="timeout must be a positive number"):
        ConnectionSettings(site_url=SITE_URL, timeout_seconds=0).validate()


@pytest.mark.unit
def test_load_from_ini_sections():
    parser = configparser.ConfigParser()
    parser.read_dict(
        {
            "connection": {"site_url": f"{SITE_URL}/", "verify_ssl": "off"},
            "logging": {"level": "warning", "format": "fancy"},
        }
    )
    cfg = ClientConfig()

    _load_from_ini(parser, cfg)

    assert cfg.connection.site_url == SITE_URL
    assert cfg.connection.verify_ssl is False
    assert cfg.logging.level == "WARNING"
    # unknown formats keep the default
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
def test_load_config_from_explicit_file(ini_file):
    cfg = load_config(ini_file)

    assert cfg.site_url == SITE_URL
    assert cfg.connection.timeout_seconds == 12.5
    assert cfg.connection.verify_ssl is False
    assert cfg.connection.user_agent == "nightly-sync"
    assert cfg.logging.level == "DEBUG"
    assert cfg.logging.format == "simple"


@pytest.mark.unit
def test_load_config_missing_file_gives_defaults(tmp_path):
    cfg = load_config(tmp_path / "absent.ini")

    assert cfg.site_url == ""
    assert cfg.connection.timeout_seconds == 30.0


@pytest.mark.unit
def test_env_overrides_file(monkeypatch, ini_file):
    monkeypatch.setenv("SP_SITE_URL", "https://fabrikam.sharepoint.com/sites/hr/")
    monkeypatch.setenv("SP_TIMEOUT_SECONDS", "3")
    monkeypatch.setenv("SP_VERIFY_SSL", "true")
    monkeypatch.setenv("SP_ACCESS_TOKEN", "tok")
    monkeypatch.setenv("SP_LOG_LEVEL", "error")
    monkeypatch.setenv("SP_LOG_FORMAT", "DETAILED")

    cfg = load_config(ini_file)

    assert cfg.site_url == "https://fabrikam.sharepoint.com/sites/hr"
    assert cfg.connection.timeout_seconds == 3.0
    assert cfg.connection.verify_ssl is True
    assert cfg.connection.access_token == "tok"
    assert cfg.connection.user_agent == "nightly-sync"
    assert cfg.logging.level == "ERROR"
    assert cfg.logging.format == "detailed"


@pytest.mark.unit
def test_access_token_not_read_from_file(tmp_path):
    path = tmp_path / "client.ini"
    path.write_text(f"[connection]\nsite_url = {SITE_URL}\naccess_token = leaked\n")

    assert load_config(path).connection.access_token is None


@pytest.mark.unit
def test_configure_logging():
    with patch("sprest.config.logging.basicConfig") as basic_config:
        configure_logging(LoggingSettings(level="debug", format="simple"))

    basic_config.assert_called_once_with(
        level=logging.DEBUG, format=LOG_FORMATS["simple"], force=True
    )


@pytest.mark.unit
def test_configure_logging_unknown_level_falls_back_to_info():
    with patch("sprest.config.logging.basicConfig") as basic_config:
        configure_logging(LoggingSettings(level="chatty"))

    assert basic_config.call_args.kwargs["level"] == logging.INFO
