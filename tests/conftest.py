"""
Shared pytest fixtures for the sprest test suite.

This module provides fixtures that are automatically available to all test files:
- Connection settings pointing at the fake tenant
- An entered SPHttpClient (requests are mocked per test with respx)
- Root Web and Site references bound to that client
- Isolation from SP_* environment variables of the developer's shell
"""

from collections.abc import AsyncGenerator

import pytest

from sprest.config import ConnectionSettings
from sprest.sharepoint.site import Site
from sprest.sharepoint.webs import Web
from sprest.transport.client import SPHttpClient
from tests.constants import SITE_URL

ENV_VARS = (
    "SP_SITE_URL",
    "SP_TIMEOUT_SECONDS",
    "SP_VERIFY_SSL",
    "SP_USER_AGENT",
    "SP_ACCESS_TOKEN",
    "SP_LOG_LEVEL",
    "SP_LOG_FORMAT",
)

# ============================================================================
# ENVIRONMENT FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def clean_sp_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove SP_* variables so configuration tests see only what they set."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


# ============================================================================
# CLIENT FIXTURES
# ============================================================================


@pytest.fixture
def settings() -> ConnectionSettings:
    """Connection settings for the fake tenant."""
    return ConnectionSettings(site_url=SITE_URL, timeout_seconds=5.0)


@pytest.fixture
async def http(settings: ConnectionSettings) -> AsyncGenerator[SPHttpClient, None]:
    """An entered transport; tests mock its requests with respx."""
    async with SPHttpClient(settings) as client:
        yield client


@pytest.fixture
def web(http: SPHttpClient) -> Web:
    """The root web of the fake site, bound to the transport."""
    return Web(SITE_URL, client=http)


@pytest.fixture
def site(http: SPHttpClient) -> Site:
    return Site(SITE_URL, client=http)
