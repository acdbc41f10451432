"""
High level entry point.

SPClient owns the transport and hands out root references bound to it, so
callers never pass ``client=`` around themselves:

    async with SPClient(load_config()) as sp:
        info = await sp.web.select("Title", "Url").get()
        subwebs = await sp.web.webs.select("Title").get()
"""

from __future__ import annotations

import logging
from typing import Any

from sprest.config import ClientConfig, ConnectionSettings
from sprest.sharepoint.site import Site
from sprest.sharepoint.webs import Web
from sprest.transport.batch import SPBatch
from sprest.transport.client import SPHttpClient

logger = logging.getLogger(__name__)


class SPClient:
    """
    Async context manager bundling an SPHttpClient with the configured site.

    Args:
        config: Loaded configuration, or bare connection settings.
    """

    def __init__(self, config: ClientConfig | ConnectionSettings) -> None:
        if isinstance(config, ClientConfig):
            config = config.connection
        self.settings = config
        self.http = SPHttpClient(config)

    async def __aenter__(self) -> SPClient:
        await self.http.__aenter__()
        logger.debug("Opened client for %s", self.settings.site_url)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.http.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def web(self) -> Web:
        """The web at the configured site url."""
        return Web(self.settings.site_url, client=self.http)

    @property
    def site(self) -> Site:
        """The site collection containing the configured site url."""
        return Site(self.settings.site_url, client=self.http)

    def web_from_url(self, url: str) -> Web:
        """A web given any url inside it (see ``Web.from_url``)."""
        return Web.from_url(url, client=self.http)

    def create_batch(self) -> SPBatch:
        return self.web.create_batch()
