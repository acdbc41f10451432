"""
Async HTTP transport for the SharePoint REST API.

This module owns the only network-facing object in the package. Resource
references build urls and bodies; SPHttpClient sends them and turns the
response into parsed OData data or an SPHttpError.

The client must be used as an async context manager so the underlying
connection pool is always closed:

    async with SPHttpClient(settings) as http:
        data = await http.request("GET", "https://contoso.sharepoint.com/_api/web")
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx

from sprest import __version__
from sprest.config import ConnectionSettings
from sprest.transport.errors import SPHttpError
from sprest.transport.parsers import parse_odata_payload, raise_for_status

logger = logging.getLogger(__name__)

# Content type for every JSON request body. Bodies tagged with __metadata are
# only understood by the server in verbose mode.
JSON_VERBOSE = "application/json;odata=verbose;charset=utf-8"

# Accept minimal metadata; entity urls are then read from odata.* keys.
JSON_ACCEPT = "application/json"

CLIENT_TAG_HEADER = "X-ClientService-ClientTag"

RequestBody = Mapping[str, Any] | list[Any] | str | bytes | None


def encode_body(body: RequestBody) -> bytes | None:
    """Serialise a request body; mappings and lists are JSON encoded."""
    if body is None:
        return None
    if isinstance(body, bytes):
        return body
    if isinstance(body, str):
        return body.encode("utf-8")
    return json.dumps(body).encode("utf-8")


def merge_headers(*sources: Mapping[str, str] | None) -> dict[str, str]:
    """Merge header mappings left to right, later values winning (case-insensitive)."""
    merged = httpx.Headers()
    for source in sources:
        if source:
            for name, value in source.items():
                merged[name] = value
    return dict(merged.multi_items())


@dataclass
class SPHttpClient:
    """
    Async HTTP client for the REST API.

    Attributes:
        settings: Connection settings (site url, timeout, TLS, credentials).

    Example:
        settings = ConnectionSettings(site_url="https://contoso.sharepoint.com")

        async with SPHttpClient(settings) as http:
            web = await http.request("GET", f"{settings.site_url}/_api/web")
            print(web["Title"])
    """

    settings: ConnectionSettings

    # Private attributes for the HTTP client
    _http_client: httpx.AsyncClient | None = field(default=None, repr=False)

    # -------------------------------------------------------------------------
    # Context Manager Protocol
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> SPHttpClient:
        """
        Enter the async context manager.

        Validates the settings and creates the underlying httpx.AsyncClient.

        Raises:
            ValueError: If the connection settings are incomplete.
        """
        self.settings.validate()
        self._http_client = httpx.AsyncClient(
            timeout=self.settings.timeout_seconds,
            verify=self.settings.verify_ssl,
            headers=self.default_headers(),
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Close the underlying HTTP client connection pool."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """
        Get the HTTP client, ensuring it's been initialized.

        Raises:
            RuntimeError: If accessed outside of async context manager.
        """
        if self._http_client is None:
            raise RuntimeError(
                "SPHttpClient must be used as an async context manager. "
                "Use 'async with SPHttpClient(settings) as http:'"
            )
        return self._http_client

    def default_headers(self) -> dict[str, str]:
        """Headers sent with every request, including batch parts."""
        headers = {
            "Accept": JSON_ACCEPT,
            "User-Agent": self.settings.user_agent,
            CLIENT_TAG_HEADER: f"sprest:{__version__}",
        }
        if self.settings.access_token:
            headers["Authorization"] = f"Bearer {self.settings.access_token}"
        return headers

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    async def send(
        self,
        method: str,
        url: str,
        *,
        content: bytes | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """
        Send a raw request and return the httpx response unchecked.

        Raises:
            SPHttpError: If the server cannot be reached (status_code 0).
        """
        try:
            response = await self.http_client.request(
                method.upper(),
                url,
                content=content,
                headers=dict(headers) if headers else None,
            )
        except httpx.HTTPError as e:
            raise SPHttpError(
                message=f"{method.upper()} request failed",
                status_code=0,
                detail=f"Cannot connect to {url}: {e}",
            ) from e

        logger.debug("%s %s -> %d", method.upper(), url, response.status_code)
        return response

    async def request(
        self,
        method: str,
        url: str,
        *,
        body: RequestBody = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """
        Send a request and return its parsed OData payload.

        Args:
            method: HTTP method (GET, POST, DELETE, ...).
            url: Absolute url including the query string.
            body: Optional body; mappings and lists are sent as JSON.
            headers: Extra headers for this request only.

        Returns:
            The unwrapped payload; ``{}`` for empty responses.

        Raises:
            SPHttpError: For connection failures and non-2xx responses.
        """
        content = encode_body(body)
        request_headers = merge_headers(
            {"Content-Type": JSON_VERBOSE} if content is not None else None,
            headers,
        )

        response = await self.send(method, url, content=content, headers=request_headers)
        raise_for_status(response.status_code, response.reason_phrase, response.text)
        return parse_odata_payload(response.status_code, response.text)
