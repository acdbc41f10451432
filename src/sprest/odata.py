"""
OData helpers shared by the resource layer and the transport.

These functions are pure string and dict manipulation. They know the shapes
SharePoint uses for entity payloads (verbose ``__metadata`` and the minimal
``odata.*`` keys) and the conventions for composing REST paths.

Usage:
    from sprest.odata import combine, extract_web_url, odata_url_from

    combine("https://contoso.sharepoint.com/sites/dev/", "/_api/web")
    # "https://contoso.sharepoint.com/sites/dev/_api/web"

    extract_web_url("https://contoso.sharepoint.com/sites/dev/_api/web/lists")
    # "https://contoso.sharepoint.com/sites/dev/"
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)

# Path markers that separate the web url from the REST endpoint part.
API_MARKER = "_api/"
VTI_BIN_MARKER = "_vti_bin/"

_ABSOLUTE_URL_RE = re.compile(r"^https?://|^//", re.IGNORECASE)
_EDGE_SLASHES_RE = re.compile(r"^[\\/]+|[\\/]+$")


def is_url_absolute(url: str) -> bool:
    """Return True if ``url`` carries a scheme (or is protocol relative)."""
    return bool(_ABSOLUTE_URL_RE.match(url))


def combine(*paths: str | None) -> str:
    """
    Join url fragments with single forward slashes.

    Empty and ``None`` fragments are skipped, leading and trailing slashes on
    each fragment are trimmed and backslashes are normalised to ``/``.
    The scheme separator of an absolute first fragment is left intact.
    """
    parts = [_EDGE_SLASHES_RE.sub("", p) for p in paths if p]
    return "/".join(p for p in parts if p).replace("\\", "/")


def extract_web_url(candidate_url: str | None) -> str:
    """
    Return the part of ``candidate_url`` that precedes the REST marker.

    Looks for ``_api/`` first and ``_vti_bin/`` second. When neither is
    present the url is returned unchanged.
    """
    if candidate_url is None:
        return ""

    for marker in (API_MARKER, VTI_BIN_MARKER):
        index = candidate_url.find(marker)
        if index > -1:
            return candidate_url[:index]

    return candidate_url


def odata_url_from(candidate: Mapping[str, Any]) -> str:
    """
    Derive the absolute REST url of an entity from its JSON payload.

    Webs carry an absolute url in ``odata.editLink`` (minimal metadata) or in
    ``__metadata.uri`` (verbose), falling back to ``odata.id``. Other
    entities carry an editLink relative to the ``_api`` root, so the web url
    is recovered from ``odata.metadata`` when it is available.

    Returns:
        The entity url, or an empty string when the payload has no url
        information at all. Chaining from such a result will not work, so a
        warning is logged.
    """
    parts: list[str] = []

    if candidate.get("odata.type") == "SP.Web":
        if "odata.editLink" in candidate:
            parts.append(candidate["odata.editLink"])
        elif "uri" in candidate.get("__metadata", {}):
            parts.append(candidate["__metadata"]["uri"])
        elif "odata.id" in candidate:
            parts.append(candidate["odata.id"])
    elif "odata.metadata" in candidate and "odata.editLink" in candidate:
        parts.extend(
            [extract_web_url(candidate["odata.metadata"]), "_api", candidate["odata.editLink"]]
        )
    elif "odata.editLink" in candidate:
        parts.extend(["_api", candidate["odata.editLink"]])
    elif "__metadata" in candidate and "uri" in candidate["__metadata"]:
        parts.append(candidate["__metadata"]["uri"])
    elif "odata.id" in candidate:
        parts.append(candidate["odata.id"])

    if not parts:
        logger.warning(
            "No uri information found in OData entity payload; chaining will fail for this object."
        )
        return ""

    return combine(*parts)


def escape_query_value(value: str) -> str:
    """Double single quotes so ``value`` is safe inside an OData string literal."""
    return value.replace("'", "''")


def odata_literal(value: Any) -> str:
    """
    Render a Python value the way OData expects it inside a function call.

    Booleans become ``true``/``false``; everything else uses ``str``.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def with_metadata(type_name: str, properties: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Build a request body tagged with the ``__metadata.type`` discriminator."""
    body: dict[str, Any] = {"__metadata": {"type": type_name}}
    if properties:
        body.update(properties)
    return body
