"""
Response parsing for OData payloads.

The REST API wraps results differently depending on the metadata level the
caller asked for: verbose responses nest the entity under ``d`` (and
collections under ``d.results``), minimal responses put collections under
``value``. These helpers hide that so resource code always sees the entity
or the list itself.
"""

from __future__ import annotations

import json
from typing import Any

from sprest.transport.errors import SPHttpError


def unwrap_odata_json(payload: Any) -> Any:
    """Strip the ``d`` / ``d.results`` / ``value`` envelope from a decoded payload."""
    if isinstance(payload, dict):
        if "d" in payload:
            inner = payload["d"]
            if isinstance(inner, dict) and "results" in inner:
                return inner["results"]
            return inner
        if "value" in payload:
            return payload["value"]
    return payload


def parse_odata_payload(status_code: int, text: str) -> Any:
    """
    Turn a successful response body into its OData result.

    Empty bodies and 204 responses parse to an empty dict.

    Raises:
        SPHttpError: If the body is not valid JSON.
    """
    if status_code == 204 or not text.strip():
        return {}

    try:
        payload = json.loads(text)
    except ValueError as e:
        raise SPHttpError(
            message="Invalid response",
            status_code=status_code,
            detail=f"Server returned a non-JSON body (status {status_code})",
        ) from e

    return unwrap_odata_json(payload)


def extract_error_detail(text: str) -> str:
    """
    Pull the human-readable message out of an OData error body.

    Handles ``{"error": {"message": {"value": ...}}}`` (verbose) and
    ``{"odata.error": {...}}`` (minimal). Falls back to the raw text.
    """
    try:
        payload = json.loads(text)
    except ValueError:
        return text.strip()

    if isinstance(payload, dict):
        error = payload.get("error") or payload.get("odata.error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, dict):
                return str(message.get("value", ""))
            if message is not None:
                return str(message)

    return text.strip()


def raise_for_status(status_code: int, reason: str, text: str) -> None:
    """
    Raise SPHttpError for a non-2xx status.

    Args:
        status_code: HTTP status code.
        reason: HTTP reason phrase.
        text: Response body text.
    """
    if 200 <= status_code < 300:
        return

    raise SPHttpError(
        message=f"Error making HTTP request [{status_code}] {reason}".rstrip(),
        status_code=status_code,
        detail=extract_error_detail(text),
    )
