"""
Exceptions raised by the transport layer.

Resource classes never catch these; a failed request surfaces to the caller
exactly as the transport raised it.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SPHttpError(Exception):
    """
    Exception raised when a request to the REST API fails.

    Raised for any non-2xx response and for connection-level failures, in
    which case ``status_code`` is 0 and the original httpx exception is
    chained as ``__cause__``.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the response (0 if none).
        detail: Server-provided error text, if available.

    Example:
        try:
            await web.get()
        except SPHttpError as e:
            print(f"Request failed {e.status_code}: {e.detail}")
    """

    message: str
    status_code: int = 0
    detail: str = ""

    def __str__(self) -> str:
        """Return a formatted error message."""
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class SPBatchParseError(SPHttpError):
    """Raised when a $batch response cannot be matched to its requests."""

    pass
