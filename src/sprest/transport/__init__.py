"""
HTTP transport for the REST API.

SPHttpClient sends single requests; SPBatch groups several into one
``$batch`` POST. Both raise SPHttpError for connection failures and error
responses.

Example:
    from sprest.transport import SPHttpClient, SPHttpError

    async with SPHttpClient(settings) as http:
        try:
            web = await http.request("GET", f"{settings.site_url}/_api/web")
        except SPHttpError as e:
            print(e.status_code, e.detail)
"""

from sprest.transport.batch import SPBatch
from sprest.transport.client import SPHttpClient
from sprest.transport.errors import SPBatchParseError, SPHttpError

__all__ = [
    "SPBatch",
    "SPBatchParseError",
    "SPHttpClient",
    "SPHttpError",
]
