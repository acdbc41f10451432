"""sprest: typed async client for the SharePoint REST API.

Resource references (webs, lists, users, ...) are immutable values that
build request urls; an ``SPHttpClient`` sends them. ``SPClient`` wires the
two together from a loaded configuration:

    from sprest import SPClient, load_config

    async with SPClient(load_config()) as sp:
        web = await sp.web.select("Title").get()

Version Management
------------------
``__version__`` is read from the installed package metadata at import time.
It must be set before the submodules are imported, since the transport
sends it in the client tag header.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__: str = version("sprest")
except PackageNotFoundError:
    __version__ = "0.3.0"

from sprest.client import SPClient  # noqa: E402
from sprest.config import ClientConfig, load_config  # noqa: E402
from sprest.sharepoint import Site, Web  # noqa: E402
from sprest.transport import SPBatch, SPHttpClient, SPHttpError  # noqa: E402

__all__ = [
    "ClientConfig",
    "SPBatch",
    "SPClient",
    "SPHttpClient",
    "SPHttpError",
    "Site",
    "Web",
    "__version__",
    "load_config",
]
