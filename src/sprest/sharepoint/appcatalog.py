"""Tenant and site collection app catalogs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sprest.odata import escape_query_value, extract_web_url, odata_literal, odata_url_from
from sprest.sharepoint.files import File
from sprest.sharepoint.queryable import Queryable, QueryableCollection, QueryableInstance

if TYPE_CHECKING:
    from sprest.transport.client import SPHttpClient

TENANT_CATALOG_PATH = "_api/web/tenantappcatalog/AvailableApps"
SITE_COLLECTION_CATALOG_PATH = "_api/web/sitecollectionappcatalog/AvailableApps"


@dataclass(slots=True)
class AppAddResult:
    data: Any
    file: File


class AppCatalog(QueryableCollection[str]):
    """
    The apps available in an app catalog.

    The catalog always hangs off a web root, so whatever url or reference is
    passed in is cut back to its web url first.
    """

    default_path = TENANT_CATALOG_PATH

    def __init__(
        self,
        base: str | Queryable[Any],
        path: str | None = None,
        *,
        client: SPHttpClient | None = None,
    ) -> None:
        headers: dict[str, str] = {}
        if isinstance(base, Queryable):
            client = client or base._client
            headers = dict(base._headers)
            base = base.to_url()

        super().__init__(extract_web_url(base), path, client=client)
        self._headers = headers

    def get_app_by_id(self, app_id: str) -> App:
        return App(self, f"getById('{app_id}')")

    async def add(self, filename: str, content: bytes, overwrite: bool = True) -> AppAddResult:
        """
        Upload an app package (.sppkg or .app) to the catalog.

        Args:
            filename: File name of the package inside the catalog.
            content: Raw package bytes.
            overwrite: Replace an existing package of the same name.
        """
        catalog = "sitecollectionappcatalog"
        if "tenantappcatalog" in self.to_url():
            catalog = "tenantappcatalog"

        adder = self._rebase(
            AppCatalog,
            self.parent_url,
            f"_api/web/{catalog}/add(overwrite={odata_literal(overwrite)},"
            f"url='{escape_query_value(filename)}')",
        )
        data = await adder.post_core(body=content, headers={"binaryStringRequestBody": "true"})
        return AppAddResult(data=data, file=self._rebase(File, odata_url_from(data)))


class App(QueryableInstance[str]):
    """A single app package in a catalog."""

    async def deploy(self, skip_feature_deployment: bool = False) -> None:
        """Make the app available; optionally to every site at once."""
        await self._action(f"Deploy({odata_literal(skip_feature_deployment)})")

    async def retract(self) -> None:
        await self._action("Retract")

    async def install(self) -> None:
        """Install the app in the web the catalog was opened from."""
        await self._action("Install")

    async def uninstall(self) -> None:
        await self._action("Uninstall")

    async def upgrade(self) -> None:
        await self._action("Upgrade")

    async def remove(self) -> None:
        """Delete the package from the catalog."""
        await self._action("Remove")

    async def _action(self, segment: str) -> None:
        await self._clone(App, segment).post_core()
