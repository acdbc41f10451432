"""The site collection (``_api/site``)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sprest.odata import extract_web_url
from sprest.sharepoint.features import Features, UserCustomActions
from sprest.sharepoint.queryable import QueryableInstance
from sprest.transport.batch import SPBatch

if TYPE_CHECKING:
    from sprest.sharepoint.webs import Web


@dataclass(slots=True)
class OpenWebResult:
    data: Any
    web: Web


class Site(QueryableInstance[str]):
    """
    A site collection.

    Example:
        site = Site("https://contoso.sharepoint.com/sites/dev", client=http)
        info = await site.get_context_info()
        print(info["FormDigestValue"])
    """

    default_path = "_api/site"

    @property
    def root_web(self) -> Web:
        from sprest.sharepoint.webs import Web  # noqa: PLC0415

        return Web(self, "rootweb")

    @property
    def features(self) -> Features:
        return Features(self)

    @property
    def user_custom_actions(self) -> UserCustomActions:
        return UserCustomActions(self)

    async def open_web_by_id(self, web_id: str) -> OpenWebResult:
        """Return a reference to any web of the collection by its id."""
        from sprest.sharepoint.webs import Web  # noqa: PLC0415

        data = await self._clone(Site, f"openWebById('{web_id}')").post_core()
        url = data.get("odata.id") or data["__metadata"]["uri"]
        return OpenWebResult(data=data, web=self._rebase(Web, extract_web_url(url)))

    async def get_context_info(self) -> dict[str, Any]:
        """
        POST to ``_api/contextinfo`` of the site root.

        Returns the GetContextWebInformation block (form digest, lifetimes,
        library and schema versions) flattened to a plain dict.
        """
        q = self._rebase(Site, extract_web_url(self.to_url()), "_api/contextinfo")
        data = await q.post_core()

        info = data.get("GetContextWebInformation", data)
        versions = info.get("SupportedSchemaVersions")
        if isinstance(versions, dict) and "results" in versions:
            info["SupportedSchemaVersions"] = versions["results"]
        return dict(info)

    def create_batch(self) -> SPBatch:
        return SPBatch(self.to_url(), self.client)

    async def delete(self) -> None:
        """Delete the whole site collection."""
        await self.delete_core()
