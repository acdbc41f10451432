"""Links between list items (the "Related items" field of task lists)."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sprest.odata import extract_web_url
from sprest.sharepoint.queryable import Queryable

if TYPE_CHECKING:
    from sprest.transport.client import SPHttpClient


class RelatedItemManager(Queryable[str]):
    """
    Wrapper around the ``SP.RelatedItemManager`` static methods.

    Every method is a POST to ``<web>/_api/SP.RelatedItemManager.<Method>``
    with the arguments in the JSON body. Item ids and list names identify
    the source and target; web urls are server relative.
    """

    default_path = "_api/SP.RelatedItemManager"

    @classmethod
    def from_url(cls, url: str, *, client: SPHttpClient | None = None) -> RelatedItemManager:
        """Build a manager for the web that ``url`` belongs to."""
        return cls(extract_web_url(url), client=client)

    async def get_related_items(self, source_list_name: str, source_item_id: int) -> Any:
        return await self._call(
            "GetRelatedItems",
            {"SourceItemID": source_item_id, "SourceListName": source_list_name},
        )

    async def get_page_one_related_items(
        self, source_list_name: str, source_item_id: int
    ) -> Any:
        return await self._call(
            "GetPageOneRelatedItems",
            {"SourceItemID": source_item_id, "SourceListName": source_list_name},
        )

    async def add_single_link(
        self,
        source_list_name: str,
        source_item_id: int,
        source_web_url: str,
        target_list_name: str,
        target_item_id: int,
        target_web_url: str,
        try_add_reverse_link: bool = False,
    ) -> None:
        await self._call(
            "AddSingleLink",
            {
                "SourceItemID": source_item_id,
                "SourceListName": source_list_name,
                "SourceWebUrl": source_web_url,
                "TargetItemID": target_item_id,
                "TargetListName": target_list_name,
                "TargetWebUrl": target_web_url,
                "TryAddReverseLink": try_add_reverse_link,
            },
        )

    async def add_single_link_to_url(
        self,
        source_list_name: str,
        source_item_id: int,
        target_item_url: str,
        try_add_reverse_link: bool = False,
    ) -> None:
        """Link an item to a document or item given by its server relative url."""
        await self._call(
            "AddSingleLinkToUrl",
            {
                "SourceItemID": source_item_id,
                "SourceListName": source_list_name,
                "TargetItemUrl": target_item_url,
                "TryAddReverseLink": try_add_reverse_link,
            },
        )

    async def add_single_link_from_url(
        self,
        source_item_url: str,
        target_list_name: str,
        target_item_id: int,
        try_add_reverse_link: bool = False,
    ) -> None:
        await self._call(
            "AddSingleLinkFromUrl",
            {
                "SourceItemUrl": source_item_url,
                "TargetItemID": target_item_id,
                "TargetListName": target_list_name,
                "TryAddReverseLink": try_add_reverse_link,
            },
        )

    async def delete_single_link(
        self,
        source_list_name: str,
        source_item_id: int,
        source_web_url: str,
        target_list_name: str,
        target_item_id: int,
        target_web_url: str,
        try_delete_reverse_link: bool = False,
    ) -> None:
        await self._call(
            "DeleteSingleLink",
            {
                "SourceItemID": source_item_id,
                "SourceListName": source_list_name,
                "SourceWebUrl": source_web_url,
                "TargetItemID": target_item_id,
                "TargetListName": target_list_name,
                "TargetWebUrl": target_web_url,
                "TryDeleteReverseLink": try_delete_reverse_link,
            },
        )

    async def _call(self, method: str, body: dict[str, Any]) -> Any:
        return await self._append(f".{method}").post_core(body=body)
