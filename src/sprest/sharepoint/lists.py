"""Lists, list items, fields and content types."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sprest.odata import escape_query_value, with_metadata
from sprest.sharepoint.files import File, Folder
from sprest.sharepoint.queryable import QueryableCollection, QueryableInstance

# ".../items(12)" at the end of an item url
_ITEM_SUFFIX_RE = re.compile(r"/items\(\d+\)$", re.IGNORECASE)


@dataclass(slots=True)
class ListAddResult:
    data: Any
    list: List


@dataclass(slots=True)
class ListUpdateResult:
    data: Any
    list: List


@dataclass(slots=True)
class ItemAddResult:
    data: Any
    item: Item


@dataclass(slots=True)
class ItemUpdateResult:
    data: Any
    item: Item


class Lists(QueryableCollection[str]):
    """The lists of a web."""

    default_path = "lists"

    def get_by_title(self, title: str) -> List:
        return List(self, f"getByTitle('{escape_query_value(title)}')")

    def get_by_id(self, list_id: str) -> List:
        return List(self)._append(f"('{list_id}')")

    async def add(
        self,
        title: str,
        description: str = "",
        template: int = 100,
        enable_content_types: bool = False,
        additional_settings: Mapping[str, Any] | None = None,
    ) -> ListAddResult:
        """
        Create a list.

        Args:
            title: The new list's title.
            description: The new list's description.
            template: Base template id (100 = generic list, 101 = document library).
            enable_content_types: Allow management of content types.
            additional_settings: Extra SP.List properties to set at creation.
        """
        properties: dict[str, Any] = {
            "AllowContentTypes": enable_content_types,
            "BaseTemplate": template,
            "ContentTypesEnabled": enable_content_types,
            "Description": description,
            "Title": title,
        }
        properties.update(additional_settings or {})

        data = await self.post_core(body=with_metadata("SP.List", properties))
        return ListAddResult(data=data, list=self.get_by_title(properties["Title"]))


class List(QueryableInstance[str]):
    """A single list or document library."""

    @property
    def items(self) -> Items:
        return Items(self)

    @property
    def fields(self) -> Fields:
        return Fields(self)

    @property
    def content_types(self) -> ContentTypes:
        return ContentTypes(self)

    @property
    def root_folder(self) -> Folder:
        return Folder(self, "rootFolder")

    async def get_list_item_entity_type_full_name(self) -> str:
        """Return the type name list items must be tagged with in write bodies."""
        data = await self._clone(List, None).select("ListItemEntityTypeFullName").get()
        return str(data["ListItemEntityTypeFullName"])

    async def update(self, properties: Mapping[str, Any], etag: str = "*") -> ListUpdateResult:
        """
        Update the list's properties.

        When the title changes the returned reference addresses the list by
        its new title.
        """
        data = await self._merge("SP.List", properties, etag=etag)

        updated = self
        if "Title" in properties:
            updated = self._rebase(
                List, self.parent_url, f"getByTitle('{escape_query_value(properties['Title'])}')"
            )
        return ListUpdateResult(data=data, list=updated)

    async def delete(self, etag: str = "*") -> None:
        await self._delete_with_etag(etag)


class Items(QueryableCollection[str]):
    """The items of a list."""

    default_path = "items"

    def get_by_id(self, item_id: int) -> Item:
        return Item(self)._append(f"({item_id})")

    async def add(
        self,
        properties: Mapping[str, Any],
        entity_type_name: str | None = None,
    ) -> ItemAddResult:
        """Create an item; the entity type is looked up on the list when not given."""
        if entity_type_name is None:
            with self._batch_dependency():
                entity_type_name = await self._rebase(
                    List, self.parent_url
                ).get_list_item_entity_type_full_name()

        data = await self.post_core(body=with_metadata(entity_type_name, properties))
        return ItemAddResult(data=data, item=self.get_by_id(data["Id"]))


class Item(QueryableInstance[str]):
    """A single list item."""

    @property
    def file(self) -> File:
        return File(self, "file")

    @property
    def parent_list(self) -> List:
        """The list holding this item, derived from the item's url."""
        return self._rebase(List, _ITEM_SUFFIX_RE.sub("", self.to_url()))

    async def update(
        self,
        properties: Mapping[str, Any],
        etag: str = "*",
        entity_type_name: str | None = None,
    ) -> ItemUpdateResult:
        """
        Update the item's field values.

        Args:
            properties: Field internal names mapped to their new values.
            etag: Value of the IF-Match header ("*" overwrites any version).
            entity_type_name: The list's item type name; fetched when omitted.
        """
        if entity_type_name is None:
            with self._batch_dependency():
                entity_type_name = await self.parent_list.get_list_item_entity_type_full_name()

        data = await self._merge(entity_type_name, properties, etag=etag)
        return ItemUpdateResult(data=data, item=self)

    async def delete(self, etag: str = "*") -> None:
        await self._delete_with_etag(etag)


class Fields(QueryableCollection[str]):
    """The fields (columns) of a web or list."""

    default_path = "fields"

    def get_by_id(self, field_id: str) -> Field:
        return Field(self)._append(f"('{field_id}')")

    def get_by_title(self, title: str) -> Field:
        return Field(self, f"getByTitle('{escape_query_value(title)}')")

    def get_by_internal_name_or_title(self, name: str) -> Field:
        return Field(self, f"getByInternalNameOrTitle('{escape_query_value(name)}')")


class Field(QueryableInstance[str]):
    """A single field."""

    async def delete(self) -> None:
        await self._delete_with_etag()


class ContentTypes(QueryableCollection[str]):
    """Content types of a web or list."""

    default_path = "contenttypes"

    def get_by_id(self, content_type_id: str) -> ContentType:
        return ContentType(self)._append(f"('{content_type_id}')")


class ContentType(QueryableInstance[str]):
    """A single content type."""
