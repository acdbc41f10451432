"""Folders and files."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sprest.odata import escape_query_value, odata_url_from
from sprest.sharepoint.queryable import QueryableCollection, QueryableInstance
from sprest.sharepoint.types import TemplateFileType

if TYPE_CHECKING:
    from sprest.sharepoint.lists import Item


@dataclass(slots=True)
class FolderAddResult:
    data: Any
    folder: Folder


@dataclass(slots=True)
class FileAddResult:
    data: Any
    file: File


class Folders(QueryableCollection[str]):
    """Folders of a web or of another folder."""

    default_path = "folders"

    def get_by_name(self, name: str) -> Folder:
        return Folder(self)._append(f"('{escape_query_value(name)}')")

    async def add(self, url: str) -> FolderAddResult:
        """Create a folder at ``url`` (relative to this collection or server relative)."""
        data = await self._clone(Folders, f"add('{escape_query_value(url)}')").post_core()
        return FolderAddResult(data=data, folder=self.get_by_name(url))


class Folder(QueryableInstance[str]):
    """A single folder."""

    @property
    def folders(self) -> Folders:
        return Folders(self)

    @property
    def files(self) -> Files:
        return Files(self)

    @property
    def list_item_all_fields(self) -> QueryableInstance[str]:
        return QueryableInstance(self, "listItemAllFields")

    async def delete(self, etag: str = "*") -> None:
        await self._delete_with_etag(etag)


class Files(QueryableCollection[str]):
    """Files of a folder."""

    default_path = "files"

    def get_by_name(self, name: str) -> File:
        return File(self)._append(f"('{escape_query_value(name)}')")

    async def add_template_file(
        self,
        file_url: str,
        template_file_type: TemplateFileType,
    ) -> FileAddResult:
        """
        Create a file from one of the built-in page templates.

        Args:
            file_url: Server relative url of the new file.
            template_file_type: Which template to instantiate.
        """
        data = await self._clone(
            Files,
            f"addTemplateFile(urloffile='{escape_query_value(file_url)}',"
            f"templatefiletype={int(template_file_type)})",
        ).post_core()
        return FileAddResult(data=data, file=self._rebase(File, odata_url_from(data)))


class File(QueryableInstance[str]):
    """A single file."""

    @property
    def list_item_all_fields(self) -> QueryableInstance[str]:
        return QueryableInstance(self, "listItemAllFields")

    async def get_item(self, *selects: str) -> Item:
        """Return a reference to the list item backing this file."""
        from sprest.sharepoint.lists import Item  # noqa: PLC0415

        data = await self.list_item_all_fields.select(*selects).get()
        return self._rebase(Item, odata_url_from(data))

    async def delete(self, etag: str = "*") -> None:
        await self._delete_with_etag(etag)
