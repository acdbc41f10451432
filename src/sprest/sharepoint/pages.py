"""Modern (client side) pages."""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from sprest.odata import combine
from sprest.sharepoint.files import File
from sprest.sharepoint.types import PromotedState, TemplateFileType

if TYPE_CHECKING:
    from sprest.sharepoint.lists import List

PageLayoutType = Literal["Article", "Home"]

# Values a freshly created modern page carries in its list item.
PAGE_THUMBNAIL_URL = "/_layouts/15/images/sitepagethumbnail.png"
PAGE_APPLICATION_ID = "b6917cb1-93a0-4b97-a84d-7cf49975d4ec"
PAGE_CONTENT_TYPE_ID = "0x0101009D1CB255DA76424F860D91F20E6C4118"


class ClientSidePage(File):
    """The .aspx file of a modern page."""

    @classmethod
    async def create(
        cls,
        library: List,
        page_name: str,
        title: str,
        layout: PageLayoutType = "Article",
    ) -> ClientSidePage:
        """
        Create an empty page in ``library`` and initialise its list item.

        Every request runs outside any batch ``library`` belongs to; the
        steps depend on each other's results.

        Args:
            library: The pages library (usually "Site Pages").
            page_name: File name of the page, e.g. "news.aspx".
            title: Page title.
            layout: Page layout type.
        """
        library = library._clone(type(library), None, include_batch=False)
        folder = await library.root_folder.select("ServerRelativeUrl").get()
        page_path = "/" + combine(folder["ServerRelativeUrl"], page_name)

        added = await library.root_folder.files.add_template_file(
            page_path, TemplateFileType.CLIENT_SIDE_PAGE
        )
        item = await added.file.get_item()

        result = await item.update(
            {
                "BannerImageUrl": {"Url": PAGE_THUMBNAIL_URL},
                "CanvasContent1": "",
                "ClientSideApplicationId": PAGE_APPLICATION_ID,
                "ContentTypeId": PAGE_CONTENT_TYPE_ID,
                "PageLayoutType": layout,
                "PromotedState": int(PromotedState.NOT_PROMOTED),
                "Title": title,
            }
        )
        return result.item._clone(cls, "file")

    async def set_comments_on(self, on: bool = True) -> None:
        """Enable or disable page comments."""
        item = await self.get_item()
        await item._append(f"/SetCommentsDisabled({'false' if on else 'true'})").post_core()
