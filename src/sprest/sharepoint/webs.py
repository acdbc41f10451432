"""
Webs: the sites inside a site collection.

``Web`` is the usual entry point of the resource tree. It is built from the
url of a site and hands out references to everything that lives in it:

    web = Web("https://contoso.sharepoint.com/sites/dev", client=http)

    info = await web.select("Title", "Url").get()
    tasks = await web.lists.get_by_title("Tasks").items.top(5).get()
    added = await web.webs.add("Team", "team")
    await added.web.update({"Description": "Team site"})

Only the async methods touch the network; properties and the ``get_*``
accessors that return references are pure url building.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal
from urllib.parse import quote

from sprest.odata import (
    escape_query_value,
    extract_web_url,
    odata_literal,
    odata_url_from,
    with_metadata,
)
from sprest.sharepoint.appcatalog import AppCatalog
from sprest.sharepoint.features import Features, UserCustomActions
from sprest.sharepoint.files import File, Folder, Folders
from sprest.sharepoint.lists import ContentTypes, Fields, List, Lists
from sprest.sharepoint.navigation import Navigation
from sprest.sharepoint.pages import ClientSidePage
from sprest.sharepoint.queryable import QueryableCollection, QueryableInstance
from sprest.sharepoint.regional import RegionalSettings
from sprest.sharepoint.relateditems import RelatedItemManager
from sprest.sharepoint.site import OpenWebResult, Site
from sprest.sharepoint.types import ChangeQuery, ClientSidePageComponent, StorageEntity
from sprest.sharepoint.users import (
    CurrentUser,
    RoleDefinitions,
    SiteGroup,
    SiteGroups,
    SiteUser,
    SiteUsers,
)
from sprest.transport.batch import SPBatch

if TYPE_CHECKING:
    from sprest.transport.client import SPHttpClient

# Property paths of SP.Web accepted by select()/expand().
WebField = Literal[
    "AllowRssFeeds",
    "AlternateCssUrl",
    "AppInstanceId",
    "Configuration",
    "Created",
    "CurrentChangeToken",
    "CurrentUser",
    "CurrentUser/Email",
    "CurrentUser/Id",
    "CurrentUser/IsEmailAuthenticationGuestUser",
    "CurrentUser/IsHiddenInUI",
    "CurrentUser/IsShareByEmailGuestUser",
    "CurrentUser/IsSiteAdmin",
    "CurrentUser/LoginName",
    "CurrentUser/PrincipalType",
    "CurrentUser/Title",
    "CurrentUser/UserId",
    "CurrentUser/odata.editLink",
    "CurrentUser/odata.id",
    "CurrentUser/odata.type",
    "CustomMasterUrl",
    "Description",
    "DesignPackageId",
    "DocumentLibraryCalloutOfficeWebAppPreviewersDisabled",
    "EnableMinimalDownload",
    "FooterEnabled",
    "HeaderEmphasis",
    "HeaderLayout",
    "HorizontalQuickLaunch",
    "Id",
    "IsMultilingual",
    "Language",
    "LastItemModifiedDate",
    "LastItemUserModifiedDate",
    "MasterUrl",
    "MegaMenuEnabled",
    "NoCrawl",
    "ObjectCacheEnabled",
    "OverwriteTranslationsOnChange",
    "QuickLaunchEnabled",
    "ParentWeb",
    "ParentWeb/Configuration",
    "ParentWeb/Created",
    "ParentWeb/Description",
    "ParentWeb/Id",
    "ParentWeb/Language",
    "ParentWeb/LastItemModifiedDate",
    "ParentWeb/LastItemUserModifiedDate",
    "ParentWeb/ServerRelativeUrl",
    "ParentWeb/Title",
    "ParentWeb/WebTemplate",
    "ParentWeb/WebTemplateId",
    "ParentWeb/odata.editLink",
    "ParentWeb/odata.id",
    "ParentWeb/odata.type",
    "RecycleBinEnabled",
    "ResourcePath",
    "ServerRelativeUrl",
    "SiteLogoUrl",
    "SyndicationEnabled",
    "Title",
    "TreeViewEnabled",
    "UIVersion",
    "UIVersionConfigurationEnabled",
    "Url",
    "WebTemplate",
    "WelcomePage",
    # navigation properties (expand targets)
    "AllProperties",
    "AssociatedMemberGroup",
    "AssociatedOwnerGroup",
    "AssociatedVisitorGroup",
    "AvailableContentTypes",
    "AvailableFields",
    "ContentTypes",
    "Features",
    "Fields",
    "Folders",
    "Lists",
    "Navigation",
    "RegionalSettings",
    "RoleDefinitions",
    "RootFolder",
    "SiteGroups",
    "SiteUsers",
    "UserCustomActions",
    "WebInfos",
    "Webs",
]

# "/_api/web" (and a trailing slash) in the url of a freshly created web
_API_WEB_RE = re.compile(r"_api/web/?", re.IGNORECASE)

# extension stripped from a page name to get its default title
_EXTENSION_RE = re.compile(r"\.[^/.]+$")


@dataclass(slots=True)
class WebAddResult:
    data: Any
    web: Web


@dataclass(slots=True)
class WebUpdateResult:
    data: Any
    web: Web


@dataclass(slots=True)
class WebEnsureUserResult:
    data: Any
    user: SiteUser


@dataclass(slots=True)
class GetCatalogResult:
    data: Any
    list: List


class Webs(QueryableCollection[WebField]):
    """The direct subwebs of a web."""

    default_path = "webs"

    async def add(
        self,
        title: str,
        url: str,
        description: str = "",
        template: str = "STS",
        language: int = 1033,
        inherit_permissions: bool = True,
    ) -> WebAddResult:
        """
        Create a subweb.

        Args:
            title: The new web's title.
            url: The new web's url, relative to this web.
            description: The new web's description.
            template: Web template name (default "STS", team site).
            language: Locale id of the new web (default 1033, English US).
            inherit_permissions: Inherit permissions from the parent web.

        Returns:
            The created web's payload and a reference to the new web.
        """
        body = {
            "parameters": with_metadata(
                "SP.WebCreationInformation",
                {
                    "Description": description,
                    "Language": language,
                    "Title": title,
                    "Url": url,
                    "UseSamePermissionsAsParentSite": inherit_permissions,
                    "WebTemplate": template,
                },
            )
        }

        data = await self._clone(Webs, "add").post_core(body=body)
        web_url = _API_WEB_RE.sub("", odata_url_from(data), count=1)
        return WebAddResult(data=data, web=self._rebase(Web, web_url))


class WebInfos(QueryableCollection[str]):
    """Lightweight descriptions (title, url, template) of the subwebs."""

    default_path = "webinfos"


class Web(QueryableInstance[WebField]):
    """A single web."""

    default_path = "_api/web"

    @classmethod
    def from_url(
        cls,
        url: str,
        path: str | None = None,
        *,
        client: SPHttpClient | None = None,
    ) -> Web:
        """
        Build a web from any url inside it.

        Everything from ``_api/`` (or ``_vti_bin/``) on is cut off; a url
        without either marker is taken as the web url itself.
        """
        return cls(extract_web_url(url), path, client=client)

    # -------------------------------------------------------------------------
    # Child resources
    # -------------------------------------------------------------------------

    @property
    def webs(self) -> Webs:
        return Webs(self)

    @property
    def webinfos(self) -> WebInfos:
        return WebInfos(self)

    @property
    def all_properties(self) -> QueryableCollection[str]:
        """The web's property bag."""
        return QueryableCollection(self, "allproperties")

    @property
    def content_types(self) -> ContentTypes:
        return ContentTypes(self)

    @property
    def lists(self) -> Lists:
        return Lists(self)

    @property
    def fields(self) -> Fields:
        return Fields(self)

    @property
    def features(self) -> Features:
        return Features(self)

    @property
    def available_fields(self) -> Fields:
        """Fields of this web and of its parents."""
        return Fields(self, "availablefields")

    @property
    def navigation(self) -> Navigation:
        return Navigation(self)

    @property
    def site_users(self) -> SiteUsers:
        return SiteUsers(self)

    @property
    def site_groups(self) -> SiteGroups:
        return SiteGroups(self)

    @property
    def site_user_info_list(self) -> List:
        return List(self, "siteuserinfolist")

    @property
    def regional_settings(self) -> RegionalSettings:
        return RegionalSettings(self)

    @property
    def current_user(self) -> CurrentUser:
        return CurrentUser(self)

    @property
    def folders(self) -> Folders:
        return Folders(self)

    @property
    def user_custom_actions(self) -> UserCustomActions:
        return UserCustomActions(self)

    @property
    def role_definitions(self) -> RoleDefinitions:
        return RoleDefinitions(self)

    @property
    def related_items(self) -> RelatedItemManager:
        return self._rebase(RelatedItemManager, extract_web_url(self.to_url()))

    @property
    def root_folder(self) -> Folder:
        return Folder(self, "rootFolder")

    @property
    def associated_owner_group(self) -> SiteGroup:
        return SiteGroup(self, "associatedownergroup")

    @property
    def associated_member_group(self) -> SiteGroup:
        return SiteGroup(self, "associatedmembergroup")

    @property
    def associated_visitor_group(self) -> SiteGroup:
        return SiteGroup(self, "associatedvisitorgroup")

    @property
    def default_document_library(self) -> List:
        return List(self, "DefaultDocumentLibrary")

    @property
    def custom_list_template(self) -> QueryableCollection[str]:
        """Custom list templates available in the web."""
        return QueryableCollection(self, "getcustomlisttemplates")

    def get_subwebs_filtered_for_current_user(
        self,
        web_template_filter: int = -1,
        configuration_filter: int = -1,
    ) -> Webs:
        """Subwebs the current user is a member of (-1 means no filter)."""
        return self._clone(
            Webs,
            "getSubwebsFilteredForCurrentUser("
            f"nWebTemplateFilter={web_template_filter},"
            f"nConfigurationFilter={configuration_filter})",
        )

    def get_folder_by_server_relative_url(self, folder_url: str) -> Folder:
        return Folder(self, f"getFolderByServerRelativeUrl('{escape_query_value(folder_url)}')")

    def get_folder_by_server_relative_path(self, folder_url: str) -> Folder:
        """
        Like ``get_folder_by_server_relative_url`` for names containing
        ``#`` or ``%``; encode such names with ``urllib.parse.quote`` first.
        """
        return Folder(
            self,
            f"getFolderByServerRelativePath(decodedUrl='{escape_query_value(folder_url)}')",
        )

    def get_file_by_server_relative_url(self, file_url: str) -> File:
        return File(self, f"getFileByServerRelativeUrl('{escape_query_value(file_url)}')")

    def get_file_by_server_relative_path(self, file_url: str) -> File:
        return File(
            self,
            f"getFileByServerRelativePath(decodedUrl='{escape_query_value(file_url)}')",
        )

    def get_list(self, list_url: str) -> List:
        """A list by the server relative url of its root folder."""
        return List(self, f"getList('{escape_query_value(list_url)}')")

    def available_web_templates(
        self,
        language: int = 1033,
        include_cross_language: bool = True,
    ) -> QueryableCollection[str]:
        return QueryableCollection(
            self,
            f"getavailablewebtemplates(lcid={language}, "
            f"doincludecrosslanguage={odata_literal(include_cross_language)})",
        )

    def get_user_by_id(self, user_id: int) -> SiteUser:
        return SiteUser(self, f"getUserById({user_id})")

    def get_app_catalog(self, url: str | Web | None = None) -> AppCatalog:
        """The app catalog of ``url`` (a web url or reference), or of this web."""
        return AppCatalog(url or self, client=self._client)

    def create_batch(self) -> SPBatch:
        """Start a batch posted to this web's ``$batch`` endpoint."""
        return SPBatch(self.parent_url, self.client)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def get_parent_web(self) -> OpenWebResult:
        """Look up the parent web's id, then open it through the site."""
        data = await self.select("ParentWeb/Id").expand("ParentWeb").get()
        site = self._rebase(Site, self.to_url_and_query().split("/_api")[0])
        return await site.open_web_by_id(data["ParentWeb"]["Id"])

    async def update(self, properties: Mapping[str, Any]) -> WebUpdateResult:
        """Update the web's properties with a MERGE."""
        data = await self._merge("SP.Web", properties)
        return WebUpdateResult(data=data, web=self)

    async def delete(self) -> None:
        await self.delete_core()

    async def apply_theme(
        self,
        color_palette_url: str,
        font_scheme_url: str,
        background_image_url: str,
        share_generated: bool,
    ) -> None:
        """
        Apply a composed look to the web.

        Args:
            color_palette_url: Server relative url of the .spcolor file.
            font_scheme_url: Server relative url of the .spfont file.
            background_image_url: Server relative url of the background image.
            share_generated: Store the generated theme files in the root web
                             instead of this web.
        """
        await self._clone(Web, "applytheme").post_core(
            body={
                "backgroundImageUrl": background_image_url,
                "colorPaletteUrl": color_palette_url,
                "fontSchemeUrl": font_scheme_url,
                "shareGenerated": share_generated,
            }
        )

    async def apply_web_template(self, template: str) -> None:
        """Apply a site definition or template to a web created without one."""
        q = self._clone(Web, "applywebtemplate")._append("(@t)")
        value = quote(escape_query_value(template), safe="")
        await q._with_query("@t", f"'{value}'").post_core()

    async def ensure_user(self, login_name: str) -> WebEnsureUserResult:
        """
        Return the user with ``login_name``, adding it to the web if needed.

        Args:
            login_name: Claims login name (``i:0#.f|membership|user@contoso.com``).
        """
        data = await self._clone(Web, "ensureuser").post_core(body={"logonName": login_name})
        return WebEnsureUserResult(data=data, user=self._rebase(SiteUser, odata_url_from(data)))

    async def get_catalog(self, catalog_type: int) -> GetCatalogResult:
        """
        Return the gallery list of the given type (see ``CatalogType``).

        Only the list id is read; the returned reference points at the url
        the server reports for the list.
        """
        data = await self._clone(Web, f"getcatalog({int(catalog_type)})").select("Id").get()
        return GetCatalogResult(data=data, list=self._rebase(List, odata_url_from(data)))

    async def get_changes(self, query: ChangeQuery) -> Any:
        """Return the change log entries matching ``query``."""
        body = {"query": with_metadata("SP.ChangeQuery", query.to_payload())}
        return await self._clone(Web, "getchanges").post_core(body=body)

    async def map_to_icon(self, filename: str, size: int = 0, prog_id: str = "") -> str:
        """
        Return the icon image name for a file.

        Args:
            filename: File name; an empty name gives an empty result.
            size: 0 for 16x16, 1 for 32x32.
            prog_id: ProgID of the application that created the file.
        """
        data = await self._clone(
            Web,
            f"maptoicon(filename='{escape_query_value(filename)}', "
            f"progid='{escape_query_value(prog_id)}', size={size})",
        ).get()
        return _scalar(data, "MapToIcon")

    async def get_storage_entity(self, key: str) -> StorageEntity:
        """Read a tenant property from the app catalog."""
        return await self._clone(Web, f"getStorageEntity('{escape_query_value(key)}')").get()

    async def set_storage_entity(
        self,
        key: str,
        value: str,
        description: str = "",
        comments: str = "",
    ) -> None:
        """Write a tenant property; only works against the app catalog web."""
        await self._clone(Web, "setStorageEntity").post_core(
            body={
                "comments": comments,
                "description": description,
                "key": key,
                "value": value,
            }
        )

    async def remove_storage_entity(self, key: str) -> None:
        await self._clone(Web, f"removeStorageEntity('{escape_query_value(key)}')").post_core()

    async def get_client_side_web_parts(self) -> list[ClientSidePageComponent]:
        return await self._clone(QueryableCollection, "GetClientSideWebParts").get()

    async def add_client_side_page(
        self,
        page_name: str,
        title: str | None = None,
        library_title: str = "Site Pages",
    ) -> ClientSidePage:
        """Create a modern page in the library titled ``library_title``."""
        if title is None:
            title = _EXTENSION_RE.sub("", page_name)
        return await ClientSidePage.create(self.lists.get_by_title(library_title), page_name, title)

    async def add_client_side_page_by_path(
        self,
        page_name: str,
        list_relative_path: str,
        title: str | None = None,
    ) -> ClientSidePage:
        """Create a modern page in the library at ``list_relative_path``."""
        if title is None:
            title = _EXTENSION_RE.sub("", page_name)
        return await ClientSidePage.create(self.get_list(list_relative_path), page_name, title)

    async def create_default_associated_groups(self) -> None:
        """Create the Owners, Members and Visitors groups with their default permissions."""
        await self._clone(Web, "createDefaultAssociatedGroups").post_core()


def _scalar(data: Any, name: str) -> Any:
    """Unwrap a primitive function result (``{"MapToIcon": "icdocx.png"}``)."""
    if isinstance(data, Mapping) and name in data:
        return data[name]
    return data
