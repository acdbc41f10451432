"""
Resource references for the SharePoint REST API.

Every class here is a Queryable: building one never touches the network,
only its async methods do.

Example:
    from sprest.sharepoint import Web

    web = Web("https://contoso.sharepoint.com/sites/dev", client=http)
    result = await web.ensure_user("i:0#.f|membership|jane@contoso.com")
    print(await result.user.select("Title").get())
"""

from sprest.sharepoint.lists import Item, List
from sprest.sharepoint.queryable import Queryable, QueryableCollection, QueryableInstance
from sprest.sharepoint.site import OpenWebResult, Site
from sprest.sharepoint.types import CatalogType, ChangeQuery, PrincipalType, TemplateFileType
from sprest.sharepoint.users import SiteGroup, SiteUser
from sprest.sharepoint.webs import (
    GetCatalogResult,
    Web,
    WebAddResult,
    WebEnsureUserResult,
    WebField,
    WebInfos,
    Webs,
    WebUpdateResult,
)

__all__ = [
    "CatalogType",
    "ChangeQuery",
    "GetCatalogResult",
    "Item",
    "List",
    "OpenWebResult",
    "PrincipalType",
    "Queryable",
    "QueryableCollection",
    "QueryableInstance",
    "Site",
    "SiteGroup",
    "SiteUser",
    "TemplateFileType",
    "Web",
    "WebAddResult",
    "WebEnsureUserResult",
    "WebField",
    "WebInfos",
    "WebUpdateResult",
    "Webs",
]
