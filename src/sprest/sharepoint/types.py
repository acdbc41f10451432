"""
Value types exchanged with the REST API.

Enums mirror the server's integer codes; TypedDicts describe payloads the
client returns untouched; ChangeQuery is the one request type with enough
fields to deserve a dataclass.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import IntEnum
from typing import Any, TypedDict


class PrincipalType(IntEnum):
    """Kind of security principal."""

    NONE = 0
    USER = 1
    DISTRIBUTION_LIST = 2
    SECURITY_GROUP = 4
    SHAREPOINT_GROUP = 8
    ALL = 15


class CatalogType(IntEnum):
    """Gallery identifiers accepted by ``Web.get_catalog``."""

    WEB_TEMPLATE = 111
    WEB_PART = 113
    LIST_TEMPLATE = 114
    MASTER_PAGE = 116
    SOLUTION = 121
    THEME = 123
    DESIGN = 124
    APP_DATA = 125


class TemplateFileType(IntEnum):
    """Template used by ``Files.add_template_file``."""

    STANDARD_PAGE = 0
    WIKI_PAGE = 1
    FORM_PAGE = 2
    CLIENT_SIDE_PAGE = 3


class PromotedState(IntEnum):
    """Promotion state of a client side page."""

    NOT_PROMOTED = 0
    PROMOTE_ON_PUBLISH = 1
    PROMOTED = 2


class StorageEntity(TypedDict, total=False):
    """Tenant property stored in the app catalog site."""

    Value: str
    Comment: str
    Description: str


class ClientSidePageComponent(TypedDict, total=False):
    """A client side web part available to a web."""

    ComponentType: int
    Id: str
    Manifest: str
    ManifestType: int
    Name: str
    Status: int


class ChangeToken(TypedDict):
    StringValue: str


@dataclass
class ChangeQuery:
    """
    Which changes ``Web.get_changes`` should return.

    Only fields that are set are sent; the attribute names are converted to
    the server's PascalCase property names (``item`` -> ``Item``,
    ``change_token_start`` -> ``ChangeTokenStart``).
    """

    add: bool | None = None
    alert: bool | None = None
    change_token_end: ChangeToken | None = None
    change_token_start: ChangeToken | None = None
    content_type: bool | None = None
    delete_object: bool | None = None
    field: bool | None = None
    file: bool | None = None
    folder: bool | None = None
    group: bool | None = None
    group_membership_add: bool | None = None
    group_membership_delete: bool | None = None
    item: bool | None = None
    list: bool | None = None
    move: bool | None = None
    navigation: bool | None = None
    rename: bool | None = None
    restore: bool | None = None
    role_assignment_add: bool | None = None
    role_assignment_delete: bool | None = None
    role_definition_add: bool | None = None
    role_definition_delete: bool | None = None
    role_definition_update: bool | None = None
    security_policy: bool | None = None
    site: bool | None = None
    system_update: bool | None = None
    update: bool | None = None
    user: bool | None = None
    view: bool | None = None
    web: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        """Return the set fields keyed by their server-side names."""
        return {
            _pascal_case(f.name): getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


def _pascal_case(name: str) -> str:
    return "".join(part.capitalize() for part in name.split("_"))
