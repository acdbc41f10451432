"""Site users, site groups and role definitions."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote

from sprest.odata import escape_query_value, with_metadata
from sprest.sharepoint.queryable import QueryableCollection, QueryableInstance


@dataclass(slots=True)
class UserAddResult:
    data: Any
    user: SiteUser


@dataclass(slots=True)
class GroupAddResult:
    data: Any
    group: SiteGroup


@dataclass(slots=True)
class PrincipalUpdateResult:
    data: Any
    principal: SiteUser | SiteGroup


class SiteUsers(QueryableCollection[str]):
    """The users of a web (``siteusers``), or the members of a group (``users``)."""

    default_path = "siteusers"

    def get_by_email(self, email: str) -> SiteUser:
        return SiteUser(self, f"getByEmail('{escape_query_value(email)}')")

    def get_by_id(self, user_id: int) -> SiteUser:
        return SiteUser(self, f"getById({user_id})")

    def get_by_login_name(self, login_name: str) -> SiteUser:
        """
        Look a user up by claims login name.

        The name travels as a parameter alias because claims names contain
        ``|`` and ``#``.
        """
        return SiteUser(self)._append(f"('!@v::{quote(login_name, safe='')}')")

    async def remove_by_id(self, user_id: int) -> None:
        await self._clone(SiteUsers, f"removeById({user_id})").post_core()

    async def remove_by_login_name(self, login_name: str) -> None:
        q = self._clone(SiteUsers, "removeByLoginName(@v)")
        await q._with_query("@v", f"'{quote(login_name, safe='')}'").post_core()

    async def add(self, login_name: str) -> UserAddResult:
        """Add a user by login name and return a reference to it."""
        data = await self.post_core(body=with_metadata("SP.User", {"LoginName": login_name}))
        return UserAddResult(data=data, user=self.get_by_login_name(login_name))


class SiteUser(QueryableInstance[str]):
    """A single user."""

    @property
    def groups(self) -> SiteGroups:
        return SiteGroups(self, "groups")

    async def update(self, properties: Mapping[str, Any]) -> PrincipalUpdateResult:
        data = await self._merge("SP.User", properties)
        return PrincipalUpdateResult(data=data, principal=self)

    async def delete(self) -> None:
        await self._delete_with_etag()


class CurrentUser(SiteUser):
    """The user the request is authenticated as."""

    default_path = "currentuser"


class SiteGroups(QueryableCollection[str]):
    """The SharePoint groups of a web (``sitegroups``)."""

    default_path = "sitegroups"

    def get_by_id(self, group_id: int) -> SiteGroup:
        return SiteGroup(self)._append(f"({group_id})")

    def get_by_name(self, name: str) -> SiteGroup:
        return SiteGroup(self, f"getByName('{escape_query_value(name)}')")

    async def add(self, properties: Mapping[str, Any]) -> GroupAddResult:
        """Create a group; ``properties`` needs at least ``Title``."""
        data = await self.post_core(body=with_metadata("SP.Group", properties))
        return GroupAddResult(data=data, group=self.get_by_id(data["Id"]))

    async def remove_by_id(self, group_id: int) -> None:
        await self._clone(SiteGroups, f"removeById('{group_id}')").post_core()

    async def remove_by_login_name(self, login_name: str) -> None:
        await self._clone(
            SiteGroups, f"removeByLoginName('{escape_query_value(login_name)}')"
        ).post_core()


class SiteGroup(QueryableInstance[str]):
    """A single SharePoint group."""

    @property
    def users(self) -> SiteUsers:
        return SiteUsers(self, "users")

    async def update(self, properties: Mapping[str, Any]) -> PrincipalUpdateResult:
        data = await self._merge("SP.Group", properties)
        return PrincipalUpdateResult(data=data, principal=self)


class RoleDefinitions(QueryableCollection[str]):
    """Permission levels defined on a web (``roledefinitions``)."""

    default_path = "roledefinitions"

    def get_by_id(self, role_id: int) -> RoleDefinition:
        return RoleDefinition(self)._append(f"({role_id})")

    def get_by_name(self, name: str) -> RoleDefinition:
        return RoleDefinition(self, f"getbyname('{escape_query_value(name)}')")

    def get_by_type(self, role_type: int) -> RoleDefinition:
        return RoleDefinition(self, f"getbytype({role_type})")


class RoleDefinition(QueryableInstance[str]):
    """A single permission level."""

    async def delete(self) -> None:
        await self._delete_with_etag()
