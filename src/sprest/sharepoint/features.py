"""Activated features and user custom actions of a web or site."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sprest.odata import with_metadata
from sprest.sharepoint.queryable import QueryableCollection, QueryableInstance


@dataclass(slots=True)
class FeatureAddResult:
    data: Any
    feature: Feature


@dataclass(slots=True)
class UserCustomActionAddResult:
    data: Any
    action: UserCustomAction


class Features(QueryableCollection[str]):
    """Features activated on a web or site."""

    default_path = "features"

    def get_by_id(self, feature_id: str) -> Feature:
        return Feature(self)._append(f"('{feature_id}')")

    async def add(self, feature_id: str, force: bool = False) -> FeatureAddResult:
        """Activate a feature by its definition id."""
        data = await self._clone(Features, "add").post_core(
            body={"featdefScope": 0, "featureId": feature_id, "force": force}
        )
        return FeatureAddResult(data=data, feature=self.get_by_id(feature_id))

    async def remove(self, feature_id: str, force: bool = False) -> None:
        """Deactivate a feature by its definition id."""
        await self._clone(Features, "remove").post_core(
            body={"featureId": feature_id, "force": force}
        )


class Feature(QueryableInstance[str]):
    """A single activated feature."""

    async def deactivate(self, force: bool = False) -> None:
        """Deactivate this feature; the id is read from the server first."""
        with self._batch_dependency():
            lookup = self._clone(Feature, None, include_batch=False)
            data = await lookup.select("DefinitionId").get()
        features = self._rebase(Features, self.parent_url, "", include_batch=True)
        await features.remove(data["DefinitionId"], force)


class UserCustomActions(QueryableCollection[str]):
    """Custom actions (script links, ribbon buttons) registered on a web or site."""

    default_path = "usercustomactions"

    def get_by_id(self, action_id: str) -> UserCustomAction:
        return UserCustomAction(self)._append(f"('{action_id}')")

    async def add(self, properties: Mapping[str, Any]) -> UserCustomActionAddResult:
        data = await self.post_core(body=with_metadata("SP.UserCustomAction", properties))
        return UserCustomActionAddResult(data=data, action=self.get_by_id(data["Id"]))

    async def clear(self) -> None:
        """Remove every custom action in the collection."""
        await self._clone(UserCustomActions, "clear").post_core()


class UserCustomAction(QueryableInstance[str]):
    """A single custom action."""

    async def update(self, properties: Mapping[str, Any]) -> Any:
        return await self._merge("SP.UserCustomAction", properties)

    async def delete(self) -> None:
        await self._delete_with_etag()
