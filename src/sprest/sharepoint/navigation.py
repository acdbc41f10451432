"""Quick launch and top navigation bar nodes."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sprest.odata import with_metadata
from sprest.sharepoint.queryable import Queryable, QueryableCollection, QueryableInstance


@dataclass(slots=True)
class NavigationNodeAddResult:
    data: Any
    node: NavigationNode


class Navigation(Queryable[str]):
    """Entry point to a web's navigation structures."""

    default_path = "navigation"

    @property
    def quicklaunch(self) -> NavigationNodes:
        return NavigationNodes(self, "quicklaunch")

    @property
    def top_navigation_bar(self) -> NavigationNodes:
        return NavigationNodes(self, "topnavigationbar")


class NavigationNodes(QueryableCollection[str]):
    """An ordered set of navigation nodes."""

    def get_by_id(self, node_id: int) -> NavigationNode:
        return NavigationNode(self, f"getById({node_id})")

    async def add(self, title: str, url: str, visible: bool = True) -> NavigationNodeAddResult:
        data = await self.post_core(
            body=with_metadata(
                "SP.NavigationNode", {"IsVisible": visible, "Title": title, "Url": url}
            )
        )
        return NavigationNodeAddResult(data=data, node=self.get_by_id(data["Id"]))


class NavigationNode(QueryableInstance[str]):
    """A single node; nodes can nest."""

    @property
    def children(self) -> NavigationNodes:
        return NavigationNodes(self, "children")

    async def update(self, properties: Mapping[str, Any]) -> Any:
        return await self._merge("SP.NavigationNode", properties)

    async def delete(self) -> None:
        await self._delete_with_etag()
