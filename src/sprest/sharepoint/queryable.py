"""
Fluent resource references for the REST API.

Every resource class (webs, lists, users, ...) is a Queryable: an immutable
handle holding the url of a remote resource, the OData query options to send
with it, the headers to add, the transport that will carry the request and,
optionally, the batch it belongs to.

Building a reference never touches the network. Only the verbs
(``get``, ``post_core``, ``delete_core``) send a request:

    web = Web("https://contoso.sharepoint.com/sites/dev", client=http)
    lists = web.lists.select("Title", "Id").top(10)  # no I/O yet
    data = await lists.get()  # GET .../_api/web/lists?$select=Title,Id&$top=10

Path composition follows three rules:

    - plain segment:    parent + "/" + "lists"
    - function call:    parent + "/" + "getByTitle('Tasks')"
    - concatenation:    parent + "('id')"    (no slash, used for keyed lookups)

Segments of the form ``'!@p1::value'`` are turned into OData parameter
aliases by ``to_url_and_query`` (``@p1`` in the path, ``@p1='value'`` in the
query string) so that values with special characters survive the url.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Mapping
from contextlib import AbstractContextManager, nullcontext
from typing import TYPE_CHECKING, Any, ClassVar, Generic, Self, TypeVar

from sprest.odata import combine, is_url_absolute, with_metadata

if TYPE_CHECKING:
    from sprest.transport.batch import SPBatch
    from sprest.transport.client import RequestBody, SPHttpClient

# Type of the field paths accepted by select()/expand(). Resource classes
# with a known schema narrow it to a Literal union (see webs.WebField).
FieldT = TypeVar("FieldT", bound=str)

Q = TypeVar("Q", bound="Queryable[Any]")

# '!@p1::value' → alias label "@p1" and value "value"
_ALIAS_RE = re.compile(r"'!(@.*?)::(.*?)'", re.IGNORECASE)

TARGET_KEY = "@target"


class Queryable(Generic[FieldT]):
    """
    Base class of every resource reference.

    Attributes:
        default_path: Segment appended when the class is constructed without
                      an explicit path (e.g. "webs" for Webs).

    Args:
        base: Absolute url string, or the parent reference to extend.
        path: Segment to append; defaults to ``default_path``.
        client: Transport to use. Inherited from ``base`` when it is a
                reference.
    """

    default_path: ClassVar[str | None] = None

    def __init__(
        self,
        base: str | Queryable[Any],
        path: str | None = None,
        *,
        client: SPHttpClient | None = None,
    ) -> None:
        if path is None:
            path = self.default_path

        self._query: dict[str, str] = {}
        self._headers: dict[str, str] = {}
        self._batch: SPBatch | None = None
        self._client: SPHttpClient | None = client

        if isinstance(base, str):
            self._parent_url, self._url = _split_string_base(base, path)
        else:
            self._client = client or base._client
            self._headers = dict(base._headers)
            self._batch = base._batch
            if TARGET_KEY in base._query:
                self._query[TARGET_KEY] = base._query[TARGET_KEY]
            self._parent_url = base.to_url()
            self._url = combine(self._parent_url, path)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_url_and_query()!r})"

    # -------------------------------------------------------------------------
    # Url building
    # -------------------------------------------------------------------------

    @property
    def parent_url(self) -> str:
        """Url of the reference this one was built from."""
        return self._parent_url

    @property
    def query(self) -> Mapping[str, str]:
        """Read-only view of the pending query options."""
        return dict(self._query)

    @property
    def headers(self) -> Mapping[str, str]:
        """Headers attached to every request made through this reference."""
        return dict(self._headers)

    @property
    def batch(self) -> SPBatch | None:
        """The batch this reference enqueues into, if any."""
        return self._batch

    @property
    def has_batch(self) -> bool:
        return self._batch is not None

    def to_url(self) -> str:
        """Return the url without the query string."""
        return self._url

    def to_url_and_query(self) -> str:
        """
        Return the full request url.

        Parameter aliases embedded in the path are replaced by their labels
        and appended to the query string as quoted values.
        """
        params = dict(self._query)

        def _alias(match: re.Match[str]) -> str:
            label, value = match.group(1), match.group(2)
            params[label] = f"'{value}'"
            return label

        url = _ALIAS_RE.sub(_alias, self._url)

        if params:
            separator = "&" if "?" in url else "?"
            url += separator + "&".join(f"{key}={value}" for key, value in params.items())

        return url

    # -------------------------------------------------------------------------
    # Derivation (every method returns a new reference)
    # -------------------------------------------------------------------------

    def _copy(self) -> Self:
        clone = copy.copy(self)
        clone._query = dict(self._query)
        clone._headers = dict(self._headers)
        return clone

    def _clone(self, factory: type[Q], path: str | None = None, include_batch: bool = True) -> Q:
        """Create a ``factory`` reference one segment below this one."""
        child = factory(self, path)
        if not include_batch:
            child._batch = None
        return child

    def _rebase(
        self,
        factory: type[Q],
        url: str,
        path: str | None = None,
        include_batch: bool = False,
    ) -> Q:
        """
        Create a ``factory`` reference at an unrelated absolute ``url``.

        Used when the server hands back the location of an entity. The new
        reference shares this one's transport and headers; it joins this
        one's batch only with ``include_batch``.
        """
        ref = factory(url, path, client=self._client)
        ref._headers = dict(self._headers)
        if include_batch:
            ref._batch = self._batch
        return ref

    def _batch_dependency(self) -> AbstractContextManager[None]:
        """Hold this reference's batch open around an unbatched lookup (no-op unbatched)."""
        if self._batch is None:
            return nullcontext()
        return self._batch.dependency()

    def _append(self, segment: str) -> Self:
        """Return a copy whose url has ``segment`` appended with no separator."""
        clone = self._copy()
        clone._url = f"{self._url}{segment}"
        return clone

    def _with_query(self, key: str, value: str) -> Self:
        clone = self._copy()
        clone._query[key] = value
        return clone

    def select(self, *fields: FieldT) -> Self:
        """Choose the properties returned by the server (``$select``)."""
        if not fields:
            return self._copy()
        return self._with_query("$select", ",".join(fields))

    def expand(self, *fields: FieldT) -> Self:
        """Inline related entities in the response (``$expand``)."""
        if not fields:
            return self._copy()
        return self._with_query("$expand", ",".join(fields))

    def configure(self, headers: Mapping[str, str]) -> Self:
        """Attach headers to every request made through the new reference and its children."""
        clone = self._copy()
        clone._headers.update(headers)
        return clone

    def in_batch(self, batch: SPBatch) -> Self:
        """
        Return a reference whose requests are queued in ``batch``.

        Raises:
            ValueError: If this reference already belongs to a batch.
        """
        if self._batch is not None:
            raise ValueError("This query is already part of a batch.")
        clone = self._copy()
        clone._batch = batch
        return clone

    # -------------------------------------------------------------------------
    # Verbs
    # -------------------------------------------------------------------------

    @property
    def client(self) -> SPHttpClient:
        """
        The transport bound to this reference.

        Raises:
            RuntimeError: If the reference was built without a client.
        """
        if self._client is None:
            raise RuntimeError(
                f"{type(self).__name__} has no SPHttpClient. "
                "Pass client=... when creating the root reference."
            )
        return self._client

    async def get(self) -> Any:
        """GET this resource and return the parsed payload."""
        return await self._send("GET")

    async def post_core(
        self,
        body: RequestBody = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        """POST to this resource."""
        return await self._send("POST", body=body, headers=headers)

    async def delete_core(self, headers: Mapping[str, str] | None = None) -> Any:
        """Send an HTTP DELETE for this resource."""
        return await self._send("DELETE", headers=headers)

    async def _send(
        self,
        method: str,
        *,
        body: RequestBody = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        url = self.to_url_and_query()
        request_headers = {**self._headers, **(headers or {})}

        if self._batch is not None:
            return await self._batch.add(method, url, body=body, headers=request_headers)

        client = self.client
        if not is_url_absolute(url):
            url = combine(client.settings.site_url, url)
        return await client.request(method, url, body=body, headers=request_headers)


class QueryableCollection(Queryable[FieldT]):
    """A reference to a collection; adds the paging and filtering options."""

    def filter(self, expression: str) -> Self:
        """Restrict the results (``$filter``)."""
        return self._with_query("$filter", expression)

    def orderby(self, field: str, ascending: bool = True) -> Self:
        """Add a sort key (``$orderby``); repeated calls add secondary keys."""
        keys = self._query["$orderby"].split(",") if "$orderby" in self._query else []
        keys.append(f"{field} {'asc' if ascending else 'desc'}")
        return self._with_query("$orderby", ",".join(keys))

    def top(self, count: int) -> Self:
        """Limit the number of results (``$top``)."""
        return self._with_query("$top", str(count))

    def skip(self, count: int) -> Self:
        """Skip the first ``count`` results (``$skip``)."""
        return self._with_query("$skip", str(count))


class QueryableInstance(Queryable[FieldT]):
    """A reference to a single entity; adds the update/delete helpers."""

    async def _merge(
        self,
        type_name: str,
        properties: Mapping[str, Any],
        etag: str | None = None,
    ) -> Any:
        """POST a partial update (``X-HTTP-Method: MERGE``) tagged with ``type_name``."""
        headers = {"X-HTTP-Method": "MERGE"}
        if etag is not None:
            headers["IF-Match"] = etag
        return await self.post_core(body=with_metadata(type_name, properties), headers=headers)

    async def _delete_with_etag(self, etag: str = "*") -> None:
        """Delete through a POST tunnel, the way list items and users expect it."""
        await self.post_core(headers={"IF-Match": etag, "X-HTTP-Method": "DELETE"})


def _split_string_base(base: str, path: str | None) -> tuple[str, str]:
    """
    Work out (parent_url, url) for a reference built from a plain string.

    ``.../items(19)/fields`` has parent ``.../items(19)``;
    ``.../items(19)`` has parent ``.../items``.
    """
    last_slash = base.rfind("/")
    if is_url_absolute(base) or last_slash < 0:
        return base, combine(base, path)

    if last_slash > base.rfind("("):
        parent_url = base[:last_slash]
        return parent_url, combine(parent_url, combine(base[last_slash:], path))

    parent_url = base[: base.rfind("(")]
    return parent_url, combine(base, path)
