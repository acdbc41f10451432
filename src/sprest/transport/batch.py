"""
OData $batch support.

A batch collects requests from references bound to it with ``in_batch`` and
sends them as one ``multipart/mixed`` POST to ``<web>/_api/$batch``. Reads
go at batch level; consecutive writes are grouped in a changeset so the
server applies them together.

Each batched request is awaited like a normal one, so batched calls have to
be scheduled as tasks before the batch is executed:

    batch = web.create_batch()
    title = asyncio.create_task(web.in_batch(batch).select("Title").get())
    lists = asyncio.create_task(web.lists.in_batch(batch).get())
    await batch.execute()
    print((await title)["Title"], len(await lists))

``execute`` yields to the event loop once before reading the queue, so tasks
created just before it (or passed to ``asyncio.gather`` ahead of it) have
registered their requests by then.

Operations that need an unbatched lookup first (the entity type of a list
item, say) hold the batch open with ``dependency()`` while they wait, and
``execute`` does not send until every such lookup is done. Requests added
after ``execute`` raise ``RuntimeError``.
"""

from __future__ import annotations

import asyncio
import logging
import re
import uuid
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from sprest.odata import combine, extract_web_url, is_url_absolute
from sprest.transport.client import (
    JSON_ACCEPT,
    JSON_VERBOSE,
    RequestBody,
    SPHttpClient,
    encode_body,
    merge_headers,
)
from sprest.transport.errors import SPBatchParseError, SPHttpError
from sprest.transport.parsers import parse_odata_payload, raise_for_status

logger = logging.getLogger(__name__)

BATCH_RESPONSE_HEADER = "--batchresponse_"

_STATUS_RE = re.compile(r"^HTTP/[0-9.]+ +([0-9]+) +(.*)", re.IGNORECASE)

_METHOD_OVERRIDE = "x-http-method"


@dataclass
class BatchRequest:
    """One queued request and the future its caller is awaiting."""

    method: str
    url: str
    body: bytes | None
    headers: dict[str, str]
    future: asyncio.Future[Any] = field(repr=False)


@dataclass
class BatchResponse:
    """One response part parsed out of a $batch reply."""

    status_code: int
    reason: str
    body: str


class SPBatch:
    """
    Queue of requests sent together through the $batch endpoint.

    Args:
        base_url: Any url inside the target web; the web root is derived
                  from it.
        client: Transport used to send the batch POST.
    """

    def __init__(self, base_url: str, client: SPHttpClient) -> None:
        self.base_url = base_url
        self.client = client
        self.batch_id = str(uuid.uuid4())
        self._requests: list[BatchRequest] = []
        self._dependencies = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._executed = False

    def __repr__(self) -> str:
        return f"SPBatch(id={self.batch_id!r}, pending={self.pending})"

    @property
    def pending(self) -> int:
        """Number of requests waiting for ``execute``."""
        return len(self._requests)

    @property
    def root_url(self) -> str:
        """Absolute url of the web the batch is posted to."""
        root = extract_web_url(self.base_url)
        if not is_url_absolute(root):
            root = combine(self.client.settings.site_url, root)
        return root

    def add_dependency(self) -> None:
        """Hold ``execute`` back until a matching ``remove_dependency``."""
        self._dependencies += 1
        self._idle.clear()

    def remove_dependency(self) -> None:
        self._dependencies -= 1
        if self._dependencies <= 0:
            self._dependencies = 0
            self._idle.set()

    @contextmanager
    def dependency(self) -> Iterator[None]:
        """
        Keep the batch open while an operation makes unbatched requests.

        Operations that look something up before queuing their batched
        request wrap the lookup in this, so ``execute`` waits for the
        request instead of sending the batch without it.
        """
        self.add_dependency()
        try:
            yield
        finally:
            self.remove_dependency()

    def add(
        self,
        method: str,
        url: str,
        *,
        body: RequestBody = None,
        headers: Mapping[str, str] | None = None,
    ) -> asyncio.Future[Any]:
        """
        Queue a request.

        Returns:
            A future resolved with the parsed payload once the batch runs.

        Raises:
            RuntimeError: If the batch has already been executed.
        """
        if self._executed:
            raise RuntimeError(
                f"Batch {self.batch_id} has already been executed; "
                f"{method.upper()} {url} cannot be added to it."
            )

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._requests.append(
            BatchRequest(
                method=method.upper(),
                url=url,
                body=encode_body(body),
                headers=dict(headers or {}),
                future=future,
            )
        )
        return future

    async def execute(self) -> None:
        """
        Send every queued request and resolve the awaiting futures in order.

        Per-request failures (a 404 for one part, say) are set on that
        request's future only. Failures of the batch POST itself, or a reply
        that cannot be matched to the requests, fail every future and are
        raised here as well.

        Raises:
            SPHttpError: If the batch request fails.
            SPBatchParseError: If the reply is malformed.
        """
        await asyncio.sleep(0)
        while self._dependencies:
            await self._idle.wait()
            # the released operation queues its request in the same step
            await asyncio.sleep(0)

        self._executed = True
        requests, self._requests = self._requests, []
        if not requests:
            logger.debug("Batch %s executed with no requests", self.batch_id)
            return

        root = self.root_url
        logger.info("Executing batch %s with %d request(s)", self.batch_id, len(requests))

        try:
            response = await self.client.send(
                "POST",
                combine(root, "_api/$batch"),
                content=self.build_body(requests, root).encode("utf-8"),
                headers={"Content-Type": f"multipart/mixed; boundary=batch_{self.batch_id}"},
            )
            raise_for_status(response.status_code, response.reason_phrase, response.text)

            parts = parse_batch_response(response.text)
            if len(parts) != len(requests):
                raise SPBatchParseError(
                    message="Could not properly parse responses to match requests in batch.",
                    detail=f"expected {len(requests)} responses, got {len(parts)}",
                )
        except SPHttpError as e:
            for request in requests:
                if not request.future.done():
                    request.future.set_exception(e)
            raise

        for request, part in zip(requests, parts, strict=True):
            if request.future.done():
                continue
            try:
                raise_for_status(part.status_code, part.reason, part.body)
                result = parse_odata_payload(part.status_code, part.body)
            except SPHttpError as e:
                request.future.set_exception(e)
            else:
                request.future.set_result(result)

    def build_body(self, requests: list[BatchRequest], root: str) -> str:
        """Serialise ``requests`` as a multipart/mixed $batch body."""
        lines: list[str] = []
        changeset_id = ""

        for request in requests:
            if request.method == "GET":
                if changeset_id:
                    lines.append(f"--changeset_{changeset_id}--\n\n")
                    changeset_id = ""
                lines.append(f"--batch_{self.batch_id}\n")
            else:
                if not changeset_id:
                    changeset_id = str(uuid.uuid4())
                    lines.append(f"--batch_{self.batch_id}\n")
                    lines.append(
                        f'Content-Type: multipart/mixed; boundary="changeset_{changeset_id}"\n\n'
                    )
                lines.append(f"--changeset_{changeset_id}\n")

            lines.append("Content-Type: application/http\n")
            lines.append("Content-Transfer-Encoding: binary\n\n")

            url = request.url if is_url_absolute(request.url) else combine(root, request.url)
            method, headers = _request_line_parts(request)
            lines.append(f"{method} {url} HTTP/1.1\n")
            for name, value in headers.items():
                lines.append(f"{name}: {value}\n")
            lines.append("\n")

            if request.body:
                lines.append(f"{request.body.decode('utf-8')}\n\n")

        if changeset_id:
            lines.append(f"--changeset_{changeset_id}--\n\n")
        lines.append(f"--batch_{self.batch_id}--\n")

        return "".join(lines)


def _request_line_parts(request: BatchRequest) -> tuple[str, dict[str, str]]:
    """Resolve the verb (honouring X-HTTP-Method) and the part headers."""
    method = request.method
    own_headers = dict(request.headers)

    if method != "GET":
        for name in list(own_headers):
            if name.lower() == _METHOD_OVERRIDE:
                method = own_headers.pop(name).upper()

    return method, merge_headers(
        {"Accept": JSON_ACCEPT},
        {"Content-Type": JSON_VERBOSE} if request.method != "GET" else None,
        own_headers,
    )


def parse_batch_response(text: str) -> list[BatchResponse]:
    """
    Split a $batch reply into its response parts.

    The reply is read line by line: a ``--batchresponse_`` boundary, the
    part headers, a blank line, the HTTP status line, the inner headers, a
    blank line and a single body line. A 204 part has an empty body.

    Raises:
        SPBatchParseError: On any line that does not fit that shape, or if
                           the input ends in the middle of a part.
    """
    responses: list[BatchResponse] = []
    state = "batch"
    status_code = 0
    reason = ""

    for index, line in enumerate(text.replace("\r\n", "\n").split("\n")):
        if state == "batch":
            if line.startswith(BATCH_RESPONSE_HEADER):
                state = "batch_headers"
            elif line.strip():
                raise SPBatchParseError(message="Invalid batch response", detail=f"line {index}")
        elif state == "batch_headers":
            if not line.strip():
                state = "status"
        elif state == "status":
            match = _STATUS_RE.match(line)
            if match is None:
                raise SPBatchParseError(message="Invalid status", detail=f"line {index}")
            status_code = int(match.group(1))
            reason = match.group(2).strip()
            state = "status_headers"
        elif state == "status_headers":
            if not line.strip():
                state = "body"
        elif state == "body":
            if line.startswith(BATCH_RESPONSE_HEADER):
                # part without a body line; this boundary opens the next part
                responses.append(BatchResponse(status_code=status_code, reason=reason, body=""))
                state = "batch_headers"
                continue
            responses.append(
                BatchResponse(
                    status_code=status_code,
                    reason=reason,
                    body="" if status_code == 204 else line,
                )
            )
            state = "batch"

    # the closing boundary leaves the parser waiting for headers or a status line
    if state not in ("batch_headers", "status"):
        raise SPBatchParseError(message="Invalid batch response", detail="Unexpected end of input")

    return responses
