"""HTTP client for the search endpoint and paging over search results."""

from __future__ import annotations

import http.client
import json
import urllib.error
import urllib.request
from collections import deque
from typing import Any, Callable, Generic, Iterator, TypeVar

from .errors import HTTPError
from .models import Response
from .search_request import SearchRequest

DocT = TypeVar("DocT")

Transport = Callable[[str], "tuple[int, bytes]"]


def _urllib_transport(timeout: float) -> Transport:
    def fetch(url: str) -> tuple[int, bytes]:
        req = urllib.request.Request(url, headers={"Accept": "application/json"})
        try:
            with urllib.request.urlopen(req, timeout=timeout) as resp:
                return resp.status, resp.read()
        except urllib.error.HTTPError as exc:
            return exc.code, exc.read()

    return fetch


class Client:
    """Talks to a search service rooted at ``base_url``.

    ``transport`` takes a URL and returns the status code and the body;
    by default requests go over HTTP with urllib.
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: Transport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport or _urllib_transport(timeout)

    def get_json(self, url: str) -> Any:
        """Fetch ``url`` and decode its JSON body; raise HTTPError on error status."""
        status, body = self._transport(url)
        if status >= 400:
            message = body.decode("utf-8", "replace").strip() or http.client.responses.get(
                status, ""
            )
            raise HTTPError(status, message, url)
        return json.loads(body)

    def search_request(self, request: SearchRequest) -> Any:
        """Run a search and return the decoded JSON response."""
        url = f"{self.base_url}/solrsearch/select?{request.to_request_params()}"
        return self.get_json(url)


def search_docs(
    client: Client,
    request: SearchRequest,
    doc_factory: Callable[[Any], DocT] | None = None,
) -> Response[DocT]:
    """Run a search and parse the response, building documents with ``doc_factory``."""
    return Response.from_dict(client.search_request(request), doc_factory)


class SearchIterator(Generic[DocT]):
    """Iterates over every document matching a search, fetching page after page."""

    def __init__(
        self,
        client: Client,
        request: SearchRequest,
        doc_factory: Callable[[Any], DocT] | None = None,
    ) -> None:
        self._client = client
        self._request = request
        self._doc_factory = doc_factory
        self._buffer: deque[DocT] = deque()
        self._total = -1
        self._current = 0
        self._next_start = 0
        self._error: BaseException | None = None

    def __iter__(self) -> Iterator[DocT]:
        return self

    def __next__(self) -> DocT:
        if self._error is not None:
            raise self._error
        if not self._buffer:
            if self._total >= 0 and self._current >= self._total:
                raise StopIteration
            self._fetch_page()
            if not self._buffer or self._current >= self._total:
                raise StopIteration
        self._current += 1
        return self._buffer.popleft()

    def to_list(self) -> list[DocT]:
        """Collect all remaining documents."""
        return list(self)

    def _fetch_page(self) -> None:
        if self._total >= 0:
            self._request.start = self._next_start
        try:
            response = search_docs(self._client, self._request, self._doc_factory)
            if response.response_body is None:
                raise ValueError("empty response body")
        except Exception as exc:
            self._error = exc
            raise
        body = response.response_body
        if self._total < 0:
            self._total = body.num_found
        self._next_start += len(body.docs)
        self._buffer.extend(body.docs)