"""Finding artifacts by the SHA-1 checksum of their files."""

from __future__ import annotations

from .models import Version
from .query import Query
from .search import Client, SearchIterator, search_docs
from .search_request import SearchRequest

_FULL_SHA1_LENGTH = 40


def _docs(client: Client, request: SearchRequest) -> list[Version]:
    result = search_docs(client, request, Version.from_dict)
    if result.response_body is None:
        raise ValueError("empty response body")
    return result.response_body.docs


def iter_by_sha1(client: Client, sha1: str) -> SearchIterator[Version]:
    """Iterate over every version whose file has the given SHA-1."""
    return SearchIterator(client, SearchRequest(query=Query(sha1=sha1)), Version.from_dict)


def search_by_sha1(client: Client, sha1: str, limit: int) -> list[Version]:
    """Versions whose file has the given SHA-1; a limit of zero or less returns them all."""
    if limit <= 0:
        return iter_by_sha1(client, sha1).to_list()
    return _docs(client, SearchRequest(query=Query(sha1=sha1), limit=limit))


def get_first_by_sha1(client: Client, sha1: str) -> Version | None:
    """The first version matching the SHA-1, or None."""
    results = search_by_sha1(client, sha1, 1)
    return results[0] if results else None


def exists_sha1(client: Client, sha1: str) -> bool:
    """Whether any artifact has the given SHA-1."""
    return get_first_by_sha1(client, sha1) is not None


def search_exact_sha1(client: Client, sha1: str) -> list[Version]:
    """Versions that match the SHA-1 exactly."""
    request = SearchRequest(query=Query(sha1=sha1)).add_custom_param("exact", "true")
    return _docs(client, request)


def count_by_sha1(client: Client, sha1: str) -> int:
    """Number of artifacts with the given SHA-1."""
    result = search_docs(client, SearchRequest(query=Query(sha1=sha1), limit=0), Version.from_dict)
    if result.response_body is None:
        raise ValueError("empty response body")
    return result.response_body.num_found


def _prefix_request(sha1_prefix: str) -> SearchRequest:
    return SearchRequest(query=Query(custom_query=f"1:{sha1_prefix}*"))


def iter_by_sha1_prefix(client: Client, sha1_prefix: str) -> SearchIterator[Version]:
    """Iterate over versions whose SHA-1 starts with the prefix."""
    if len(sha1_prefix) == _FULL_SHA1_LENGTH:
        return iter_by_sha1(client, sha1_prefix)
    return SearchIterator(client, _prefix_request(sha1_prefix), Version.from_dict)


def search_by_sha1_prefix(client: Client, sha1_prefix: str, limit: int) -> list[Version]:
    """Versions whose SHA-1 starts with the prefix; a full SHA-1 searches exactly."""
    if not sha1_prefix:
        raise ValueError("SHA1前缀不能为空")
    if len(sha1_prefix) == _FULL_SHA1_LENGTH:
        return search_by_sha1(client, sha1_prefix, limit)
    if limit <= 0:
        return iter_by_sha1_prefix(client, sha1_prefix).to_list()
    request = _prefix_request(sha1_prefix)
    request.limit = limit
    return _docs(client, request)