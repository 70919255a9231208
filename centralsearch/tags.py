"""Searching artifacts by tag and analysing tag usage."""

from __future__ import annotations

from typing import Iterable, Sequence

from .errors import HTTPError
from .models import Artifact, TagCount, Version
from .query import Query
from .search import Client, SearchIterator, search_docs
from .search_request import SearchRequest

_FETCH_ERRORS = (HTTPError, LookupError, OSError, ValueError)

_POPULAR_GROUP_IDS = ("org.springframework", "com.google.guava", "org.apache.commons")


def _artifact_docs(client: Client, request: SearchRequest) -> list[Artifact]:
    result = search_docs(client, request, Artifact.from_dict)
    if result.response_body is None:
        raise ValueError("empty response body")
    return result.response_body.docs


def _num_found(client: Client, request: SearchRequest, doc_factory) -> int:
    result = search_docs(client, request, doc_factory)
    if result.response_body is None:
        raise ValueError("empty response body")
    return result.response_body.num_found


def iter_by_tag(client: Client, tag: str) -> SearchIterator[Artifact]:
    """Iterate over every artifact carrying the tag."""
    return SearchIterator(client, SearchRequest(query=Query(tags=tag)), Artifact.from_dict)


def search_by_tag(client: Client, tag: str, limit: int) -> list[Artifact]:
    """Artifacts carrying the tag; a limit of zero or less returns them all."""
    if limit <= 0:
        return iter_by_tag(client, tag).to_list()
    return _artifact_docs(client, SearchRequest(query=Query(tags=tag), limit=limit))


def search_by_multiple_tags(client: Client, tags: Sequence[str], limit: int) -> list[Artifact]:
    """Artifacts carrying all of the tags, filtered by the server."""
    if not tags:
        raise ValueError("at least one tag must be provided")
    query = Query(custom_query=" AND ".join(f"tags:{tag}" for tag in tags))
    if limit <= 0:
        return SearchIterator(client, SearchRequest(query=query), Artifact.from_dict).to_list()
    return _artifact_docs(client, SearchRequest(query=query, limit=limit))


def _search_by_group_id(client: Client, group_id: str, limit: int) -> list[Artifact]:
    return _artifact_docs(client, SearchRequest(query=Query(group_id=group_id), limit=limit))


def get_most_used_tags(client: Client, base_tag: str, limit: int) -> list[TagCount]:
    """Tags ranked by how often they occur in a sample of artifacts.

    The sample is drawn from ``base_tag`` when given, otherwise from a few popular groups.
    """
    artifacts: list[Artifact] = []
    if base_tag:
        artifacts = search_by_tag(client, base_tag, 200)
    else:
        for group_id in _POPULAR_GROUP_IDS:
            try:
                artifacts.extend(_search_by_group_id(client, group_id, 50))
            except _FETCH_ERRORS:
                pass
            if len(artifacts) >= 200:
                break

    if not artifacts:
        raise LookupError("no artifacts found to analyze for tags")

    counts: dict[str, int] = {}
    for artifact in artifacts:
        for tag in artifact.tags:
            counts[tag] = counts.get(tag, 0) + 1

    results = sorted(
        (TagCount(tag=tag, count=count) for tag, count in counts.items()),
        key=lambda item: item.count,
        reverse=True,
    )
    if limit > 0:
        results = results[:limit]
    return results


def search_artifacts_with_all_tags(
    client: Client, tags: Sequence[str], limit: int
) -> list[Artifact]:
    """Artifacts carrying every tag, searching by the first and filtering by the rest."""
    if not tags:
        raise ValueError("at least one tag must be provided")
    artifacts = search_by_tag(client, tags[0], 0)
    if len(tags) == 1:
        return artifacts[:limit] if limit > 0 else artifacts

    required = tags[1:]
    filtered: list[Artifact] = []
    for artifact in artifacts:
        if all(tag in artifact.tags for tag in required):
            filtered.append(artifact)
            if limit > 0 and len(filtered) >= limit:
                break
    return filtered


def search_by_tag_with_group_filter(
    client: Client, tag: str, group_id_prefix: str, limit: int
) -> list[Artifact]:
    """Artifacts carrying the tag whose group id starts with the prefix."""
    filtered: list[Artifact] = []
    for artifact in search_by_tag(client, tag, 0):
        if artifact.group_id.startswith(group_id_prefix):
            filtered.append(artifact)
            if limit > 0 and len(filtered) >= limit:
                break
    return filtered


def count_artifacts_by_tag(client: Client, tag: str) -> int:
    """Number of artifacts carrying the tag."""
    request = SearchRequest(query=Query(tags=tag), limit=0)
    return _num_found(client, request, Artifact.from_dict)


def count_versions(client: Client, group_id: str, artifact_id: str) -> int:
    """Number of versions of a component."""
    request = SearchRequest(
        query=Query(group_id=group_id, artifact_id=artifact_id), core="gav", limit=0
    )
    return _num_found(client, request, Version.from_dict)


def search_by_tag_and_sort_by_popularity(client: Client, tag: str, limit: int) -> list[Artifact]:
    """Artifacts carrying the tag, ordered by their number of versions, most first.

    Artifacts whose version count cannot be fetched or is zero are left out.
    """
    scored: list[tuple[int, Artifact]] = []
    for artifact in search_by_tag(client, tag, 0):
        try:
            count = count_versions(client, artifact.group_id, artifact.artifact_id)
        except _FETCH_ERRORS:
            continue
        if count > 0:
            scored.append((count, artifact))

    scored.sort(key=lambda item: item[0], reverse=True)
    result = [artifact for _, artifact in scored]
    return result[:limit] if limit > 0 else result


def search_by_tag_prefix(client: Client, prefix: str, limit: int) -> list[Artifact]:
    """Artifacts with a tag starting with the prefix; one page of results."""
    if not prefix:
        raise ValueError("tag prefix cannot be empty")
    request = SearchRequest(query=Query(custom_query=f"tags:{prefix}*"))
    if limit > 0:
        request.limit = limit
    return _artifact_docs(client, request)


def _unused(_: Iterable[object]) -> None:  # pragma: no cover
    return None