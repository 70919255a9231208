"""Listing, inspecting and comparing the versions of a component."""

from __future__ import annotations

from typing import Callable
from urllib.parse import quote_plus

from .errors import HTTPError
from .models import Version, VersionComparison, VersionInfo, VersionWithMetadata
from .query import Query
from .search import Client, SearchIterator, search_docs
from .search_request import SearchRequest


def _versions_request(group_id: str, artifact_id: str) -> SearchRequest:
    return SearchRequest(query=Query(group_id=group_id, artifact_id=artifact_id), core="gav")


def get_version_info(client: Client, group_id: str, artifact_id: str, version: str) -> VersionInfo:
    """Fetch the details of one version."""
    url = (
        f"{client.base_url}/solrsearch/select?q=g:{quote_plus(group_id)}"
        f"+AND+a:{quote_plus(artifact_id)}+AND+v:{quote_plus(version)}&rows=1&wt=json"
    )
    return VersionInfo.from_dict(client.get_json(url))


def iter_versions(client: Client, group_id: str, artifact_id: str) -> SearchIterator[Version]:
    """Iterate over all versions of a component."""
    return SearchIterator(client, _versions_request(group_id, artifact_id), Version.from_dict)


def list_versions(client: Client, group_id: str, artifact_id: str, limit: int) -> list[Version]:
    """List versions of a component; a limit of zero or less lists them all."""
    if limit <= 0:
        return iter_versions(client, group_id, artifact_id).to_list()
    request = _versions_request(group_id, artifact_id)
    request.limit = limit
    result = search_docs(client, request, Version.from_dict)
    if result.response_body is None:
        raise ValueError("empty response body")
    return result.response_body.docs


def get_latest_version(client: Client, group_id: str, artifact_id: str) -> Version:
    """Return the most recent version; raise LookupError when there is none."""
    versions = list_versions(client, group_id, artifact_id, 1)
    if not versions:
        raise LookupError(f"no versions found for {group_id}:{artifact_id}")
    return versions[0]


def get_versions_with_metadata(
    client: Client, group_id: str, artifact_id: str
) -> list[VersionWithMetadata]:
    """Every version paired with its details; versions whose details fail are left out."""
    result = []
    for version in list_versions(client, group_id, artifact_id, 0):
        try:
            info = get_version_info(client, group_id, artifact_id, version.version)
        except (HTTPError, OSError, ValueError):
            continue
        result.append(VersionWithMetadata(version=version, version_info=info))
    return result


def filter_versions(
    client: Client,
    group_id: str,
    artifact_id: str,
    predicate: Callable[[Version], bool],
) -> list[Version]:
    """All versions for which ``predicate`` is true."""
    return [v for v in list_versions(client, group_id, artifact_id, 0) if predicate(v)]


def compare_versions(
    client: Client, group_id: str, artifact_id: str, version1: str, version2: str
) -> VersionComparison:
    """Put the last-updated timestamps of two versions side by side."""
    info1 = get_version_info(client, group_id, artifact_id, version1)
    info2 = get_version_info(client, group_id, artifact_id, version2)
    return VersionComparison(
        version1=version1,
        version2=version2,
        v1_timestamp=info1.last_updated,
        v2_timestamp=info2.last_updated,
    )