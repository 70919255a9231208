"""Security ratings, vulnerability details and related searches."""

from __future__ import annotations

from enum import Enum
from typing import Iterable

from .errors import HTTPError
from .models import Artifact
from .query import Query
from .reports import (
    ArtifactRef,
    ComponentVulnOverview,
    SecurityComparison,
    SecurityRating,
    SecurityScanResult,
    TimelineEntry,
    Vulnerability,
    VulnerabilityDetails,
    VulnerabilityTimeline,
)
from .search import Client, search_docs
from .search_request import SearchRequest
from .versions import list_versions

_FETCH_ERRORS = (HTTPError, LookupError, OSError, ValueError)

_ARTIFACT_FIELDS = "id,g,a,latestVersion,p,timestamp,versionCount,text,ec,vulnerabilities"


class SecuritySeverity(str, Enum):
    """Severity levels of vulnerabilities."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    NONE = "NONE"

    def __str__(self) -> str:
        return self.value


def _text(value: SecuritySeverity | str) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _vulnerability_search(client: Client, query: Query, limit: int) -> list[Artifact]:
    request = SearchRequest(query=query, limit=limit)
    request.add_custom_param("fl", _ARTIFACT_FIELDS)
    request.set_sort("vulnerabilities.severity", False)
    result = search_docs(client, request, Artifact.from_dict)
    if result.response_body is None:
        raise ValueError("empty response body")
    return result.response_body.docs


def get_security_rating(
    client: Client, group_id: str, artifact_id: str, version: str
) -> SecurityRating:
    """Fetch the security rating of one component version."""
    url = f"{client.base_url}/api/security/rating/{group_id}/{artifact_id}/{version}"
    return SecurityRating.from_dict(client.get_json(url))


def search_vulnerable_artifacts(
    client: Client, min_severity: SecuritySeverity | str, limit: int
) -> list[Artifact]:
    """Artifacts with vulnerabilities of the given severity, most severe first."""
    query = Query(custom_query=f"vulnerabilities.severity:{_text(min_severity)}")
    return _vulnerability_search(client, query, limit)


def get_vulnerability_details(
    client: Client, group_id: str, artifact_id: str, version: str
) -> VulnerabilityDetails:
    """Fetch the known vulnerabilities of one component version."""
    url = f"{client.base_url}/api/security/vulnerabilities/{group_id}/{artifact_id}/{version}"
    return VulnerabilityDetails.from_dict(client.get_json(url))


def check_cve_impact(
    client: Client, cve_id: str, group_id: str, artifact_id: str, version: str
) -> tuple[bool, Vulnerability | None]:
    """Whether the component version is affected by the CVE, and the matching vulnerability."""
    details = get_vulnerability_details(client, group_id, artifact_id, version)
    wanted = cve_id.casefold()
    for vuln in details.vulnerabilities:
        if vuln.cve.casefold() == wanted:
            return True, vuln
    return False, None


def find_artifacts_by_cve(client: Client, cve_id: str, limit: int) -> list[Artifact]:
    """Artifacts affected by the given CVE."""
    return _vulnerability_search(client, Query(custom_query=f"cve:{cve_id}"), limit)


def compare_version_security(
    client: Client, group_id: str, artifact_id: str, version1: str, version2: str
) -> SecurityComparison:
    """Compare the security ratings of two versions; a higher score means more risk."""
    try:
        rating1 = get_security_rating(client, group_id, artifact_id, version1)
    except _FETCH_ERRORS as exc:
        raise RuntimeError(f"获取版本1安全评分失败: {exc}") from exc
    try:
        rating2 = get_security_rating(client, group_id, artifact_id, version2)
    except _FETCH_ERRORS as exc:
        raise RuntimeError(f"获取版本2安全评分失败: {exc}") from exc

    comparison = SecurityComparison(
        group_id=group_id,
        artifact_id=artifact_id,
        version1=version1,
        version2=version2,
        rating1=rating1,
        rating2=rating2,
        safer_version=version1,
        score_difference=0.0,
    )
    if rating1.score > rating2.score:
        comparison.safer_version = version2
        comparison.score_difference = rating1.score - rating2.score
    elif rating2.score > rating1.score:
        comparison.safer_version = version1
        comparison.score_difference = rating2.score - rating1.score
    return comparison


def get_recommended_secure_version(
    client: Client, group_id: str, artifact_id: str, current_version: str
) -> str:
    """The first newer version without vulnerabilities, or the current version."""
    details = get_vulnerability_details(client, group_id, artifact_id, current_version)
    if not details.vulnerabilities:
        return current_version

    versions = list_versions(client, group_id, artifact_id, 100)
    newer: list[str] = []
    found_current = False
    for entry in reversed(versions):
        if entry.version == current_version:
            found_current = True
            continue
        if found_current:
            newer.append(entry.version)

    for candidate in newer:
        try:
            candidate_details = get_vulnerability_details(client, group_id, artifact_id, candidate)
        except _FETCH_ERRORS:
            continue
        if not candidate_details.vulnerabilities:
            return candidate
    return current_version


def batch_security_scan(
    client: Client, artifacts: Iterable[ArtifactRef]
) -> list[SecurityScanResult]:
    """Fetch the security rating of each artifact, recording failures per artifact."""
    results = []
    for artifact in artifacts:
        result = SecurityScanResult(
            group_id=artifact.group_id,
            artifact_id=artifact.artifact_id,
            version=artifact.version,
        )
        try:
            result.security_rating = get_security_rating(
                client, artifact.group_id, artifact.artifact_id, artifact.version
            )
        except _FETCH_ERRORS as exc:
            result.error = str(exc)
        results.append(result)
    return results


def get_vulnerability_timeline(
    client: Client, group_id: str, artifact_id: str, max_versions: int
) -> VulnerabilityTimeline:
    """How the security score changed from the oldest to the newest version."""
    versions = list_versions(client, group_id, artifact_id, max_versions)
    timeline = VulnerabilityTimeline(group_id=group_id, artifact_id=artifact_id)

    previous: TimelineEntry | None = None
    for version in reversed(versions):
        try:
            rating = get_security_rating(client, group_id, artifact_id, version.version)
            details = get_vulnerability_details(client, group_id, artifact_id, version.version)
        except _FETCH_ERRORS:
            continue

        entry = TimelineEntry(
            version=version.version,
            timestamp=version.timestamp,
            vuln_count=len(details.vulnerabilities),
            severity=rating.severity,
            score=rating.score,
            change="STABLE",
        )
        if previous is not None:
            if entry.score < previous.score:
                entry.change = "IMPROVED"
                entry.change_details = f"安全评分从 {previous.score:.2f} 提升到 {entry.score:.2f}"
            elif entry.score > previous.score:
                entry.change = "DEGRADED"
                entry.change_details = f"安全评分从 {previous.score:.2f} 降低到 {entry.score:.2f}"
        timeline.entries.append(entry)
        previous = entry
    return timeline


def get_component_vulnerability_overview(
    client: Client, group_id: str, artifact_id: str, limit_versions: int
) -> ComponentVulnOverview:
    """Security status across the versions of a component."""
    try:
        versions = list_versions(client, group_id, artifact_id, limit_versions)
    except _FETCH_ERRORS as exc:
        raise RuntimeError(f"获取版本列表失败: {exc}") from exc

    overview = ComponentVulnOverview(
        group_id=group_id,
        artifact_id=artifact_id,
        total_versions=len(versions),
        latest_version=versions[0].version if versions else "",
    )
    for version in versions:
        try:
            rating = get_security_rating(client, group_id, artifact_id, version.version)
        except _FETCH_ERRORS:
            continue
        overview.version_ratings[version.version] = rating
        if rating.vuln_count > 0:
            overview.vulnerable_versions += 1
            counts = overview.severity_counts
            counts[rating.severity] = counts.get(rating.severity, 0) + 1
        elif not overview.latest_vuln_free_version:
            overview.latest_vuln_free_version = version.version
    return overview


def find_similar_vulnerable_artifacts(
    client: Client, group_id: str, artifact_id: str, version: str, limit: int
) -> list[Artifact]:
    """Other artifacts sharing a CVE with the given component version."""
    try:
        details = get_vulnerability_details(client, group_id, artifact_id, version)
    except _FETCH_ERRORS as exc:
        raise RuntimeError(f"获取组件漏洞信息失败: {exc}") from exc

    cves = [vuln.cve for vuln in details.vulnerabilities if vuln.cve]
    if not cves:
        return []

    query = Query(custom_query="cve:(" + " OR ".join(cves) + ")")
    exclude = f"(g:{group_id} AND a:{artifact_id})"
    query.custom_query = query.to_request_param_value() + " AND -" + exclude
    return _vulnerability_search(client, query, limit)