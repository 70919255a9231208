"""License lookup, compatibility checks and compliance reports."""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterable, Mapping
from urllib.parse import quote_plus

from .errors import HTTPError
from .models import Response
from .query import Query
from .reports import (
    ArtifactRef,
    ComponentLicense,
    LicenseConflict,
    LicenseInfo,
    LicenseReport,
    LicenseSummary,
    RiskAssessment,
)
from .search import Client
from .search_request import SearchRequest


class LicenseType(str, Enum):
    """Common open source license identifiers."""

    APACHE2 = "Apache-2.0"
    MIT = "MIT"
    GPLV2 = "GPL-2.0"
    GPLV3 = "GPL-3.0"
    LGPLV2 = "LGPL-2.0"
    LGPLV3 = "LGPL-3.0"
    BSD2 = "BSD-2-Clause"
    BSD3 = "BSD-3-Clause"
    MPL = "MPL-2.0"
    EPL = "EPL-2.0"
    CDDL = "CDDL-1.0"
    UNLICENSE = "Unlicense"

    def __str__(self) -> str:
        return self.value


class LicenseCategory(str, Enum):
    """Broad families of licenses."""

    PERMISSIVE = "permissive"
    COPYLEFT = "copyleft"
    WEAK_COPYLEFT = "weak-copyleft"
    NON_COMMERCIAL = "non-commercial"

    def __str__(self) -> str:
        return self.value


class ComponentNotFound(LookupError):
    """No component matches the requested coordinates."""


_FETCH_ERRORS = (HTTPError, LookupError, OSError, ValueError)

_INCOMPATIBLE_PAIRS = {
    f"{LicenseType.GPLV2.value}_{LicenseType.APACHE2.value}": "GPL-2.0不兼容Apache-2.0",
    f"{LicenseType.GPLV3.value}_{LicenseType.CDDL.value}": "GPL-3.0不兼容CDDL-1.0",
}

_GPL_COMPATIBLE = frozenset(
    t.value
    for t in (
        LicenseType.MIT,
        LicenseType.BSD2,
        LicenseType.BSD3,
        LicenseType.LGPLV2,
        LicenseType.LGPLV3,
        LicenseType.UNLICENSE,
    )
)

_PERMISSIVE = frozenset(
    t.value
    for t in (
        LicenseType.MIT,
        LicenseType.BSD2,
        LicenseType.BSD3,
        LicenseType.APACHE2,
        LicenseType.UNLICENSE,
    )
)


def _text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _run(client: Client, request: SearchRequest) -> Response[Any]:
    return Response.from_dict(client.search_request(request))


def get_component_licenses(
    client: Client, group_id: str, artifact_id: str, version: str
) -> list[LicenseInfo]:
    """Licenses declared by one component version; raise ComponentNotFound if it is unknown."""
    q = (
        f"g:{quote_plus(group_id)}+AND+a:{quote_plus(artifact_id)}"
        f"+AND+v:{quote_plus(version)}"
    )
    response = _run(client, SearchRequest(query=Query(custom_query=q)))
    body = response.response_body
    if body is None:
        raise ValueError("empty response body")
    if body.num_found == 0:
        raise ComponentNotFound(f"component {group_id}:{artifact_id}:{version} not found")

    licenses = []
    for doc in body.docs:
        if not isinstance(doc, Mapping):
            continue
        license_list = doc.get("licenseList")
        if isinstance(license_list, list):
            licenses.extend(parse_license(item) for item in license_list if isinstance(item, str))
    return licenses


def search_by_license_type(
    client: Client, license_type: LicenseType | str, limit: int
) -> list[ArtifactRef]:
    """Components published under the given license."""
    q = f"l:{quote_plus(_text(license_type))}"
    response = _run(client, SearchRequest(query=Query(custom_query=q), limit=limit))
    docs = response.response_body.docs if response.response_body is not None else []
    refs = []
    for doc in docs:
        doc = doc if isinstance(doc, Mapping) else {}
        fields = [doc.get(key) for key in ("g", "a", "v")]
        group_id, artifact_id, version = (v if isinstance(v, str) else "" for v in fields)
        refs.append(ArtifactRef(group_id=group_id, artifact_id=artifact_id, version=version))
    return refs


def find_license_conflicts(client: Client, artifacts: Iterable[ArtifactRef]) -> LicenseSummary:
    """Collect license statistics over the artifacts and spot incompatible licenses.

    Artifacts whose licenses cannot be fetched are skipped.
    """
    artifacts = list(artifacts)
    if not artifacts:
        return LicenseSummary()

    found: dict[ArtifactRef, list[LicenseInfo]] = {}
    license_distribution: dict[str, int] = {}
    category_distribution: dict[str, int] = {}
    artifacts_by_license: dict[str, list[ArtifactRef]] = {}

    for artifact in artifacts:
        try:
            licenses = get_component_licenses(
                client, artifact.group_id, artifact.artifact_id, artifact.version
            )
        except _FETCH_ERRORS:
            continue
        found[artifact] = licenses
        for lic in licenses:
            license_distribution[lic.type] = license_distribution.get(lic.type, 0) + 1
            category_distribution[lic.category] = category_distribution.get(lic.category, 0) + 1
            artifacts_by_license.setdefault(lic.type, []).append(artifact)

    return LicenseSummary(
        total_artifacts=len(artifacts),
        license_distribution=license_distribution,
        category_distribution=category_distribution,
        potential_conflicts=find_conflicts(found),
        artifacts_by_license=artifacts_by_license,
    )


def get_popular_licenses(client: Client, limit: int) -> dict[str, int]:
    """Most used licenses with their usage counts, from a facet query."""
    request = SearchRequest(query=Query(custom_query="*:*"), limit=0)
    request.add_custom_param("facet", "true")
    request.add_custom_param("facet.field", "l")
    request.add_custom_param("facet.limit", str(limit))
    response = _run(client, request)

    licenses: dict[str, int] = {}
    if response.facet_counts is None:
        return licenses
    values = response.facet_counts.facet_fields.get("l", [])
    for name, count in zip(values[0::2], values[1::2]):
        if (
            isinstance(name, str)
            and isinstance(count, (int, float))
            and not isinstance(count, bool)
        ):
            licenses[name] = int(count)
    return licenses


def parse_license(license_str: str) -> LicenseInfo:
    """Describe a license given by its identifier."""
    return LicenseInfo(
        name=license_str,
        type=license_str,
        category=determine_license_category(license_str).value,
        url=f"https://opensource.org/licenses/{license_str}",
    )


def determine_license_category(license_type: LicenseType | str) -> LicenseCategory:
    """Classify a license; anything containing GPL counts as copyleft."""
    text = _text(license_type)
    if "GPL" in text:
        return LicenseCategory.COPYLEFT
    if "LGPL" in text:
        return LicenseCategory.WEAK_COPYLEFT
    return LicenseCategory.PERMISSIVE


def find_conflicts(
    licenses: Mapping[ArtifactRef, list[LicenseInfo]],
) -> list[LicenseConflict]:
    """Pairs of licenses across the artifacts that are known not to go together."""
    conflicts: list[LicenseConflict] = []
    checked: set[str] = set()

    for artifact_licenses in licenses.values():
        for first in artifact_licenses:
            for other_licenses in licenses.values():
                for second in other_licenses:
                    if first.type == second.type:
                        continue
                    key1 = f"{first.type}_{second.type}"
                    key2 = f"{second.type}_{first.type}"
                    if key1 in checked or key2 in checked:
                        continue
                    checked.update((key1, key2))

                    if key1 in _INCOMPATIBLE_PAIRS:
                        conflicts.append(
                            LicenseConflict(first.type, second.type, _INCOMPATIBLE_PAIRS[key1])
                        )
                    elif key2 in _INCOMPATIBLE_PAIRS:
                        conflicts.append(
                            LicenseConflict(second.type, first.type, _INCOMPATIBLE_PAIRS[key2])
                        )

                    if (
                        is_gpl(first.type)
                        and not is_gpl(second.type)
                        and not is_compatible_with_gpl(second.type)
                    ):
                        conflicts.append(
                            LicenseConflict(
                                first.type, second.type, f"{first.type}不兼容{second.type}"
                            )
                        )
    return conflicts


def is_gpl(license_str: str) -> bool:
    """True for GPL licenses (but not LGPL)."""
    return license_str.startswith("GPL")


def is_compatible_with_gpl(license_str: str) -> bool:
    """True for licenses that are generally compatible with the GPL."""
    return license_str in _GPL_COMPATIBLE


def is_permissive_license(license_str: str) -> bool:
    """True for well-known permissive licenses."""
    return license_str in _PERMISSIVE


def check_license_compatibility(license1: str, license2: str) -> tuple[bool, str]:
    """Whether two licenses can be combined, with the reason."""
    if license1 == license2:
        return True, "相同的许可证总是兼容的"

    for key in (f"{license1}_{license2}", f"{license2}_{license1}"):
        if key in _INCOMPATIBLE_PAIRS:
            return False, _INCOMPATIBLE_PAIRS[key]

    if is_gpl(license1) and not is_gpl(license2) and not is_compatible_with_gpl(license2):
        return False, f"{license1}不兼容{license2}"
    if is_gpl(license2) and not is_gpl(license1) and not is_compatible_with_gpl(license1):
        return False, f"{license2}不兼容{license1}"

    if is_permissive_license(license1) or is_permissive_license(license2):
        return True, "宽松许可证通常兼容其他许可证"

    return True, "未检测到明确的不兼容性，但请咨询法律专家"


def generate_license_report(client: Client, artifacts: Iterable[ArtifactRef]) -> LicenseReport:
    """Build a license compliance report for a set of components."""
    artifacts = list(artifacts)
    summary = find_license_conflicts(client, artifacts)

    risk = RiskAssessment()
    for conflict in summary.potential_conflicts:
        if "GPL" in conflict.license1 or "GPL" in conflict.license2:
            risk.high_risk_count += 1
        elif "LGPL" in conflict.license1 or "LGPL" in conflict.license2:
            risk.medium_risk_count += 1
        else:
            risk.low_risk_count += 1

    component_licenses = []
    for artifact in artifacts:
        try:
            licenses = get_component_licenses(
                client, artifact.group_id, artifact.artifact_id, artifact.version
            )
            unknown = False
        except _FETCH_ERRORS:
            licenses, unknown = [], True
        component_licenses.append(
            ComponentLicense(
                group_id=artifact.group_id,
                artifact_id=artifact.artifact_id,
                version=artifact.version,
                licenses=licenses,
                unknown=unknown,
            )
        )

    return LicenseReport(
        total_components=len(artifacts),
        license_count=len(summary.license_distribution),
        conflict_count=len(summary.potential_conflicts),
        component_licenses=component_licenses,
        conflict_details=summary.potential_conflicts,
        risk_assessment=risk,
        license_distribution=dict(summary.license_distribution),
        recommendations=generate_recommendations(summary),
    )


def filter_by_license_type(
    client: Client, artifacts: Iterable[ArtifactRef], allowed_types: Iterable[str]
) -> tuple[list[ArtifactRef], list[ArtifactRef]]:
    """Split artifacts into those with at least one allowed license and the rest.

    Artifacts whose licenses cannot be fetched count as non-compliant.
    """
    allowed = {_text(t) for t in allowed_types}
    compliant: list[ArtifactRef] = []
    non_compliant: list[ArtifactRef] = []
    for artifact in artifacts:
        try:
            licenses = get_component_licenses(
                client, artifact.group_id, artifact.artifact_id, artifact.version
            )
        except _FETCH_ERRORS:
            non_compliant.append(artifact)
            continue
        if any(lic.type in allowed for lic in licenses):
            compliant.append(artifact)
        else:
            non_compliant.append(artifact)
    return compliant, non_compliant


def generate_recommendations(summary: LicenseSummary) -> list[str]:
    """Advice derived from the conflicts and licenses in a summary."""
    recommendations = []
    conflict_count = len(summary.potential_conflicts)
    if conflict_count > 5:
        recommendations.append("存在大量许可证冲突，建议进行详细的法律审查")
    elif conflict_count > 0:
        recommendations.append("存在一些许可证冲突，请关注冲突详情")
    else:
        recommendations.append("未发现明显的许可证冲突，合规性良好")

    has_gpl = any("GPL-" in t and "LGPL-" not in t for t in summary.license_distribution)
    has_lgpl = any("LGPL-" in t for t in summary.license_distribution)
    if has_gpl:
        recommendations.append("项目中包含GPL许可证，如果进行商业分发，需要确保整个项目符合GPL要求")
    if has_lgpl:
        recommendations.append("项目中包含LGPL许可证，需要注意动态链接相关要求")

    recommendations.append("定期更新依赖并检查许可证变更")
    recommendations.append("确保所有依赖的许可证条款都被正确遵守")
    return recommendations