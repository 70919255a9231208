"""Security and license results built from API data."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


@dataclass
class SecurityRating:
    """Security rating of a component (score from 0 to 10)."""

    vuln_count: int = 0
    severity: str = ""
    score: float = 0.0
    advisories: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SecurityRating:
        return cls(
            vuln_count=int(data.get("vulnerabilityCount") or 0),
            severity=_str(data, "maxSeverity"),
            score=float(data.get("score") or 0.0),
            advisories=[str(a) for a in data.get("advisories") or []],
        )


@dataclass
class Vulnerability:
    """One known vulnerability."""

    id: str = ""
    cve: str = ""
    title: str = ""
    description: str = ""
    severity: str = ""
    cvss_score: float = 0.0
    cvss_vector: str = ""
    advisory: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Vulnerability:
        return cls(
            id=_str(data, "id"),
            cve=_str(data, "cve"),
            title=_str(data, "title"),
            description=_str(data, "description"),
            severity=_str(data, "severity"),
            cvss_score=float(data.get("cvssScore") or 0.0),
            cvss_vector=_str(data, "cvssVector"),
            advisory=_str(data, "advisoryLink"),
        )


@dataclass
class VulnerabilityDetails:
    """All vulnerabilities of one component version."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    vulnerabilities: list[Vulnerability] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VulnerabilityDetails:
        return cls(
            group_id=_str(data, "groupId"),
            artifact_id=_str(data, "artifactId"),
            version=_str(data, "version"),
            vulnerabilities=[
                Vulnerability.from_dict(v) for v in data.get("vulnerabilities") or []
            ],
        )


@dataclass
class SecurityComparison:
    """Security ratings of two versions and which one is safer."""

    group_id: str = ""
    artifact_id: str = ""
    version1: str = ""
    version2: str = ""
    rating1: SecurityRating | None = None
    rating2: SecurityRating | None = None
    safer_version: str = ""
    score_difference: float = 0.0


@dataclass(frozen=True)
class ArtifactRef:
    """Coordinates of one component version."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""


@dataclass
class SecurityScanResult:
    """Outcome of scanning one component in a batch."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    security_rating: SecurityRating | None = None
    error: str = ""


@dataclass
class TimelineEntry:
    """One version's position on a vulnerability timeline."""

    version: str = ""
    timestamp: int = 0
    vuln_count: int = 0
    severity: str = ""
    score: float = 0.0
    change: str = ""
    change_details: str = ""


@dataclass
class VulnerabilityTimeline:
    """How a component's vulnerabilities changed from version to version."""

    group_id: str = ""
    artifact_id: str = ""
    entries: list[TimelineEntry] = field(default_factory=list)


@dataclass
class ComponentVulnOverview:
    """Vulnerability status across the versions of a component."""

    group_id: str = ""
    artifact_id: str = ""
    total_versions: int = 0
    vulnerable_versions: int = 0
    latest_version: str = ""
    latest_vuln_free_version: str = ""
    version_ratings: dict[str, SecurityRating] = field(default_factory=dict)
    severity_counts: dict[str, int] = field(default_factory=dict)


@dataclass
class LicenseInfo:
    """A license declared by a component."""

    name: str = ""
    type: str = ""
    category: str = ""
    url: str = ""
    description: str = ""


@dataclass
class LicenseConflict:
    """Two licenses that do not go together."""

    license1: str = ""
    license2: str = ""
    reason: str = ""


@dataclass
class LicenseSummary:
    """License usage across a set of components."""

    total_artifacts: int = 0
    license_distribution: dict[str, int] = field(default_factory=dict)
    category_distribution: dict[str, int] = field(default_factory=dict)
    potential_conflicts: list[LicenseConflict] = field(default_factory=list)
    artifacts_by_license: dict[str, list[ArtifactRef]] = field(default_factory=dict)


@dataclass
class ComponentLicense:
    """Licenses of one component; ``unknown`` when they could not be found."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    licenses: list[LicenseInfo] = field(default_factory=list)
    unknown: bool = False


@dataclass
class RiskAssessment:
    """Number of license conflicts at each risk level."""

    high_risk_count: int = 0
    medium_risk_count: int = 0
    low_risk_count: int = 0


@dataclass
class LicenseReport:
    """License compliance report over a set of components."""

    total_components: int = 0
    license_count: int = 0
    conflict_count: int = 0
    component_licenses: list[ComponentLicense] = field(default_factory=list)
    conflict_details: list[LicenseConflict] = field(default_factory=list)
    risk_assessment: RiskAssessment = field(default_factory=RiskAssessment)
    license_distribution: dict[str, int] = field(default_factory=dict)
    recommendations: list[str] = field(default_factory=list)