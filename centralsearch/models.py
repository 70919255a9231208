"""Data returned by the search endpoint: response envelope, artifacts, versions and groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Mapping, TypeVar

DocT = TypeVar("DocT")


def _str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _int(data: Mapping[str, Any], key: str) -> int:
    value = data.get(key)
    return 0 if value is None else int(value)


def _strs(data: Mapping[str, Any], key: str) -> list[str]:
    return [str(item) for item in data.get(key) or []]


@dataclass
class Params:
    """The request parameters echoed back in the response header."""

    q: str = ""
    core: str = ""
    indent: str = ""
    fl: str = ""
    start: str = ""
    sort: str = ""
    rows: str = ""
    wt: str = ""
    version: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Params:
        return cls(
            q=_str(data, "q"),
            core=_str(data, "core"),
            indent=_str(data, "indent"),
            fl=_str(data, "fl"),
            start=_str(data, "start"),
            sort=_str(data, "sort"),
            rows=_str(data, "rows"),
            wt=_str(data, "wt"),
            version=_str(data, "version"),
        )


@dataclass
class ResponseHeader:
    """Status and timing of a search."""

    status: int = 0
    q_time: int = 0
    params: Params | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResponseHeader:
        params = data.get("params")
        return cls(
            status=_int(data, "status"),
            q_time=_int(data, "QTime"),
            params=Params.from_dict(params) if params is not None else None,
        )


@dataclass
class ResponseBody(Generic[DocT]):
    """One page of matching documents and the total match count."""

    num_found: int = 0
    start: int = 0
    docs: list[DocT] = field(default_factory=list)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        doc_factory: Callable[[Any], DocT] | None = None,
    ) -> ResponseBody[DocT]:
        raw_docs = data.get("docs") or []
        docs = list(raw_docs) if doc_factory is None else [doc_factory(doc) for doc in raw_docs]
        return cls(num_found=_int(data, "numFound"), start=_int(data, "start"), docs=docs)


@dataclass
class FacetCounts:
    """Facet results; each field maps to a flat list of value, count, value, count..."""

    facet_fields: dict[str, list[Any]] = field(default_factory=dict)
    facet_queries: dict[str, int] = field(default_factory=dict)
    facet_dates: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FacetCounts:
        return cls(
            facet_fields={k: list(v or []) for k, v in (data.get("facet_fields") or {}).items()},
            facet_queries={k: int(v) for k, v in (data.get("facet_queries") or {}).items()},
            facet_dates=dict(data.get("facet_dates") or {}),
        )


@dataclass
class Response(Generic[DocT]):
    """A full search response."""

    response_header: ResponseHeader | None = None
    response_body: ResponseBody[DocT] | None = None
    facet_counts: FacetCounts | None = None
    highlighting: dict[str, dict[str, list[str]]] = field(default_factory=dict)

    @classmethod
    def from_dict(
        cls,
        data: Mapping[str, Any],
        doc_factory: Callable[[Any], DocT] | None = None,
    ) -> Response[DocT]:
        header = data.get("responseHeader")
        body = data.get("response")
        facets = data.get("facet_counts")
        highlighting = {
            doc_id: {name: [str(s) for s in snippets or []] for name, snippets in fields.items()}
            for doc_id, fields in (data.get("highlighting") or {}).items()
        }
        return cls(
            response_header=ResponseHeader.from_dict(header) if header is not None else None,
            response_body=ResponseBody.from_dict(body, doc_factory) if body is not None else None,
            facet_counts=FacetCounts.from_dict(facets) if facets is not None else None,
            highlighting=highlighting,
        )


@dataclass
class Artifact:
    """An artifact document from the default search core."""

    id: str = ""
    group_id: str = ""
    artifact_id: str = ""
    latest_version: str = ""
    repository_id: str = ""
    packaging: str = ""
    timestamp: int = 0
    version_count: int = 0
    text: list[str] = field(default_factory=list)
    ec: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Artifact:
        return cls(
            id=_str(data, "id"),
            group_id=_str(data, "g"),
            artifact_id=_str(data, "a"),
            latest_version=_str(data, "latestVersion"),
            repository_id=_str(data, "repositoryId"),
            packaging=_str(data, "p"),
            timestamp=_int(data, "timestamp"),
            version_count=_int(data, "versionCount"),
            text=_strs(data, "text"),
            ec=_strs(data, "ec"),
            tags=_strs(data, "tags"),
        )


@dataclass
class Version:
    """A single version document from the ``gav`` core."""

    id: str = ""
    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    packaging: str = ""
    timestamp: int = 0
    ec: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Version:
        return cls(
            id=_str(data, "id"),
            group_id=_str(data, "g"),
            artifact_id=_str(data, "a"),
            version=_str(data, "v"),
            packaging=_str(data, "p"),
            timestamp=_int(data, "timestamp"),
            ec=_strs(data, "ec"),
            tags=_strs(data, "tags"),
        )


@dataclass
class VersionInfo:
    """Details of one version of a component."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    last_updated: str = ""
    packaging: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> VersionInfo:
        return cls(
            group_id=_str(data, "groupId"),
            artifact_id=_str(data, "artifactId"),
            version=_str(data, "version"),
            last_updated=_str(data, "lastUpdated"),
            packaging=_str(data, "packaging"),
        )


@dataclass
class VersionWithMetadata:
    """A version paired with its details."""

    version: Version | None = None
    version_info: VersionInfo | None = None


@dataclass
class VersionComparison:
    """Timestamps of two versions side by side."""

    version1: str = ""
    version2: str = ""
    v1_timestamp: str = ""
    v2_timestamp: str = ""


@dataclass
class TagCount:
    """A tag and how often it occurs."""

    tag: str = ""
    count: int = 0


@dataclass
class GroupArtifact:
    """Short description of an artifact inside a group."""

    artifact_id: str = ""
    version: str = ""


@dataclass
class GroupSearchResult:
    """Result of searching for a group."""

    group_id: str = ""
    artifact_count: int = 0
    last_updated: float = 0.0
    last_updated_date: str = ""
    artifacts: list[GroupArtifact] = field(default_factory=list)


@dataclass
class ArtifactStatistics:
    """Statistics of one artifact inside a group."""

    artifact_id: str = ""
    version_count: int = 0
    latest_version: str = ""


@dataclass
class GroupStatistics:
    """Statistics of a whole group."""

    group_id: str = ""
    artifact_count: int = 0
    total_versions: int = 0
    latest_update: int = 0
    last_updated_date: str = ""
    artifacts: list[ArtifactStatistics] = field(default_factory=list)


@dataclass
class GroupPopularity:
    """Popularity rank of a group."""

    group_id: str = ""
    artifact_count: int = 0
    popularity_rank: int = 0


@dataclass
class GroupComparison:
    """Comparison of two groups."""

    group1: str = ""
    group2: str = ""
    group1_stats: GroupStatistics | None = None
    group2_stats: GroupStatistics | None = None
    group1_error: str = ""
    group2_error: str = ""
    common_artifacts: list[str] = field(default_factory=list)
    common_artifact_count: int = 0


@dataclass
class GroupInfo:
    """Basic information about a group."""

    group_id: str = ""
    artifact_count: int = 0
    last_updated: int = 0
    last_updated_date: str = ""
    description: str = ""
    website: str = ""


@dataclass
class Dependency:
    """A declared dependency of an artifact."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    scope: str = ""
    optional: bool = False


@dataclass
class MetadataSecurityRating:
    """Security rating as carried in artifact metadata."""

    score: float = 0.0
    vuln_count: int = 0
    severity: str = ""
    advisories: list[str] = field(default_factory=list)
    description: str = ""
    details: dict[str, str] = field(default_factory=dict)


@dataclass
class Developer:
    """A developer listed for a project."""

    name: str = ""
    email: str = ""
    url: str = ""
    id: str = ""
    company: str = ""


@dataclass
class ProjectInfo:
    """Descriptive information about a project."""

    name: str = ""
    description: str = ""
    url: str = ""
    scm: str = ""
    issues: str = ""


@dataclass
class ArtifactMetadata:
    """Full metadata of an artifact."""

    group_id: str = ""
    artifact_id: str = ""
    latest_version: str = ""
    packaging: str = ""
    last_updated: int = 0
    pom_content: str = ""
    dependencies: list[Dependency] = field(default_factory=list)
    security_rating: MetadataSecurityRating | None = None
    licenses: list[str] = field(default_factory=list)
    developers: list[Developer] = field(default_factory=list)
    project_info: ProjectInfo | None = None


@dataclass
class FacetCount:
    """One value of a facet and its count."""

    value: str = ""
    count: int = 0


@dataclass
class FacetResults:
    """Facet counts grouped by field."""

    counts: dict[str, list[FacetCount]] = field(default_factory=dict)