import json
from urllib.parse import parse_qs, urlsplit

import pytest

from centralsearch.errors import HTTPError
from centralsearch.license import (
    ComponentNotFound,
    LicenseCategory,
    LicenseType,
    check_license_compatibility,
    determine_license_category,
    filter_by_license_type,
    find_conflicts,
    find_license_conflicts,
    generate_license_report,
    generate_recommendations,
    get_component_licenses,
    get_popular_licenses,
    is_compatible_with_gpl,
    is_gpl,
    is_permissive_license,
    parse_license,
    search_by_license_type,
)
from centralsearch.reports import ArtifactRef, LicenseConflict, LicenseSummary
from centralsearch.search import Client

LANG3 = ArtifactRef("org.apache.commons", "commons-lang3", "3.12.0")
JUNIT = ArtifactRef("junit", "junit", "4.13.2")
SLF4J = ArtifactRef("org.slf4j", "slf4j-api", "1.7.36")
GPL_LIB = ArtifactRef("org.example", "gpl-lib", "1.0")
BROKEN = ArtifactRef("org.broken", "broken", "1.0")

LICENSES = {
    LANG3: ["Apache-2.0"],
    JUNIT: ["EPL-1.0"],
    SLF4J: ["MIT"],
    GPL_LIB: ["GPL-2.0"],
}


def _params(url):
    return {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}


def _coords(q):
    parts = dict(part.partition(":")[::2] for part in q.split("+AND+"))
    return parts["g"], parts["a"], parts["v"]


def make_client(licenses=LICENSES):
    calls = []

    def transport(url):
        params = _params(url)
        calls.append(params)
        g, a, v = _coords(params["q"])
        if g == BROKEN.group_id:
            return 500, b"boom"
        ref = ArtifactRef(g, a, v)
        if ref not in licenses:
            body = {"response": {"numFound": 0, "start": 0, "docs": []}}
        else:
            doc = {"g": g, "a": a, "v": v, "licenseList": licenses[ref] + [42]}
            body = {"response": {"numFound": 1, "start": 0, "docs": [doc]}}
        return 200, json.dumps(body).encode()

    return Client("http://search.example.com", transport=transport), calls


@pytest.mark.parametrize(
    "license1, license2, compatible, reason",
    [
        ("MIT", "MIT", True, "相同的许可证总是兼容的"),
        ("GPL-2.0", "Apache-2.0", False, "GPL-2.0不兼容Apache-2.0"),
        ("GPL-3.0", "CDDL-1.0", False, "GPL-3.0不兼容CDDL-1.0"),
        ("MIT", "GPL-3.0", True, "宽松许可证通常兼容其他许可证"),
        ("MIT", "BSD-3-Clause", True, "宽松许可证通常兼容其他许可证"),
    ],
)
def test_check_license_compatibility(license1, license2, compatible, reason):
    assert check_license_compatibility(license1, license2) == (compatible, reason)


def test_check_license_compatibility_gpl_with_unknown_license():
    assert check_license_compatibility("EPL-2.0", "GPL-3.0") == (False, "GPL-3.0不兼容EPL-2.0")


def test_check_license_compatibility_undecided():
    assert check_license_compatibility("EPL-2.0", "MPL-2.0") == (
        True,
        "未检测到明确的不兼容性，但请咨询法律专家",
    )


def test_license_predicates():
    assert is_gpl("GPL-3.0") and not is_gpl("LGPL-3.0")
    assert is_compatible_with_gpl("LGPL-2.0") and not is_compatible_with_gpl("Apache-2.0")
    assert is_permissive_license("Apache-2.0") and not is_permissive_license("GPL-2.0")


@pytest.mark.parametrize(
    "license_type, category",
    [
        ("GPL-3.0", LicenseCategory.COPYLEFT),
        ("LGPL-3.0", LicenseCategory.COPYLEFT),
        ("MIT", LicenseCategory.PERMISSIVE),
        (LicenseType.EPL, LicenseCategory.PERMISSIVE),
    ],
)
def test_determine_license_category(license_type, category):
    assert determine_license_category(license_type) is category


def test_parse_license():
    info = parse_license("MIT")
    assert (info.name, info.type, info.category) == ("MIT", "MIT", "permissive")
    assert info.url.endswith("/licenses/MIT")


def test_find_conflicts_gpl_first_reports_twice():
    from centralsearch.reports import LicenseInfo

    found = {GPL_LIB: [LicenseInfo(type="GPL-2.0")], LANG3: [LicenseInfo(type="Apache-2.0")]}
    expected = LicenseConflict("GPL-2.0", "Apache-2.0", "GPL-2.0不兼容Apache-2.0")
    assert find_conflicts(found) == [expected, expected]


def test_find_conflicts_apache_first_reports_once():
    from centralsearch.reports import LicenseInfo

    found = {LANG3: [LicenseInfo(type="Apache-2.0")], GPL_LIB: [LicenseInfo(type="GPL-2.0")]}
    assert find_conflicts(found) == [
        LicenseConflict("GPL-2.0", "Apache-2.0", "GPL-2.0不兼容Apache-2.0")
    ]


def test_find_conflicts_compatible_licenses():
    from centralsearch.reports import LicenseInfo

    found = {SLF4J: [LicenseInfo(type="MIT")], GPL_LIB: [LicenseInfo(type="GPL-3.0")]}
    assert find_conflicts(found) == []


def test_get_component_licenses():
    client, calls = make_client()
    licenses = get_component_licenses(client, *LANG3.__dict__.values())
    assert [lic.type for lic in licenses] == ["Apache-2.0"]
    assert calls[0]["q"] == "g:org.apache.commons+AND+a:commons-lang3+AND+v:3.12.0"


def test_get_component_licenses_not_found():
    client, _ = make_client()
    with pytest.raises(ComponentNotFound, match="org.none:none:1.0"):
        get_component_licenses(client, "org.none", "none", "1.0")


def test_get_component_licenses_http_error():
    client, _ = make_client()
    with pytest.raises(HTTPError) as info:
        get_component_licenses(client, BROKEN.group_id, BROKEN.artifact_id, BROKEN.version)
    assert info.value.status_code == 500


def test_search_by_license_type():
    def transport(url):
        params = _params(url)
        assert params["q"] == "l:Apache-2.0"
        assert params["rows"] == "7"
        docs = [{"g": "org.a", "a": "x", "v": "1"}, {"g": "org.b", "a": 3}]
        return 200, json.dumps({"response": {"numFound": 2, "docs": docs}}).encode()

    client = Client("http://search.example.com", transport=transport)
    refs = search_by_license_type(client, LicenseType.APACHE2, 7)
    assert refs == [ArtifactRef("org.a", "x", "1"), ArtifactRef("org.b", "", "")]


def test_get_popular_licenses():
    seen = {}

    def transport(url):
        seen.update(_params(url))
        body = {
            "response": {"numFound": 10, "docs": []},
            "facet_counts": {"facet_fields": {"l": ["Apache-2.0", 30, "MIT", 25.0, 7, 3]}},
        }
        return 200, json.dumps(body).encode()

    client = Client("http://search.example.com", transport=transport)
    assert get_popular_licenses(client, 5) == {"Apache-2.0": 30, "MIT": 25}
    assert seen["q"] == "*:*"
    assert seen["rows"] == "0"
    assert (seen["facet"], seen["facet.field"], seen["facet.limit"]) == ("true", "l", "5")


def test_find_license_conflicts_empty():
    client, calls = make_client()
    assert find_license_conflicts(client, []) == LicenseSummary()
    assert calls == []


def test_find_license_conflicts_statistics():
    client, _ = make_client()
    summary = find_license_conflicts(client, [GPL_LIB, LANG3, SLF4J, BROKEN])
    assert summary.total_artifacts == 4
    assert summary.license_distribution == {"GPL-2.0": 1, "Apache-2.0": 1, "MIT": 1}
    assert summary.category_distribution == {"copyleft": 1, "permissive": 2}
    assert summary.artifacts_by_license["MIT"] == [SLF4J]
    assert len(summary.potential_conflicts) == 2


def test_filter_by_license_type():
    client, _ = make_client()
    compliant, non_compliant = filter_by_license_type(
        client, [LANG3, JUNIT, SLF4J, BROKEN], ["Apache-2.0", "MIT"]
    )
    assert compliant == [LANG3, SLF4J]
    assert non_compliant == [JUNIT, BROKEN]


def test_filter_by_license_type_empty():
    client, _ = make_client()
    assert filter_by_license_type(client, [], ["MIT"]) == ([], [])


def test_generate_license_report():
    client, _ = make_client()
    artifacts = [LANG3, JUNIT, SLF4J]
    report = generate_license_report(client, artifacts)
    assert report.total_components == len(artifacts)
    assert report.license_count == 3
    assert report.conflict_count == 0
    assert report.license_distribution == {"Apache-2.0": 1, "EPL-1.0": 1, "MIT": 1}
    assert [c.unknown for c in report.component_licenses] == [False, False, False]
    assert report.recommendations[0] == "未发现明显的许可证冲突，合规性良好"


def test_generate_license_report_risk_and_unknown():
    client, _ = make_client()
    report = generate_license_report(client, [GPL_LIB, LANG3, BROKEN])
    assert report.conflict_count == 2
    assert report.risk_assessment.high_risk_count == 2
    assert report.risk_assessment.low_risk_count == 0
    assert report.component_licenses[2].unknown is True
    assert report.component_licenses[2].licenses == []
    assert "项目中包含GPL许可证，如果进行商业分发，需要确保整个项目符合GPL要求" in (
        report.recommendations
    )


def test_generate_recommendations_clean():
    assert generate_recommendations(LicenseSummary()) == [
        "未发现明显的许可证冲突，合规性良好",
        "定期更新依赖并检查许可证变更",
        "确保所有依赖的许可证条款都被正确遵守",
    ]


def test_generate_recommendations_many_conflicts_and_lgpl():
    conflicts = [LicenseConflict("a", "b", "r")] * 6
    summary = LicenseSummary(
        license_distribution={"LGPL-3.0": 1}, potential_conflicts=conflicts
    )
    assert generate_recommendations(summary) == [
        "存在大量许可证冲突，建议进行详细的法律审查",
        "项目中包含LGPL许可证，需要注意动态链接相关要求",
        "定期更新依赖并检查许可证变更",
        "确保所有依赖的许可证条款都被正确遵守",
    ]


def test_generate_recommendations_some_conflicts():
    summary = LicenseSummary(potential_conflicts=[LicenseConflict("a", "b", "r")])
    assert generate_recommendations(summary)[0] == "存在一些许可证冲突，请关注冲突详情"