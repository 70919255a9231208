import json
from urllib.parse import parse_qs, urlsplit

import pytest

from centralsearch.errors import HTTPError
from centralsearch.search import Client
from centralsearch.sha1 import (
    count_by_sha1,
    exists_sha1,
    get_first_by_sha1,
    iter_by_sha1,
    iter_by_sha1_prefix,
    search_by_sha1,
    search_by_sha1_prefix,
    search_exact_sha1,
)

SHA1 = "0235ba8b489512805ac13a8f9ea77a1ca5ebe3e8"
MISSING = "abcdefabcdefabcdefabcdefabcdefabcdefabcd"


def _doc(n):
    return {"id": f"org.x:lib:{n}", "g": "org.x", "a": "lib", "v": str(n)}


def make_client(total=3, page=2, status=200, body=None):
    calls = []

    def transport(url):
        params = {k: v[0] for k, v in parse_qs(urlsplit(url).query).items()}
        calls.append(params)
        if status != 200:
            return status, b"failure"
        if body is not None:
            return 200, json.dumps(body).encode()
        start = int(params["start"])
        rows = int(params["rows"])
        count = 0 if MISSING in params["q"] else total
        end = min(count, start + min(rows, page))
        docs = [_doc(n) for n in range(start, end)]
        payload = {"response": {"numFound": count, "start": start, "docs": docs}}
        return 200, json.dumps(payload).encode()

    return Client("http://search.example.com", transport=transport), calls


def test_search_by_sha1_with_limit():
    client, calls = make_client(total=5, page=5)
    versions = search_by_sha1(client, SHA1, 5)
    assert [v.version for v in versions] == ["0", "1", "2", "3", "4"]
    assert calls == [
        {"q": f"1:{SHA1}", "rows": "5", "wt": "json", "start": "0"},
    ]


def test_search_by_sha1_without_limit_pages_through_results():
    client, calls = make_client(total=3, page=2)
    versions = search_by_sha1(client, SHA1, 0)
    assert [v.id for v in versions] == ["org.x:lib:0", "org.x:lib:1", "org.x:lib:2"]
    assert [c["start"] for c in calls] == ["0", "2"]
    assert all(c["rows"] == "200" for c in calls)


def test_iter_by_sha1_yields_versions():
    client, _ = make_client(total=2, page=2)
    assert [v.group_id for v in iter_by_sha1(client, SHA1)] == ["org.x", "org.x"]


def test_get_first_by_sha1():
    client, calls = make_client()
    first = get_first_by_sha1(client, SHA1)
    assert first.version == "0"
    assert calls[0]["rows"] == "1"


def test_get_first_by_sha1_missing():
    client, _ = make_client()
    assert get_first_by_sha1(client, MISSING) is None


@pytest.mark.parametrize("sha1, expected", [(SHA1, True), (MISSING, False)])
def test_exists_sha1(sha1, expected):
    client, _ = make_client()
    assert exists_sha1(client, sha1) is expected


def test_search_exact_sha1():
    client, calls = make_client(total=2, page=5)
    versions = search_exact_sha1(client, SHA1)
    assert len(versions) == 2
    assert calls[0]["exact"] == "true"
    assert calls[0]["rows"] == "200"


def test_count_by_sha1():
    client, calls = make_client(total=17)
    assert count_by_sha1(client, SHA1) == 17
    assert calls[0]["rows"] == "0"


def test_empty_response_body_is_an_error():
    client, _ = make_client(body={"responseHeader": {"status": 0}})
    with pytest.raises(ValueError, match="empty response body"):
        search_by_sha1(client, SHA1, 5)
    with pytest.raises(ValueError, match="empty response body"):
        count_by_sha1(client, SHA1)


def test_http_error_propagates():
    client, _ = make_client(status=503)
    with pytest.raises(HTTPError) as info:
        search_exact_sha1(client, SHA1)
    assert info.value.status_code == 503


def test_search_by_sha1_prefix_empty():
    client, calls = make_client()
    with pytest.raises(ValueError):
        search_by_sha1_prefix(client, "", 10)
    assert calls == []


@pytest.mark.parametrize("length", [5, 10, 20])
def test_search_by_sha1_prefix_uses_wildcard(length):
    client, calls = make_client(total=3, page=10)
    prefix = SHA1[:length]
    versions = search_by_sha1_prefix(client, prefix, 10)
    assert len(versions) == 3
    assert calls[0]["q"] == f"1:{prefix}*"
    assert calls[0]["rows"] == "10"


def test_search_by_sha1_prefix_full_sha1_searches_exactly():
    client, calls = make_client(total=1, page=10)
    versions = search_by_sha1_prefix(client, SHA1, 10)
    assert [v.version for v in versions] == ["0"]
    assert calls[0]["q"] == f"1:{SHA1}"


def test_search_by_sha1_prefix_without_limit_iterates():
    client, calls = make_client(total=3, page=2)
    versions = search_by_sha1_prefix(client, SHA1[:5], 0)
    assert len(versions) == 3
    assert [c["start"] for c in calls] == ["0", "2"]
    assert all(c["q"] == f"1:{SHA1[:5]}*" for c in calls)


def test_iter_by_sha1_prefix_full_sha1():
    client, calls = make_client(total=1, page=2)
    assert [v.version for v in iter_by_sha1_prefix(client, SHA1)] == ["0"]
    assert calls[0]["q"] == f"1:{SHA1}"