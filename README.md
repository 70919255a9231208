# centralsearch

A small client for a Maven-style artifact search service (the Solr-style
`/solrsearch/select` endpoint and the `/api/security/...` endpoints). It
uses only the standard library.

It builds search queries, pages through results, and offers helpers for
common questions about Java artifacts:

- which versions of an artifact exist, and which is the latest;
- which artifacts carry a tag, or match a SHA-1 checksum or prefix;
- which licences a component uses, and whether two licences conflict;
- what security rating and known vulnerabilities a version has.

Python 3.10 or later is required.

## Building queries

`centralsearch.query.Query` is a dataclass describing what to search for:
`group_id`, `artifact_id`, `version`, `tags`, `sha1`, `class_name`,
`fully_qualified_class_name`, `packaging`, `classifier` and `custom_query`.
`Query.to_request_param_value()` joins the set fields with `AND` and
URL-encodes the result. When `custom_query` is set it replaces all other
fields; set it to plain text for a free-text search.

`make_dependency_query(group_id, artifact_id)` and
`make_license_query(license)` return ready-made query strings such as
`d:junit:junit` and `l:MIT`.

`centralsearch.search_request.SearchRequest` wraps a query with paging
(`start`, `limit`, default 200), `core`, sorting, facets and extra
parameters, and renders the URL query string:

```python
from centralsearch.query import Query
from centralsearch.search_request import SearchRequest

request = SearchRequest(query=Query(group_id="junit", artifact_id="junit"))
request.set_sort("timestamp", False)
request.add_custom_param("fl", "id,g,a,latestVersion")
print(request.to_request_params())
# q=g%3Ajunit+AND+a%3Ajunit&rows=200&wt=json&start=0&sort=timestamp+desc&fl=id,g,a,latestVersion
```

`enable_facet(*fields)` adds `facet=true` and one `facet.field` per field.

## Running searches

`centralsearch.search.Client(base_url, *, transport=None, timeout=30.0)`
talks to the service. By default it sends GET requests with `urllib`; a
`transport` callable taking a URL and returning `(status_code, body_bytes)`
can be given instead, which is handy for tests.

- `Client.get_json(url)` fetches a URL and decodes its JSON body; a status
  of 400 or more raises `centralsearch.errors.HTTPError`.
- `Client.search_request(request)` runs a `SearchRequest` and returns the
  decoded JSON.
- `search_docs(client, request, doc_factory)` parses the result into a
  `centralsearch.models.Response`, building each document with
  `doc_factory` (for example `Artifact.from_dict` or `Version.from_dict`).
- `SearchIterator(client, request, doc_factory)` yields every matching
  document, fetching page after page; `to_list()` collects them.

```python
from centralsearch.search import Client
from centralsearch.versions import list_versions, get_latest_version

client = Client("https://search.example.com")
for version in list_versions(client, "com.google.inject", "guice", 20):
    print(version.version)

print(get_latest_version(client, "junit", "junit").version)
```

Wherever a helper takes a `limit`, zero or less asks for every result,
fetched page by page.

## Helpers

| Module | What it covers |
| --- | --- |
| `centralsearch.versions` | `list_versions`, `iter_versions`, `get_latest_version`, `get_version_info`, `get_versions_with_metadata`, `filter_versions`, `compare_versions` |
| `centralsearch.sha1` | `search_by_sha1`, `iter_by_sha1`, `get_first_by_sha1`, `exists_sha1`, `search_exact_sha1`, `count_by_sha1`, `search_by_sha1_prefix`, `iter_by_sha1_prefix` |
| `centralsearch.tags` | `search_by_tag`, `iter_by_tag`, `search_by_multiple_tags`, `search_artifacts_with_all_tags`, `search_by_tag_with_group_filter`, `search_by_tag_prefix`, `count_artifacts_by_tag`, `count_versions`, `get_most_used_tags`, `search_by_tag_and_sort_by_popularity` |
| `centralsearch.license` | `get_component_licenses`, `search_by_license_type`, `get_popular_licenses`, `find_license_conflicts`, `generate_license_report`, `filter_by_license_type`, `check_license_compatibility` and the offline helpers behind them |
| `centralsearch.security` | `get_security_rating`, `get_vulnerability_details`, `check_cve_impact`, `search_vulnerable_artifacts`, `find_artifacts_by_cve`, `compare_version_security`, `get_recommended_secure_version`, `batch_security_scan`, `get_vulnerability_timeline`, `get_component_vulnerability_overview`, `find_similar_vulnerable_artifacts` |
| `centralsearch.rate_limit` | `RateLimiter`, `RateLimitConfig`, `retry_with_backoff` |

Result types live in `centralsearch.models` (response envelope, `Artifact`,
`Version`, `VersionInfo`, `TagCount`, ...) and `centralsearch.reports`
(`SecurityRating`, `Vulnerability`, `ArtifactRef`, `LicenseReport`, ...).

Licence compatibility can be checked without network access; it returns a
flag and a reason (the reasons are in Chinese):

```python
from centralsearch.license import check_license_compatibility

ok, reason = check_license_compatibility("GPL-2.0", "Apache-2.0")
print(ok)  # False
```

`get_component_licenses` raises `centralsearch.license.ComponentNotFound`
when no component matches.

## Pacing and retries

`RateLimiter(config)` spaces requests to each host:
`wait_for_rate_limit(host, operation_type, cancel=None)` sleeps as needed
(2 requests per second for `"search"`, 1 for `"download"`, 5 otherwise by
default) and returns the wait in milliseconds. `stats()`,
`total_request_count(host)`, `request_count_by_type(host, operation_type)`
and `reset_stats()` report and clear the counters.

`retry_with_backoff(max_retries, initial_backoff_ms, backoff_factor,
max_backoff_ms, operation, cancel=None)` calls `operation` again when it
raises an `HTTPError` with status 429, 500, 502, 503 or 504, doubling (by
`backoff_factor`) the pause up to `max_backoff_ms`. Any other error, or the
last failed attempt, is raised. Setting the `threading.Event` passed as
`cancel` during a pause raises `OperationCancelled`.

The client does not pace or retry on its own; wrap calls with these yourself.

## What it does not do

- There is no command-line tool; the package is a library only.
- Responses are not cached.
- The group and artifact-metadata types in `centralsearch.models`
  (`GroupStatistics`, `ArtifactMetadata` and so on) are plain data classes;
  no function here fetches them.

## Running the tests

```
pip install -e ".[test]"
pytest
```