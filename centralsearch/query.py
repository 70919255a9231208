"""Query conditions for the search endpoint and helpers for special query strings."""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote_plus

Classifier = str
Packaging = str


@dataclass
class Query:
    """Search conditions; a custom query, when set, replaces all other fields.

    Free text search is done by setting ``custom_query`` to the text.
    """

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    tags: str = ""
    sha1: str = ""
    class_name: str = ""
    fully_qualified_class_name: str = ""
    packaging: Packaging = ""
    classifier: Classifier = ""
    custom_query: str = ""

    def to_request_param_value(self) -> str:
        """Return the URL-encoded value of the ``q`` parameter."""
        if self.custom_query:
            return quote_plus(self.custom_query)
        fields = (
            ("g", self.group_id),
            ("a", self.artifact_id),
            ("v", self.version),
            ("tags", self.tags),
            ("1", self.sha1),
            ("c", self.class_name),
            ("fc", self.fully_qualified_class_name),
            ("p", self.packaging),
            ("l", self.classifier),
        )
        conditions = [f"{prefix}:{value}" for prefix, value in fields if value]
        return quote_plus(" AND ".join(conditions))


@dataclass
class AdvancedSearchOptions:
    """Coordinates used to narrow an advanced search."""

    group_id: str = ""
    artifact_id: str = ""
    version: str = ""
    packaging: Packaging = ""
    classifier: Classifier = ""


def make_dependency_query(group_id: str, artifact_id: str) -> str:
    """Build a query string matching artifacts that depend on the given coordinates."""
    if group_id and artifact_id:
        return f"d:{group_id}:{artifact_id}"
    if group_id:
        return f"d:{group_id}"
    if artifact_id:
        return f"d:*:{artifact_id}"
    return ""


def make_license_query(license: str) -> str:
    """Build a query string matching artifacts under the given license."""
    return f"l:{license}"