"""A single request to the search endpoint and its URL parameters."""

from __future__ import annotations

from dataclasses import dataclass, field

from .query import Query

SEARCH_REQUEST_LIMIT_MAX = 200


@dataclass
class SearchRequest:
    """Paging, sorting, facet and custom parameters around a query."""

    query: Query = field(default_factory=Query)
    start: int = 0
    limit: int = SEARCH_REQUEST_LIMIT_MAX
    core: str = ""
    sort_field: str = ""
    sort_ascending: bool = False
    facet_enabled: bool = False
    facet_fields: list[str] = field(default_factory=list)
    query_key: str = ""
    custom_params: dict[str, str] = field(default_factory=dict)

    def set_sort(self, field: str, ascending: bool) -> SearchRequest:
        """Sort results by ``field`` in the given direction."""
        self.sort_field = field
        self.sort_ascending = ascending
        return self

    def enable_facet(self, *args: str) -> SearchRequest:
        """Turn on faceting over the given fields."""
        self.facet_enabled = True
        self.facet_fields = list(args)
        return self

    def add_custom_param(self, key: str, value: str) -> SearchRequest:
        """Add or replace an extra URL parameter."""
        self.custom_params[key] = value
        return self

    def to_request_params(self) -> str:
        """Return the query string sent to the search endpoint."""
        parts = [
            f"q={self.query.to_request_param_value()}",
            f"rows={self.limit}",
            "wt=json",
            f"start={self.start}",
        ]
        if self.core:
            parts.append(f"core={self.core}")
        if self.sort_field:
            order = "asc" if self.sort_ascending else "desc"
            parts.append(f"sort={self.sort_field}+{order}")
        if self.facet_enabled:
            parts.append("facet=true")
            parts.extend(f"facet.field={name}" for name in self.facet_fields)
        parts.extend(f"{key}={value}" for key, value in self.custom_params.items())
        return "&".join(parts)