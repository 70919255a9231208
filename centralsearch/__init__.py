"""Client library for a Maven-style artifact search service: queries, paging, versions, tags, SHA-1, licence and security helpers."""

__version__ = "0.1.0"