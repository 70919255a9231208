"""Errors raised for failed HTTP requests and for error payloads sent by the API."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


class HTTPError(Exception):
    """An HTTP request that came back with an error status code."""

    def __init__(self, status_code: int, message: str = "", url: str = "") -> None:
        super().__init__(status_code, message, url)
        self.status_code = status_code
        self.message = message
        self.url = url

    def __str__(self) -> str:
        return f"HTTP错误 {self.status_code}: {self.message} (URL: {self.url})"


class APIError(Exception):
    """An error reported by the API itself, identified by a code."""

    def __init__(self, code: str = "", message: str = "") -> None:
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"API错误 [{self.code}]: {self.message}"


@dataclass
class ErrorResponse:
    """The body of an error response returned by the API."""

    status: int = 0
    error: str = ""
    message: str = ""
    details: APIError | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ErrorResponse:
        details = data.get("details")
        return cls(
            status=int(data.get("status") or 0),
            error=str(data.get("error") or ""),
            message=str(data.get("message") or ""),
            details=(
                APIError(str(details.get("code") or ""), str(details.get("message") or ""))
                if details
                else None
            ),
        )