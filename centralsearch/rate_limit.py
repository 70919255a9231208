"""Per-host request pacing and retrying with exponential backoff."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from .errors import HTTPError

T = TypeVar("T")

_RETRIABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class OperationCancelled(Exception):
    """A wait was cut short because the cancel event was set."""


@dataclass
class RateLimitConfig:
    """Retry and pacing settings."""

    max_retries: int = 3
    initial_backoff_ms: int = 500
    max_backoff_ms: int = 10000
    backoff_factor: float = 2.0
    search_requests_per_second: int = 2
    download_requests_per_second: int = 1
    default_requests_per_second: int = 5
    enable_stats: bool = True


def _sleep(seconds: float, cancel: threading.Event | None) -> None:
    if cancel is None:
        time.sleep(seconds)
    elif cancel.wait(seconds):
        raise OperationCancelled("operation cancelled")


def is_retriable_status_code(status_code: int) -> bool:
    """True for 429 and the 5xx codes that are worth retrying."""
    return status_code in _RETRIABLE_STATUS_CODES


def should_retry_error(error: BaseException) -> bool:
    """True when ``error`` (or an error it was raised from) is a retriable HTTP error."""
    current: BaseException | None = error
    while current is not None:
        if isinstance(current, HTTPError):
            return is_retriable_status_code(current.status_code)
        current = current.__cause__
    return False


def retry_with_backoff(
    max_retries: int,
    initial_backoff_ms: int,
    backoff_factor: float,
    max_backoff_ms: int,
    operation: Callable[[], T],
    cancel: threading.Event | None = None,
) -> T:
    """Call ``operation`` until it succeeds, retrying retriable errors with growing pauses."""
    backoff = float(initial_backoff_ms)
    attempt = 0
    while True:
        if attempt > 0:
            _sleep(int(backoff) / 1000.0, cancel)
            backoff = min(backoff * backoff_factor, float(max_backoff_ms))
        try:
            return operation()
        except Exception as exc:
            if not should_retry_error(exc) or attempt >= max_retries:
                raise
        attempt += 1


class RateLimiter:
    """Spaces requests to each host according to the operation type."""

    def __init__(self, config: RateLimitConfig | None = None) -> None:
        self.config = config if config is not None else RateLimitConfig()
        self._lock = threading.Lock()
        self._last_request: dict[str, float] = {}
        self._request_counts: dict[str, dict[str, int]] = {}
        self._wait_times: dict[str, dict[str, int]] = {}
        self._total_requests: dict[str, int] = {}

    def _interval_ms(self, operation_type: str) -> int:
        if operation_type == "search":
            rps = self.config.search_requests_per_second
            fallback = 1
        elif operation_type == "download":
            rps = self.config.download_requests_per_second
            fallback = 1
        else:
            rps = self.config.default_requests_per_second
            fallback = 5
        if rps <= 0:
            rps = fallback
        return 1000 // rps

    def wait_for_rate_limit(
        self,
        host: str,
        operation_type: str,
        cancel: threading.Event | None = None,
    ) -> int:
        """Wait until a request to ``host`` is allowed; return the wait in milliseconds."""
        with self._lock:
            now = time.monotonic()
            self._request_counts.setdefault(host, {})
            if self.config.enable_stats:
                self._wait_times.setdefault(host, {})

            wait_ms = 0
            last = self._last_request.get(host)
            if last is not None:
                interval = self._interval_ms(operation_type)
                elapsed = int((now - last) * 1000)
                if elapsed < interval:
                    wait_ms = interval - elapsed
                    _sleep(wait_ms / 1000.0, cancel)

            self._last_request[host] = time.monotonic()
            if self.config.enable_stats:
                self._total_requests[host] = self._total_requests.get(host, 0) + 1
                counts = self._request_counts[host]
                counts[operation_type] = counts.get(operation_type, 0) + 1
                waits = self._wait_times[host]
                waits[operation_type] = waits.get(operation_type, 0) + wait_ms
            return wait_ms

    def stats(self) -> dict[str, Any]:
        """Request counts and wait times per host and operation."""
        if not self.config.enable_stats:
            return {"stats_enabled": False}
        with self._lock:
            hosts: dict[str, Any] = {}
            for host, total in self._total_requests.items():
                operations: dict[str, dict[str, int]] = {}
                waits = self._wait_times.get(host, {})
                for op, count in self._request_counts.get(host, {}).items():
                    data = {"count": count}
                    if op in waits:
                        data["total_wait_ms"] = waits[op]
                        if count > 0:
                            data["avg_wait_ms"] = waits[op] // count
                    operations[op] = data
                hosts[host] = {"total_requests": total, "operations": operations}
            return {"stats_enabled": True, "hosts": hosts}

    def total_request_count(self, host: str) -> int:
        """Number of requests recorded for ``host``."""
        if not self.config.enable_stats:
            return 0
        with self._lock:
            return self._total_requests.get(host, 0)

    def request_count_by_type(self, host: str, operation_type: str) -> int:
        """Number of requests of one operation type recorded for ``host``."""
        if not self.config.enable_stats:
            return 0
        with self._lock:
            return self._request_counts.get(host, {}).get(operation_type, 0)

    def reset_stats(self) -> None:
        """Forget all recorded counts and wait times."""
        with self._lock:
            self._total_requests = {}
            self._request_counts = {}
            self._wait_times = {}