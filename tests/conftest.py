"""Shared pytest fixtures and helpers.

The HTTP transport is replaced by ``httpx.MockTransport`` so tests run without
a live InfluxDB.  ``RecordingTransport`` keeps every request it sees and
answers with a canned response (or raises a canned exception).
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from typing import Any

import httpx
import pytest

from influxdb_http.clients.influxdb import InfluxDBClient
from influxdb_http.line_protocol import DataPoint, TimestampPrecision

# ── Constants ─────────────────────────────────────────────────────────────────

BASE_URL = "http://influx.test:8086"
DATABASE = "telemetry"
RETENTION_POLICY = "two_weeks"
USERNAME = "writer"
PASSWORD = "s3cret"

# ── Helpers ───────────────────────────────────────────────────────────────────


class RecordingTransport:
    """Callable handler for ``httpx.MockTransport`` that records requests.

    Answers 204 until told otherwise with ``respond_with`` or ``fail_with``.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._lock = threading.Lock()
        self._response_kwargs: dict[str, Any] = {"status_code": 204}
        self._error: Exception | None = None

    def respond_with(self, status_code: int, **kwargs: Any) -> None:
        """Answer every request with ``httpx.Response(status_code, **kwargs)``."""
        self._response_kwargs = {"status_code": status_code, **kwargs}
        self._error = None

    def fail_with(self, error: Exception) -> None:
        self._error = error

    def __call__(self, request: httpx.Request) -> httpx.Response:
        request.read()
        with self._lock:
            self.requests.append(request)
        if self._error is not None:
            raise self._error
        return httpx.Response(**self._response_kwargs)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


def make_point(
    measurement: str = "m",
    value: Any = 1,
    timestamp: int = 1000,
    precision: TimestampPrecision = TimestampPrecision.MILLISECONDS,
) -> DataPoint:
    """A point that encodes to ``"<measurement> f=<value> <timestamp>"``."""
    return (
        DataPoint.builder(measurement)
        .with_field("f", value)
        .with_timestamp(timestamp, precision)
        .build()
    )


# ── Fixtures ──────────────────────────────────────────────────────────────────


@pytest.fixture()
def recorder() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture()
def client(recorder: RecordingTransport) -> Iterator[InfluxDBClient]:
    http = httpx.Client(transport=httpx.MockTransport(recorder))
    with InfluxDBClient(BASE_URL, http_client=http) as influx:
        yield influx
    http.close()


@pytest.fixture()
def auth_client(recorder: RecordingTransport) -> Iterator[InfluxDBClient]:
    http = httpx.Client(transport=httpx.MockTransport(recorder))
    with InfluxDBClient(BASE_URL, USERNAME, PASSWORD, http_client=http) as influx:
        yield influx
    http.close()
