"""Unit tests for AsyncInfluxDBClient – same contract as the blocking client."""

from __future__ import annotations

import asyncio
import base64

import httpx
import pytest

from influxdb_http.clients.influxdb import AsyncInfluxDBClient
from influxdb_http.exceptions import (
    InfluxDBQueryResponseError,
    InfluxDBTransportError,
    InfluxDBValidationError,
    InfluxDBWriteError,
)
from tests.conftest import (
    BASE_URL,
    DATABASE,
    PASSWORD,
    RETENTION_POLICY,
    USERNAME,
    RecordingTransport,
    make_point,
)


def _client(recorder: RecordingTransport, **kwargs: object) -> AsyncInfluxDBClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    return AsyncInfluxDBClient(BASE_URL, http_client=http, **kwargs)  # type: ignore[arg-type]


def test_async_write(recorder: RecordingTransport) -> None:
    async def run() -> None:
        async with _client(recorder) as influx:
            await influx.write_point(DATABASE, make_point(), retention_policy=RETENTION_POLICY)

    asyncio.run(run())
    request = recorder.last
    assert request.method == "POST"
    assert request.url.path == "/write"
    assert dict(request.url.params) == {"db": DATABASE, "precision": "ms", "rp": RETENTION_POLICY}
    assert request.content == b"m f=1 1000"


def test_async_write_failure(recorder: RecordingTransport) -> None:
    recorder.respond_with(500, text="boom")

    async def run() -> None:
        async with _client(recorder) as influx:
            await influx.write_points(DATABASE, [make_point()])

    with pytest.raises(InfluxDBWriteError) as exc_info:
        asyncio.run(run())
    assert exc_info.value.status_code == 500
    assert exc_info.value.response_body == "boom"


def test_async_credentials(recorder: RecordingTransport) -> None:
    async def run() -> None:
        async with _client(recorder, username=USERNAME, password=PASSWORD) as influx:
            await influx.write_point(DATABASE, make_point())

    asyncio.run(run())
    expected = "Basic " + base64.b64encode(f"{USERNAME}:{PASSWORD}".encode()).decode()
    assert recorder.last.headers["Authorization"] == expected


def test_async_query(recorder: RecordingTransport) -> None:
    recorder.respond_with(
        200,
        json={"results": [{"series": [{"name": "cpu", "columns": ["time", "v"], "values": [[1, 2]]}]}]},
    )

    async def run() -> list:
        async with _client(recorder) as influx:
            return await influx.query(DATABASE, "SELECT v FROM cpu")

    [result] = asyncio.run(run())
    assert result.series[0].rows() == [{"time": 1, "v": 2}]
    assert recorder.last.url.params["q"] == "SELECT v FROM cpu"


def test_async_query_embedded_error(recorder: RecordingTransport) -> None:
    recorder.respond_with(200, json={"results": [], "error": "database not found"})

    async def run() -> None:
        async with _client(recorder) as influx:
            await influx.query("missing", "SELECT 1")

    with pytest.raises(InfluxDBQueryResponseError, match="database not found"):
        asyncio.run(run())


def test_async_transport_failure(recorder: RecordingTransport) -> None:
    recorder.fail_with(httpx.ConnectError("connection refused"))

    async def run() -> None:
        async with _client(recorder) as influx:
            await influx.query(DATABASE, "SELECT 1")

    with pytest.raises(InfluxDBTransportError):
        asyncio.run(run())


def test_async_undecodable_content_encoding(recorder: RecordingTransport) -> None:
    recorder.respond_with(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all")

    async def run() -> None:
        async with _client(recorder) as influx:
            await influx.query(DATABASE, "SELECT 1")

    with pytest.raises(InfluxDBTransportError) as exc_info:
        asyncio.run(run())
    assert isinstance(exc_info.value.__cause__, httpx.DecodingError)


def test_async_redirect_loop() -> None:
    def redirect_to_self(request: httpx.Request) -> httpx.Response:
        return httpx.Response(307, headers={"Location": str(request.url)})

    async def run() -> None:
        http = httpx.AsyncClient(transport=httpx.MockTransport(redirect_to_self), follow_redirects=True)
        async with AsyncInfluxDBClient(BASE_URL, http_client=http) as influx:
            await influx.write_point(DATABASE, make_point())
        await http.aclose()

    with pytest.raises(InfluxDBTransportError) as exc_info:
        asyncio.run(run())
    assert isinstance(exc_info.value.__cause__, httpx.TooManyRedirects)
def test_async_preconditions_fail_before_io(recorder: RecordingTransport) -> None:
    async def run() -> None:
        async with _client(recorder) as influx:
            await influx.write_points("", [make_point()])

    with pytest.raises(InfluxDBValidationError):
        asyncio.run(run())
    assert recorder.requests == []


def test_async_concurrent_writes(recorder: RecordingTransport) -> None:
    async def run() -> None:
        async with _client(recorder) as influx:
            await asyncio.gather(
                *(influx.write_point(f"db{i}", make_point(f"m{i}", i, i)) for i in range(10))
            )

    asyncio.run(run())
    assert sorted(r.content for r in recorder.requests) == sorted(
        f"m{i} f={i} {i}".encode() for i in range(10)
    )
    assert {r.url.params["db"] for r in recorder.requests} == {f"db{i}" for i in range(10)}
