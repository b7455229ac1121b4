"""InfluxDB 1.x HTTP API client.

Writes use the ``/write`` endpoint (line protocol, one point per line) and
queries the ``/query`` endpoint.  Two flavours share the request building and
response interpretation:

  • ``InfluxDBClient``       blocking, over ``httpx.Client``
  • ``AsyncInfluxDBClient``  ``async``, over ``httpx.AsyncClient``

Failure model
─────────────
  • Invalid arguments raise ``InfluxDBValidationError`` before any request is sent.
  • Request-time failures (refused connection, timeouts, undecodable bodies,
    redirect loops, ...) raise ``InfluxDBTransportError``.
  • A write succeeds only on HTTP 204; anything else is ``InfluxDBWriteError``.
  • A query fails on a non-2xx status, an unparsable body, *or* a 2xx body that
    carries an ``error`` string.  Per-statement errors inside ``results`` are
    returned to the caller untouched.

Nothing is retried here; retries and timeouts belong to the httpx transport.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from types import TracebackType
from typing import Any

import httpx
from pydantic import ValidationError

from influxdb_http.exceptions import (
    InfluxDBQueryParseError,
    InfluxDBQueryResponseError,
    InfluxDBQueryStatusError,
    InfluxDBTransportError,
    InfluxDBValidationError,
    InfluxDBWriteError,
)
from influxdb_http.line_protocol import DataPoint
from influxdb_http.models import QueryResult, decode_query_response

logger = logging.getLogger(__name__)

NO_CONTENT_STATUS_CODE = 204
TEXT_PLAIN = "text/plain; charset=utf-8"


class _BaseInfluxDBClient:
    """Request construction and response handling common to both clients."""

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        *,
        integer_suffix: bool = False,
    ) -> None:
        if not url:
            raise InfluxDBValidationError("url can't be None or empty")
        self._url = url.rstrip("/")
        self._auth: tuple[str, str] | None = (username, password or "") if username else None
        self._integer_suffix = integer_suffix

    @property
    def url(self) -> str:
        return self._url

    # ── Request building ─────────────────────────────────────────────────────

    def _build_write_request(
        self,
        http: httpx.Client | httpx.AsyncClient,
        database: str,
        points: Iterable[DataPoint] | None,
        retention_policy: str | None,
    ) -> httpx.Request:
        if not database:
            raise InfluxDBValidationError("database can't be None or empty")
        point_list = list(points) if points is not None else []
        if not point_list:
            raise InfluxDBValidationError("points must contain at least one DataPoint")

        # All points are written with the precision of the first one.
        params: dict[str, str] = {
            "db": database,
            "precision": point_list[0].precision.value,
        }
        if retention_policy is not None:
            params["rp"] = retention_policy

        body = "\n".join(p.line_protocol(self._integer_suffix) for p in point_list)
        request = http.build_request(
            "POST",
            f"{self._url}/write",
            params=params,
            headers={"Content-Type": TEXT_PLAIN},
            content=body.encode(),
        )
        logger.debug(
            "InfluxDB write request: %s %s (%d point(s))",
            request.method,
            request.url,
            len(point_list),
        )
        return request

    def _build_query_request(
        self,
        http: httpx.Client | httpx.AsyncClient,
        database: str,
        statement: str,
    ) -> httpx.Request:
        if not database:
            raise InfluxDBValidationError("database can't be None or empty")
        if not statement:
            raise InfluxDBValidationError("query can't be None or empty")

        request = http.build_request(
            "GET",
            f"{self._url}/query",
            params={"db": database, "q": statement},
        )
        logger.debug("InfluxDB query request: %s %s", request.method, request.url)
        return request

    def _send_kwargs(self) -> dict[str, Any]:
        # Without credentials, leave any auth configured on an injected client alone.
        return {"auth": self._auth} if self._auth is not None else {}

    # ── Response handling ────────────────────────────────────────────────────

    @staticmethod
    def _transport_error(request: httpx.Request, exc: httpx.RequestError) -> InfluxDBTransportError:
        return InfluxDBTransportError(
            f"InfluxDB request {request.method} {request.url} failed: {exc!r}"
        )

    @staticmethod
    def _check_write_response(resp: httpx.Response) -> None:
        logger.debug("InfluxDB write response: HTTP %s", resp.status_code)
        if resp.status_code != NO_CONTENT_STATUS_CODE:
            logger.debug(
                "Expected HTTP %s but got %s in response to InfluxDB write request.",
                NO_CONTENT_STATUS_CODE,
                resp.status_code,
            )
            raise InfluxDBWriteError(resp.status_code, resp.text)

    @staticmethod
    def _parse_query_response(resp: httpx.Response) -> list[QueryResult]:
        logger.debug("InfluxDB query response: HTTP %s", resp.status_code)
        body = resp.text
        try:
            parsed = decode_query_response(body)
        except ValidationError as exc:
            if not resp.is_success:
                logger.debug(
                    "InfluxDB query returned HTTP %s with undecodable body.", resp.status_code
                )
                raise InfluxDBQueryStatusError(
                    resp.status_code, body or resp.reason_phrase
                ) from exc
            logger.debug("InfluxDB query returned HTTP %s with malformed body.", resp.status_code)
            raise InfluxDBQueryParseError(
                resp.status_code, f"Malformed query response: {exc}"
            ) from exc

        if not resp.is_success:
            logger.debug(
                "Expected a success status but got HTTP %s in response to InfluxDB query.",
                resp.status_code,
            )
            raise InfluxDBQueryStatusError(
                resp.status_code, parsed.error if parsed.error is not None else body
            )
        # A 2xx status is not enough: InfluxDB reports some failures in the body.
        if parsed.error is not None:
            logger.debug("InfluxDB query returned HTTP %s with error: %s", resp.status_code, parsed.error)
            raise InfluxDBQueryResponseError(resp.status_code, parsed.error)
        return list(parsed.results)


class InfluxDBClient(_BaseInfluxDBClient):
    """Blocking client for the InfluxDB 1.x HTTP API.

    Instances hold no per-call state and may be shared between threads.  If
    *http_client* is given it is used as the transport and is not closed by
    ``close()``.
    """

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 10.0,
        verify_tls: bool = True,
        integer_suffix: bool = False,
        http_client: httpx.Client | None = None,
    ) -> None:
        super().__init__(url, username, password, integer_suffix=integer_suffix)
        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.Client(
            timeout=timeout, verify=verify_tls
        )

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> InfluxDBClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ── Write ────────────────────────────────────────────────────────────────

    def write_point(
        self, database: str, point: DataPoint, retention_policy: str | None = None
    ) -> None:
        """Write a single point.  See ``write_points``."""
        self.write_points(database, [point], retention_policy)

    def write_points(
        self,
        database: str,
        points: Sequence[DataPoint],
        retention_policy: str | None = None,
    ) -> None:
        """Write *points* to *database* in one request.

        The precision of the first point is used for the whole request, so
        all points should share a precision.

        Raises:
            InfluxDBValidationError: *database* is empty or *points* is empty.
            InfluxDBTransportError:  the server could not be reached.
            InfluxDBWriteError:      the server did not answer 204.
        """
        request = self._build_write_request(self._http, database, points, retention_policy)
        resp = self._send(request)
        self._check_write_response(resp)

    # ── Query ────────────────────────────────────────────────────────────────

    def query(self, database: str, statement: str) -> list[QueryResult]:
        """Run *statement* against *database* and return its results.

        Raises:
            InfluxDBValidationError: *database* or *statement* is empty.
            InfluxDBTransportError:  the server could not be reached.
            InfluxDBQueryError:      one of its subclasses, see the module docstring.
        """
        request = self._build_query_request(self._http, database, statement)
        resp = self._send(request)
        return self._parse_query_response(resp)

    def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            return self._http.send(request, **self._send_kwargs())
        except httpx.RequestError as exc:
            raise self._transport_error(request, exc) from exc


class AsyncInfluxDBClient(_BaseInfluxDBClient):
    """``async`` counterpart of ``InfluxDBClient`` with the same contract."""

    def __init__(
        self,
        url: str,
        username: str | None = None,
        password: str | None = None,
        *,
        timeout: float = 10.0,
        verify_tls: bool = True,
        integer_suffix: bool = False,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(url, username, password, integer_suffix=integer_suffix)
        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.AsyncClient(
            timeout=timeout, verify=verify_tls
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> AsyncInfluxDBClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def write_point(
        self, database: str, point: DataPoint, retention_policy: str | None = None
    ) -> None:
        await self.write_points(database, [point], retention_policy)

    async def write_points(
        self,
        database: str,
        points: Sequence[DataPoint],
        retention_policy: str | None = None,
    ) -> None:
        request = self._build_write_request(self._http, database, points, retention_policy)
        resp = await self._send(request)
        self._check_write_response(resp)

    async def query(self, database: str, statement: str) -> list[QueryResult]:
        request = self._build_query_request(self._http, database, statement)
        resp = await self._send(request)
        return self._parse_query_response(resp)

    async def _send(self, request: httpx.Request) -> httpx.Response:
        try:
            return await self._http.send(request, **self._send_kwargs())
        except httpx.RequestError as exc:
            raise self._transport_error(request, exc) from exc
