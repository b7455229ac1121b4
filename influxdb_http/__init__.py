"""Client for the InfluxDB 1.x HTTP write/query API."""

from influxdb_http.clients.influxdb import AsyncInfluxDBClient, InfluxDBClient
from influxdb_http.exceptions import (
    InfluxDBEncodingError,
    InfluxDBError,
    InfluxDBQueryError,
    InfluxDBQueryParseError,
    InfluxDBQueryResponseError,
    InfluxDBQueryStatusError,
    InfluxDBTransportError,
    InfluxDBValidationError,
    InfluxDBWriteError,
)
from influxdb_http.line_protocol import (
    BoolValue,
    DataPoint,
    DataPointBuilder,
    Field,
    FloatValue,
    IntValue,
    StringValue,
    Tag,
    TimestampPrecision,
    encode,
    escape_quotes,
    escape_spaces_and_commas,
)
from influxdb_http.models import QueryResponse, QueryResult, Series

__all__ = [
    "AsyncInfluxDBClient",
    "BoolValue",
    "DataPoint",
    "DataPointBuilder",
    "Field",
    "FloatValue",
    "InfluxDBClient",
    "InfluxDBEncodingError",
    "InfluxDBError",
    "InfluxDBQueryError",
    "InfluxDBQueryParseError",
    "InfluxDBQueryResponseError",
    "InfluxDBQueryStatusError",
    "InfluxDBTransportError",
    "InfluxDBValidationError",
    "InfluxDBWriteError",
    "IntValue",
    "QueryResponse",
    "QueryResult",
    "Series",
    "StringValue",
    "Tag",
    "TimestampPrecision",
    "encode",
    "escape_quotes",
    "escape_spaces_and_commas",
]
