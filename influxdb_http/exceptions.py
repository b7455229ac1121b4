"""Exception hierarchy for the InfluxDB HTTP client.

Every error raised by this package derives from ``InfluxDBError``.  Caller
mistakes (``InfluxDBValidationError``) are raised before any network I/O;
everything else describes what happened on the wire.
"""

from __future__ import annotations


class InfluxDBError(Exception):
    """Base class for all InfluxDB client errors."""


class InfluxDBValidationError(InfluxDBError):
    """Raised when the caller passes invalid arguments (empty database, no fields, ...)."""


class InfluxDBEncodingError(InfluxDBError):
    """Raised when a value cannot be rendered as a line-protocol field."""


class InfluxDBTransportError(InfluxDBError):
    """Raised when the server could not be reached (connection refused, I/O failure, timeout)."""


class InfluxDBWriteError(InfluxDBError):
    """Raised when InfluxDB answers a write request with anything other than 204."""

    MESSAGE_FORMAT = (
        "Invalid response received when attempting to write data point to InfluxDB: "
        "statusCode={status_code}, responseBody={response_body}"
    )

    def __init__(self, status_code: int, response_body: str) -> None:
        super().__init__(
            self.MESSAGE_FORMAT.format(status_code=status_code, response_body=response_body)
        )
        self.status_code = status_code
        self.response_body = response_body


class InfluxDBQueryError(InfluxDBError):
    """Raised when a query fails.

    Use the subclasses to tell the failure sources apart:
    ``InfluxDBQueryStatusError`` (HTTP status), ``InfluxDBQueryResponseError``
    (error embedded in a successful response) and ``InfluxDBQueryParseError``
    (body could not be decoded).
    """

    MESSAGE_FORMAT = (
        "Invalid response received when attempting to query InfluxDB: "
        "statusCode={status_code}, responseBody={message}"
    )

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(self.MESSAGE_FORMAT.format(status_code=status_code, message=message))
        self.status_code = status_code
        self.message = message


class InfluxDBQueryStatusError(InfluxDBQueryError):
    """The query endpoint returned a non-success HTTP status."""


class InfluxDBQueryResponseError(InfluxDBQueryError):
    """The server returned a success status but reported an error in the body."""


class InfluxDBQueryParseError(InfluxDBQueryError):
    """The response body was empty or not a valid query response."""
