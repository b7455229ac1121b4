"""InfluxDB line-protocol encoding.

A point is rendered as three space-separated sections::

    <measurement>[,<tag>=<value>...] <field>=<value>[,<field>=<value>...] <timestamp>

Measurement names, tag keys, tag values and field keys have their spaces and
commas backslash-escaped.  String field values are double-quoted with inner
quotes escaped.  Backslashes are never escaped, which mirrors the server's
own (non-recursive) escaping rules.

Field values are a closed set of variants (``StringValue``, ``IntValue``,
``FloatValue``, ``BoolValue``); anything else is rejected when the field is
built, so rendering never has to deal with an unknown type.
"""

from __future__ import annotations

import math
import time
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationInfo,
    field_validator,
)

from influxdb_http.exceptions import InfluxDBEncodingError, InfluxDBValidationError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# ── Escaping ──────────────────────────────────────────────────────────────────


def escape_spaces_and_commas(raw: str) -> str:
    """Return *raw* with every space and comma prefixed by a backslash."""
    return _escape_with_backslashes(raw, " ", ",")


def escape_quotes(raw: str) -> str:
    """Return *raw* with every double quote prefixed by a backslash."""
    return _escape_with_backslashes(raw, '"')


def _escape_with_backslashes(raw: str, *targets: str) -> str:
    # Targets are single characters and the replacement only adds "\", so one
    # replace per target is the same as a single left-to-right pass.
    for target in targets:
        raw = raw.replace(target, "\\" + target)
    return raw


# ── Timestamp precision ───────────────────────────────────────────────────────


class TimestampPrecision(str, Enum):
    """Unit in which a point's timestamp is written; the value is the wire code."""

    NANOSECONDS = "n"
    MICROSECONDS = "u"
    MILLISECONDS = "ms"
    SECONDS = "s"
    MINUTES = "m"
    HOURS = "h"

    @property
    def nanos(self) -> int:
        """Number of nanoseconds in one unit of this precision."""
        return _NANOS_PER_UNIT[self]


_NANOS_PER_UNIT: dict[TimestampPrecision, int] = {
    TimestampPrecision.NANOSECONDS: 1,
    TimestampPrecision.MICROSECONDS: 1_000,
    TimestampPrecision.MILLISECONDS: 1_000_000,
    TimestampPrecision.SECONDS: 1_000_000_000,
    TimestampPrecision.MINUTES: 60 * 1_000_000_000,
    TimestampPrecision.HOURS: 3_600 * 1_000_000_000,
}


def _as_precision(value: TimestampPrecision | str) -> TimestampPrecision:
    try:
        return TimestampPrecision(value)
    except ValueError as exc:
        raise InfluxDBValidationError(f"Unknown timestamp precision: {value!r}") from exc


def _datetime_to_ns(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


# ── Tags ──────────────────────────────────────────────────────────────────────


class Tag(BaseModel):
    """An indexed string key/value pair in the key section of a point."""

    model_config = ConfigDict(frozen=True)

    name: StrictStr
    value: StrictStr

    @field_validator("name", "value")
    @classmethod
    def _not_empty(cls, value: str, info: ValidationInfo) -> str:
        if not value:
            raise InfluxDBValidationError(f"tag {info.field_name} can't be empty")
        return value

    def line_protocol(self) -> str:
        """Render as ``name=value``; tag values are never quoted."""
        return f"{escape_spaces_and_commas(self.name)}={escape_spaces_and_commas(self.value)}"


# ── Field values ──────────────────────────────────────────────────────────────


class _FieldValue(BaseModel):
    model_config = ConfigDict(frozen=True)


class StringValue(_FieldValue):
    kind: Literal["string"] = "string"
    value: StrictStr

    def line_protocol(self, integer_suffix: bool = False) -> str:
        return f'"{escape_quotes(self.value)}"'


class IntValue(_FieldValue):
    kind: Literal["int"] = "int"
    value: StrictInt

    def line_protocol(self, integer_suffix: bool = False) -> str:
        return f"{self.value}i" if integer_suffix else str(self.value)


class FloatValue(_FieldValue):
    kind: Literal["float"] = "float"
    value: StrictFloat

    @field_validator("value")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise InfluxDBEncodingError(f"Float field values must be finite, got {value!r}")
        return value

    def line_protocol(self, integer_suffix: bool = False) -> str:
        return repr(self.value)


class BoolValue(_FieldValue):
    kind: Literal["bool"] = "bool"
    value: StrictBool

    def line_protocol(self, integer_suffix: bool = False) -> str:
        return "true" if self.value else "false"


FieldValue = Union[StringValue, IntValue, FloatValue, BoolValue]


def field_value(value: Any) -> FieldValue:
    """Wrap a plain Python value in the matching field-value variant.

    Raises:
        InfluxDBValidationError: if *value* is ``None``.
        InfluxDBEncodingError:   if *value* is not a str, int, float or bool.
    """
    if isinstance(value, _FieldValue):
        return value  # type: ignore[return-value]
    if value is None:
        raise InfluxDBValidationError("field value can't be None")
    # bool first: it is a subclass of int.
    if isinstance(value, bool):
        return BoolValue(value=value)
    if isinstance(value, int):
        return IntValue(value=value)
    if isinstance(value, float):
        return FloatValue(value=value)
    if isinstance(value, str):
        return StringValue(value=value)
    raise InfluxDBEncodingError(f"Invalid field value type: {type(value).__name__}")


# ── Fields ────────────────────────────────────────────────────────────────────


class Field(BaseModel):
    """A typed data value of a point.

    ``value`` accepts a plain ``str``/``int``/``float``/``bool`` and stores the
    matching variant::

        Field(name="load", value=0.5).line_protocol()  # 'load=0.5'
    """

    model_config = ConfigDict(frozen=True)

    name: StrictStr
    value: FieldValue

    @field_validator("name")
    @classmethod
    def _name_not_empty(cls, value: str) -> str:
        if not value:
            raise InfluxDBValidationError("field name can't be empty")
        return value

    @field_validator("value", mode="before")
    @classmethod
    def _wrap_value(cls, value: Any) -> FieldValue:
        return field_value(value)

    @classmethod
    def of(cls, name: str, value: Any) -> Field:
        return cls(name=name, value=value)

    def line_protocol(self, integer_suffix: bool = False) -> str:
        return f"{escape_spaces_and_commas(self.name)}={self.value.line_protocol(integer_suffix)}"


# ── Data points ───────────────────────────────────────────────────────────────


class DataPoint(BaseModel):
    """A single measurement sample, ready to be written.

    The timestamp is stored as nanoseconds since the epoch; ``precision`` only
    selects the unit used when the point is rendered.  Build points with
    ``DataPoint.builder()``.
    """

    model_config = ConfigDict(frozen=True)

    measurement_name: StrictStr
    tags: tuple[Tag, ...] = ()
    fields: tuple[Field, ...]
    timestamp_ns: StrictInt
    precision: TimestampPrecision = TimestampPrecision.MILLISECONDS

    @field_validator("measurement_name")
    @classmethod
    def _measurement_not_empty(cls, value: str) -> str:
        if not value:
            raise InfluxDBValidationError("measurement name can't be empty")
        return value

    @field_validator("fields")
    @classmethod
    def _has_fields(cls, value: tuple[Field, ...]) -> tuple[Field, ...]:
        if not value:
            raise InfluxDBValidationError("Can't build point without fields")
        return value

    @classmethod
    def builder(cls, measurement_name: str) -> DataPointBuilder:
        return DataPointBuilder(measurement_name)

    @property
    def timestamp(self) -> int:
        """The timestamp as an integer count of ``precision`` units."""
        return self.timestamp_in(self.precision)

    @property
    def time(self) -> datetime:
        """The timestamp as an aware UTC datetime (microsecond resolution)."""
        return _EPOCH + timedelta(microseconds=self.timestamp_in(TimestampPrecision.MICROSECONDS))

    def timestamp_in(self, precision: TimestampPrecision | str) -> int:
        """Express the timestamp in *precision* units, truncating toward the epoch."""
        units = abs(self.timestamp_ns) // _as_precision(precision).nanos
        return units if self.timestamp_ns >= 0 else -units

    def line_protocol(self, integer_suffix: bool = False) -> str:
        """Render the complete line-protocol line for this point."""
        key = ",".join(
            [escape_spaces_and_commas(self.measurement_name)]
            + [tag.line_protocol() for tag in self.tags]
        )
        fields = ",".join(f.line_protocol(integer_suffix) for f in self.fields)
        return f"{key} {fields} {self.timestamp}"


def encode(point: DataPoint, integer_suffix: bool = False) -> str:
    """Render *point* as one line of line protocol."""
    return point.line_protocol(integer_suffix)


class DataPointBuilder:
    """Accumulates tags and fields, then produces an immutable ``DataPoint``.

    The timestamp defaults to the moment the builder was created and the
    precision to milliseconds.
    """

    def __init__(self, measurement_name: str) -> None:
        if not measurement_name:
            raise InfluxDBValidationError("measurement name can't be empty")
        self._measurement_name = measurement_name
        self._tags: list[Tag] = []
        self._fields: list[Field] = []
        self._timestamp_ns = time.time_ns()
        self._precision = TimestampPrecision.MILLISECONDS

    def with_tag(self, name: str, value: str) -> DataPointBuilder:
        self._tags.append(Tag(name=name, value=value))
        return self

    def with_field(self, name: str, value: Any) -> DataPointBuilder:
        self._fields.append(Field(name=name, value=value))
        return self

    def with_timestamp(
        self, timestamp: int, precision: TimestampPrecision | str
    ) -> DataPointBuilder:
        """Set the timestamp as an integer count of *precision* units since the epoch."""
        if precision is None:
            raise InfluxDBValidationError("timestamp precision can't be None")
        if isinstance(timestamp, bool) or not isinstance(timestamp, int):
            raise InfluxDBValidationError(
                f"timestamp must be an int, got {type(timestamp).__name__}"
            )
        self._precision = _as_precision(precision)
        self._timestamp_ns = timestamp * self._precision.nanos
        return self

    def with_time(self, moment: datetime) -> DataPointBuilder:
        """Set the timestamp from a datetime; naive datetimes are taken as UTC."""
        self._timestamp_ns = _datetime_to_ns(moment)
        return self

    def with_precision(self, precision: TimestampPrecision | str) -> DataPointBuilder:
        self._precision = _as_precision(precision)
        return self

    def build(self) -> DataPoint:
        if not self._fields:
            raise InfluxDBValidationError("Can't build point without fields")
        return DataPoint(
            measurement_name=self._measurement_name,
            tags=tuple(self._tags),
            fields=tuple(self._fields),
            timestamp_ns=self._timestamp_ns,
            precision=self._precision,
        )
