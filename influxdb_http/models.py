"""Pydantic models for InfluxDB query responses.

The ``/query`` endpoint answers with JSON shaped like::

    {
        "results": [
            {
                "statement_id": 0,
                "series": [
                    {
                        "name": "cpu",
                        "tags": {"host": "server01"},
                        "columns": ["time", "value"],
                        "values": [["2015-01-29T21:55:43.702900257Z", 0.55]]
                    }
                ]
            }
        ],
        "error": "..."        # only on failure
    }

Missing or ``null`` arrays and maps decode to empty ones.  All models are
frozen, their arrays are tuples and their maps are read-only mappings.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


class _ResponseModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")


class Series(_ResponseModel):
    """One named, tag-scoped stream of rows.

    A series without a ``name`` key (e.g. some ``SHOW`` outputs) decodes with
    ``name=None``.  ``tags`` is a read-only mapping.
    """

    name: str | None = None
    tags: Mapping[str, str] = Field(default_factory=lambda: MappingProxyType({}))
    columns: tuple[str, ...] = ()
    values: tuple[tuple[Any, ...], ...] = ()

    @field_validator("tags", "columns", "values", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return {} if info.field_name == "tags" else ()
        return value

    @field_validator("tags")
    @classmethod
    def _read_only_tags(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @model_validator(mode="after")
    def _rows_match_columns(self) -> Series:
        for index, row in enumerate(self.values):
            if len(row) != len(self.columns):
                raise ValueError(
                    f"row {index} of series {self.name!r} has {len(row)} cells "
                    f"but there are {len(self.columns)} columns"
                )
        return self

    def rows(self) -> list[dict[str, Any]]:
        """Return every row as a ``{column: cell}`` dict."""
        return [dict(zip(self.columns, row)) for row in self.values]


class QueryResult(_ResponseModel):
    """Result of a single statement; ``error`` is set if only this statement failed."""

    statement_id: int | None = None
    series: tuple[Series, ...] = ()
    error: str | None = None

    @field_validator("series", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return () if value is None else value


class QueryResponse(_ResponseModel):
    """Top-level body of a ``/query`` response."""

    results: tuple[QueryResult, ...] = ()
    error: str | None = None

    @field_validator("results", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Any) -> Any:
        return () if value is None else value

    @property
    def has_error(self) -> bool:
        return self.error is not None


def decode_query_response(body: str | bytes) -> QueryResponse:
    """Decode a ``/query`` response body.

    Raises:
        pydantic.ValidationError: if the body is empty, not JSON, or not shaped
            like a query response.
    """
    return QueryResponse.model_validate_json(body)
