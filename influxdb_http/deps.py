"""Client factories.

Settings are read once per process; each factory call builds a new client,
which the caller owns and should close.
"""

from functools import lru_cache

from influxdb_http.clients.influxdb import AsyncInfluxDBClient, InfluxDBClient
from influxdb_http.config import Settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


def get_influxdb_client(settings: Settings | None = None) -> InfluxDBClient:
    settings = settings or get_settings()
    return InfluxDBClient(
        url=settings.influx_url,
        username=settings.influx_username or None,
        password=settings.influx_password,
        timeout=settings.influx_timeout,
        verify_tls=settings.influx_verify_tls,
        integer_suffix=settings.influx_integer_suffix,
    )


def get_async_influxdb_client(settings: Settings | None = None) -> AsyncInfluxDBClient:
    settings = settings or get_settings()
    return AsyncInfluxDBClient(
        url=settings.influx_url,
        username=settings.influx_username or None,
        password=settings.influx_password,
        timeout=settings.influx_timeout,
        verify_tls=settings.influx_verify_tls,
        integer_suffix=settings.influx_integer_suffix,
    )
