from influxdb_http.clients.influxdb import AsyncInfluxDBClient, InfluxDBClient

__all__ = ["AsyncInfluxDBClient", "InfluxDBClient"]
