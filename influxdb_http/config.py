"""Client configuration loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """All settings are read from environment variables (case-insensitive)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ── Server ────────────────────────────────────────────────────────────────
    influx_url: str = "http://localhost:8086"

    # ── Basic auth ────────────────────────────────────────────────────────────
    # Leave the username empty to send requests without an Authorization header.
    influx_username: str = ""
    influx_password: str = ""

    # ── Transport ─────────────────────────────────────────────────────────────
    # Seconds; applies to connect, read, write and pool acquisition.
    influx_timeout: float = 10.0
    influx_verify_tls: bool = True

    # ── Line protocol ─────────────────────────────────────────────────────────
    # InfluxDB >= 0.10 parses "42" as a float and "42i" as an integer.  The
    # default writes bare integers, as 0.9.x servers expect.
    influx_integer_suffix: bool = False
