"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file, with a plain .env
  as the fallback when the environment-specific file is missing
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename
if not _env_path.is_file():
    _env_path = PROJECT_ROOT / ".env"

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings.
# Nested BaseSettings don't inherit env_file, and variables already present in
# the process environment win over the file.
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=False)


LookupStrategy = Literal[
    "ipv4_then_ipv6",
    "ipv6_then_ipv4",
    "ipv4_and_ipv6",
    "ipv4_only",
    "ipv6_only",
]


def parse_bind_address(address: str) -> tuple[str, int]:
    """Split a ``host:port`` bind address into its parts.

    IPv6 hosts may be written in brackets (``[::1]:8000``).

    Args:
        address: Bind address string.

    Returns:
        Tuple of (host, port).

    Raises:
        ValueError: If the address has no port or the port is out of range.

    Examples:
        >>> parse_bind_address("0.0.0.0:8000")
        ('0.0.0.0', 8000)
        >>> parse_bind_address("[::1]:9000")
        ('::1', 9000)
    """
    host, sep, port_text = address.strip().rpartition(":")
    if not sep or not host or not port_text.isdigit():
        raise ValueError(f"invalid bind address: {address!r} (expected host:port)")

    port = int(port_text)
    if not 0 < port < 65536:
        raise ValueError(f"invalid port in bind address: {address!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"IPv6 hosts must be bracketed: {address!r}")

    return host, port


def _build_server_settings() -> "ServerSettings":
    """Build server settings from environment.

    Pydantic Settings (v2) can populate values from environment variables.
    However, static type checkers often treat required fields as required
    constructor arguments, which is not how BaseSettings is intended to be used.
    """

    return ServerSettings()  # type: ignore[call-arg]


def _build_rate_limit_settings() -> "RateLimitSettings":
    """Build rate limit settings from environment."""

    return RateLimitSettings()  # type: ignore[call-arg]


def _build_dns_settings() -> "DnsSettings":
    """Build resolver settings from environment."""

    return DnsSettings()  # type: ignore[call-arg]


def _build_log_settings() -> "LogSettings":
    """Build logging settings from environment."""

    return LogSettings()  # type: ignore[call-arg]


class ServerSettings(BaseSettings):
    """HTTP server binding."""

    address: str = Field(
        "0.0.0.0:8000",
        description="Bind address in host:port form (IPv6 hosts in brackets)",
    )

    model_config = SettingsConfigDict(
        env_prefix="SERVER_",
        case_sensitive=False,
    )

    @field_validator("address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        parse_bind_address(value)
        return value.strip()

    @property
    def host(self) -> str:
        return parse_bind_address(self.address)[0]

    @property
    def port(self) -> int:
        return parse_bind_address(self.address)[1]


class RateLimitSettings(BaseSettings):
    """Per-client admission control (token bucket)."""

    enabled: bool = Field(
        True,
        description="Enable per-client rate limiting",
    )
    per_second: int = Field(
        3,
        description="Sustained refill rate in tokens per second",
        ge=1,
    )
    burst_size: int = Field(
        10,
        description="Maximum tokens a client may accumulate",
        ge=1,
    )
    include_headers: bool = Field(
        True,
        description="Include Retry-After and X-RateLimit-* headers when throttling",
    )
    prune_interval_seconds: float = Field(
        60.0,
        description="How often idle (fully refilled) buckets are dropped; 0 disables",
        ge=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class DnsSettings(BaseSettings):
    """Resolver configuration.

    Unset values fall back to the system resolver configuration
    (/etc/resolv.conf or the platform equivalent) and dnspython defaults.
    """

    lookup_strategy: LookupStrategy = Field(
        "ipv4_then_ipv6",
        description="Which address families to query and in what order",
    )
    nameservers: str | None = Field(
        None,
        description="Comma-separated nameserver IPs overriding the system configuration",
    )
    timeout_seconds: float | None = Field(
        None,
        description="Per-nameserver query timeout in seconds",
        gt=0,
    )
    lifetime_seconds: float | None = Field(
        None,
        description="Total time budget for one lookup in seconds",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="DNS_",
        case_sensitive=False,
    )

    @property
    def nameserver_list(self) -> list[str]:
        if not self.nameservers:
            return []
        return [ns.strip() for ns in self.nameservers.split(",") if ns.strip()]


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: Literal["json", "plain"] = Field(
        "json",
        description="Log line format",
    )
    output: Literal["stdout", "file"] = Field(
        "stdout",
        description="Where log lines are written",
    )
    file_path: str | None = Field(
        None,
        description="Log file path when output=file (default logs/dnsqueryx.log)",
    )
    max_bytes: int = Field(
        10 * 1024 * 1024,
        description="Rotate the log file at this size; 0 disables rotation",
        ge=0,
    )
    backup_count: int = Field(5, description="Rotated files to keep", ge=0)
    request_id_header: str = Field(
        "X-Request-ID",
        description="Header used to read and echo the correlation id",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if a setting is malformed.
    """

    app_env: str = APP_ENV
    server: ServerSettings = Field(default_factory=_build_server_settings)
    rate_limit: RateLimitSettings = Field(default_factory=_build_rate_limit_settings)
    dns: DnsSettings = Field(default_factory=_build_dns_settings)
    log: LogSettings = Field(default_factory=_build_log_settings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
