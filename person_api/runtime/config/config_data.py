"""Pydantic models for the application configuration.

These models mirror the structure of config.yaml. The four connection
settings (database path, user, password and API bind address) always come
from the environment; everything else has a default that config.yaml may
override.
"""

from __future__ import annotations

from typing import Literal

from loguru import logger
from pydantic import BaseModel, Field, computed_field, field_validator
from sqlalchemy.engine import URL


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="plain", description="Log file format")
    file: str | None = Field(default=None, description="Log file path, console only when unset")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    path: str = Field(default="", description="Database host, optional port and name: host[:port]/dbname")
    user: str = Field(default="", description="Database username")
    password: str = Field(default="", repr=False, description="Database password")
    driver: str = Field(default="postgresql+psycopg2", description="SQLAlchemy driver name")
    sslmode: str = Field(default="disable", description="PostgreSQL sslmode connection parameter")
    url: str | None = Field(
        default=None,
        description="Full connection URL; takes precedence over path/user/password when set",
    )
    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=0, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    create_tables: bool = Field(default=True, description="Create missing tables at startup")

    @computed_field
    @property
    def connection_string(self) -> str:
        """Build the connection string from the configured parts."""
        if self.url:
            return self.url

        host_port, _, database = self.path.partition("/")
        host, _, port = host_port.partition(":")
        url = URL.create(
            drivername=self.driver,
            username=self.user or None,
            password=self.password or None,
            host=host or None,
            port=int(port) if port else None,
            database=database or None,
            query={"sslmode": self.sslmode} if self.driver.startswith("postgresql") else {},
        )
        return url.render_as_string(hide_password=False)

    @property
    def is_sqlite(self) -> bool:
        return self.connection_string.startswith("sqlite")


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    bind_address: str = Field(default="0.0.0.0:8000", description="API bind address, host:port")
    request_timeout: float = Field(
        default=5.0, gt=0, description="Deadline for every service operation, in seconds"
    )

    @field_validator("bind_address")
    @classmethod
    def _check_bind_address(cls, value: str) -> str:
        _, sep, port = value.rpartition(":")
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError(f"expected host:port with a numeric port, got {value!r}")
        return value

    @property
    def host(self) -> str:
        host, _, _ = self.bind_address.rpartition(":")
        if not host:
            logger.debug("Bind address {} has no host, listening on all interfaces", self.bind_address)
            return "0.0.0.0"
        return host

    @property
    def port(self) -> int:
        _, _, port = self.bind_address.rpartition(":")
        return int(port)


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
