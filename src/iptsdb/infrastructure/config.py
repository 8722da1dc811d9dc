"""Configuration management for the time-series store."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PUBLISH_TIMEOUT_SECONDS = 50.0
DEFAULT_RECORD_TTL = "12h"


class StorageConfig(BaseModel):
    """Content store and naming service backend configuration."""

    backend: Literal["memory", "file"] = Field(
        default="file", description="Backend used for blocks and table pointers"
    )
    data_dir: Path = Field(
        default=Path("~/.iptsdb").expanduser(), description="Root directory for the file backend"
    )


class NamingConfig(BaseModel):
    """Naming service publish configuration."""

    publish_timeout_seconds: float = Field(
        default=DEFAULT_PUBLISH_TIMEOUT_SECONDS,
        gt=0,
        description="Deadline for publishing a new root pointer",
    )
    record_ttl: str = Field(
        default=DEFAULT_RECORD_TTL, description="Lifetime hint passed with each published pointer"
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="REST API port")
    metrics_port: int = Field(default=8001, ge=1, le=65535, description="Prometheus metrics port")


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(default="console", description="Log format")
    otel_endpoint: str | None = Field(
        default=None, description="OpenTelemetry collector endpoint"
    )
    otel_service_name: str = Field(default="iptsdb", description="Service name for tracing")


class Config(BaseSettings):
    """Main configuration for the time-series store."""

    model_config = SettingsConfigDict(
        env_prefix="IPTSDB_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    storage: StorageConfig = Field(default_factory=StorageConfig)
    naming: NamingConfig = Field(default_factory=NamingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    def ensure_directories(self) -> None:
        """Ensure the data directory exists when the file backend is selected."""
        if self.storage.backend == "file":
            self.storage.data_dir.mkdir(parents=True, exist_ok=True)


@lru_cache
def get_config() -> Config:
    """Get the global configuration instance."""
    return Config()
