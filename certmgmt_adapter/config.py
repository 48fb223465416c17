"""Configuration management for the Certificate Management Adapter.

Loads configuration from YAML file and validates with Pydantic models.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path
from typing import Annotated

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from certmgmt_adapter.protocol.node_id import CERTIFICATE_TYPES

# module.path:callable
_FACTORY_PATTERN = re.compile(r"^[A-Za-z_][\w.]*:[A-Za-z_]\w*$")


class TLSConfig(BaseModel):
    """TLS configuration for server."""

    model_config = ConfigDict(frozen=True)

    cert_file: Path
    key_file: Path


class ServerConfig(BaseModel):
    """HTTP/S server configuration for the administration API."""

    model_config = ConfigDict(frozen=True)

    host: str = "127.0.0.1"
    port: Annotated[int, Field(ge=1, le=65535)] = 8480
    tls: TLSConfig | None = None


class SessionConfig(BaseModel):
    """Secure session collaborator configuration."""

    model_config = ConfigDict(frozen=True)

    # Import path of a zero-argument callable returning a connected session
    factory: str | None = None

    @field_validator("factory")
    @classmethod
    def validate_factory(cls, v: str | None) -> str | None:
        """Validate that factory looks like 'module:callable'."""
        if v is not None and not _FACTORY_PATTERN.match(v):
            msg = f"Session factory must be 'module:callable', got '{v}'"
            raise ValueError(msg)
        return v


class CertificateDefaults(BaseModel):
    """Defaults applied when an API request leaves group or type unset."""

    model_config = ConfigDict(frozen=True)

    group: str = "DefaultApplicationGroup"
    certificate_type: str = "RsaSha256ApplicationCertificateType"

    @field_validator("certificate_type")
    @classmethod
    def validate_certificate_type(cls, v: str) -> str:
        """Validate that certificate_type names a registered type."""
        if v not in CERTIFICATE_TYPES:
            msg = f"Unknown certificate type '{v}', must be one of: {', '.join(CERTIFICATE_TYPES)}"
            raise ValueError(msg)
        return v


class BasicAuthUser(BaseModel):
    """Single user for HTTP Basic authentication."""

    model_config = ConfigDict(frozen=True)

    username: str
    password_hash: str


class AuthConfig(BaseModel):
    """Administration API authentication configuration."""

    model_config = ConfigDict(frozen=True)

    users: list[BasicAuthUser] = []


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class AuditConfig(BaseModel):
    """Audit logging configuration."""

    model_config = ConfigDict(frozen=True)

    log_file: Path = Path("./logs/audit.log")
    log_level: LogLevel = LogLevel.INFO


class Settings(BaseModel):
    """Root configuration model for the Certificate Management Adapter."""

    model_config = ConfigDict(frozen=True)

    server: ServerConfig = ServerConfig()
    session: SessionConfig = SessionConfig()
    certificates: CertificateDefaults = CertificateDefaults()
    auth: AuthConfig = AuthConfig()
    audit: AuditConfig = AuditConfig()


def load_config(config_path: Path | str) -> Settings:
    """Load configuration from YAML file.

    Args:
        config_path: Path to configuration YAML file.

    Returns:
        Validated Settings instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
        pydantic.ValidationError: If configuration validation fails.
    """
    path = Path(config_path)
    with path.open("r") as f:
        data = yaml.safe_load(f)

    return Settings.model_validate(data or {})


def load_config_from_env(
    env_var: str = "CERTMGMT_ADAPTER_CONFIG",
    default_paths: list[Path] | None = None,
) -> Settings:
    """Load configuration from environment variable or default paths.

    Args:
        env_var: Environment variable name containing config path.
        default_paths: List of default paths to try if env var not set.

    Returns:
        Validated Settings instance, or defaults if no file is found.
    """
    config_path = os.environ.get(env_var)
    if config_path:
        return load_config(config_path)

    if default_paths is None:
        default_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path("/etc/certmgmt-adapter/config.yaml"),
        ]

    for path in default_paths:
        if path.exists():
            return load_config(path)

    return Settings()
