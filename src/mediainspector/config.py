"""Configuration management for MediaInspector."""

import os
import re
from pathlib import Path
from typing import Any, List, Optional
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, Field, field_validator


class InspectionConfig(BaseModel):
    """Inspection rule thresholds."""

    max_size_gb: float = Field(default=20.0, description="Re-encode files strictly above this size (GiB)")
    supported_containers: List[str] = Field(
        default_factory=lambda: ["matroska", "mp4", "mov"],
        description="Format substrings considered fit containers",
    )

    @field_validator("max_size_gb")
    @classmethod
    def validate_max_size(cls, v: float) -> float:
        """Validate the size threshold is positive."""
        if v <= 0:
            raise ValueError("max_size_gb must be positive")
        return v

    @field_validator("supported_containers")
    @classmethod
    def validate_containers(cls, v: List[str]) -> List[str]:
        """Lowercase container substrings and drop blanks."""
        containers = [c.strip().lower() for c in v if c and c.strip()]
        if not containers:
            raise ValueError("At least one supported container is required")
        return containers


class CatalogConfig(BaseModel):
    """Catalog source configuration."""

    file: Optional[str] = Field(
        default=None, description="YAML/JSON catalog file (built-in samples when unset)"
    )
    root: str = Field(default="/movies", description="Directory prefix the catalog file paths are authored under")


class ReencodeConfig(BaseModel):
    """Re-encode handoff configuration."""

    handbrake_url: str = Field(
        default="http://localhost:8080", description="HandBrake web UI base URL"
    )

    @field_validator("handbrake_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate the handoff URL is an absolute http(s) URL."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid HandBrake URL: {v!r}")
        return v.rstrip("/")


class ExecutionConfig(BaseModel):
    """Plan execution configuration."""

    dry_run: bool = Field(default=True, description="Log the remux command instead of running it")
    output_suffix: str = Field(default="_remuxed", description="Suffix for remuxed copies")
    timeout_seconds: int = Field(default=300, description="ffmpeg timeout")

    @field_validator("output_suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Output must never overwrite the source."""
        if not v or "/" in v:
            raise ValueError("output_suffix must be a non-empty file name fragment")
        return v


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = Field(default="0.0.0.0", description="API host")
    port: int = Field(default=8787, description="API port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="info", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class Config(BaseModel):
    """Main configuration model."""

    inspection: InspectionConfig = Field(
        default_factory=InspectionConfig, description="Inspection rules"
    )
    catalog: CatalogConfig = Field(default_factory=CatalogConfig, description="Catalog source")
    reencode: ReencodeConfig = Field(
        default_factory=ReencodeConfig, description="Re-encode handoff"
    )
    execution: ExecutionConfig = Field(
        default_factory=ExecutionConfig, description="Execution configuration"
    )
    api: APIConfig = Field(default_factory=APIConfig, description="API configuration")
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path) as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        raw_config = cls._substitute_env_vars(raw_config)

        return cls(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """Recursively replace ${VAR_NAME} with os.environ['VAR_NAME']."""
        if isinstance(obj, dict):
            return {key: Config._substitute_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [Config._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            pattern = r"\$\{([^}]+)\}"

            def replace_var(match):
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' not found "
                        f"(referenced in configuration)"
                    )
                return value

            return re.sub(pattern, replace_var, obj)
        else:
            return obj

    @classmethod
    def from_defaults(cls) -> "Config":
        """Create configuration with default values."""
        return cls()


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from file or use defaults.

    Args:
        path: Optional path to configuration file. If None, uses defaults.

    Returns:
        Config instance
    """
    if path is None:
        return Config.from_defaults()

    return Config.from_yaml(path)
