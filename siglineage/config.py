"""
SigLineage — Configuration System

All configuration is Pydantic-validated and loaded from:
1. A YAML file (optional)
2. Environment variables (overrides)

The lineage queries themselves are pure; configuration only shapes how the
engine digests certificates, how large a loaded lineage may be, and how
decisions are logged.
"""

from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ─── Sub-configs ──────────────────────────────────────────────────


class LineageConfig(BaseModel):
    # Digest used for trusted-digest membership; any hashlib algorithm.
    digest_algorithm: str = "sha256"
    # Upper bound on lineages read from documents. Real rotation chains are short.
    max_lineage_length: int = Field(default=32, ge=1)
    log_decisions: bool = True

    @field_validator("digest_algorithm")
    @classmethod
    def _known_algorithm(cls, value: str) -> str:
        name = value.strip().lower()
        if name not in hashlib.algorithms_available:
            raise ValueError(f"Unsupported digest algorithm: {value}")
        if name.startswith("shake"):
            raise ValueError(f"Variable-length digests are not supported: {value}")
        return name


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: Literal["console", "json"] = "console"


# ─── Root Configuration ──────────────────────────────────────────


class SigLineageConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="SIGLINEAGE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    lineage: LineageConfig = Field(default_factory=LineageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: str | Path | None = None) -> SigLineageConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    env: dict[str, Any] = {}
    if algorithm := os.environ.get("SIGLINEAGE_LINEAGE__DIGEST_ALGORITHM"):
        env.setdefault("lineage", {})["digest_algorithm"] = algorithm
    if max_length := os.environ.get("SIGLINEAGE_LINEAGE__MAX_LINEAGE_LENGTH"):
        env.setdefault("lineage", {})["max_lineage_length"] = int(max_length)
    if log_decisions := os.environ.get("SIGLINEAGE_LINEAGE__LOG_DECISIONS"):
        env.setdefault("lineage", {})["log_decisions"] = log_decisions.lower() in ("true", "1", "yes")
    if level := os.environ.get("SIGLINEAGE_LOGGING__LEVEL"):
        env.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("SIGLINEAGE_LOGGING__FORMAT"):
        env.setdefault("logging", {})["format"] = fmt

    return SigLineageConfig(**_deep_merge(raw, env))
