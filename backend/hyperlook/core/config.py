"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

ENV_PREFIX = "HYPERLOOK_"
DEFAULT_CONFIG_PATH = Path("~/.config/hyperlook/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("elasticsearch", "scheme"): "es_scheme",
    ("elasticsearch", "host"): "es_host",
    ("elasticsearch", "port"): "es_port",
    ("elasticsearch", "size"): "es_size",
    ("elasticsearch", "timeout"): "request_timeout",
    ("elasticsearch", "strict_status"): "strict_status",
    ("filters", "namespace"): "namespace",
    ("filters", "container_name"): "container_name",
    ("poll", "interval"): "interval",
    ("poll", "max_consecutive_failures"): "max_consecutive_failures",
    ("poll", "retry_backoff_seconds"): "retry_backoff_seconds",
    ("poll", "dedupe_capacity"): "dedupe_capacity",
    ("poll", "enabled"): "poll_enabled",
    ("server", "listen_addr"): "listen_addr",
    ("logging", "level"): "log_level",
    ("logging", "json"): "log_json",
}


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    container_name: str = "peer"
    namespace: str = "fabric-net"
    es_scheme: str = "http"
    es_host: str = "127.0.0.1"
    es_port: int = Field(default=9200, ge=1, le=65535)
    es_size: int = Field(default=200, ge=1)
    interval: int = Field(default=60, ge=0)
    listen_addr: str = ":2053"
    request_timeout: float = Field(default=30.0, gt=0)
    strict_status: bool = False
    max_consecutive_failures: int = Field(default=3, ge=1)
    retry_backoff_seconds: float = Field(default=5.0, ge=0)
    dedupe_capacity: int | None = None
    poll_enabled: bool = True
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {
        "frozen": True,
        "extra": "ignore",
    }

    @field_validator("es_scheme")
    @classmethod
    def _check_scheme(cls, value: str) -> str:
        scheme = value.lower()
        if scheme not in {"http", "https"}:
            raise ValueError("es_scheme must be http or https")
        return scheme

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @model_validator(mode="after")
    def _check_dedupe_capacity(self) -> "Settings":
        # the window must hold at least one full page or overlapping pages recount
        if self.dedupe_capacity is not None and self.dedupe_capacity < self.es_size:
            raise ValueError("dedupe_capacity must be >= es_size")
        return self

    @property
    def window_capacity(self) -> int:
        return self.dedupe_capacity or self.es_size * 4

    @property
    def listen_host_port(self) -> tuple[str, int]:
        """Split ``listen_addr`` (``host:port`` or ``:port``) for the server."""
        host, sep, port = self.listen_addr.rpartition(":")
        if not sep or not port.isdigit():
            raise ValueError(f"Invalid listen address: {self.listen_addr!r}")
        return host.strip("[]") or "0.0.0.0", int(port)

    @classmethod
    def from_yaml(cls, path: Path | None = None, **overrides: Any) -> "Settings":
        """Load YAML config, overlay env vars, then explicit overrides."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        if isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        else:
            mapped_key = _YAML_KEY_MAP.get(next_prefix)
            if mapped_key:
                flat[mapped_key] = value
            elif key in Settings.model_fields:
                flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with HYPERLOOK_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "get_settings"]
