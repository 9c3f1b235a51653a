from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Mapping
from urllib.parse import urlparse

import yaml

from ..errors import ConfigError
from .transport_config import TransportConfig

# Environment variable -> (field, caster)
ENV_OVERRIDES = {
    "FEEDPROPS_TIMEOUT": ("timeout", float),
    "FEEDPROPS_RETRIES": ("retries", int),
    "FEEDPROPS_BACKOFF": ("backoff", float),
}


def _validate_transport_dict(entry: Mapping[str, Any]) -> None:
    """Validate the ``transport`` mapping from YAML.

    Optional fields:
      - base_url: absolute http/https URL
      - timeout: positive number of seconds
      - retries: non-negative integer
      - backoff: positive number
      - headers: mapping[str, str]
    """
    base_url = entry.get("base_url")
    if base_url is not None:
        parsed = urlparse(str(base_url).strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"Invalid base_url '{base_url}'. Must be absolute http(s) URL.")

    for key in ("timeout", "backoff"):
        if key in entry and entry[key] is not None:
            val = entry[key]
            if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
                raise ConfigError(f"'{key}' must be a positive number, got {val!r}")

    if "retries" in entry and entry["retries"] is not None:
        val = entry["retries"]
        if isinstance(val, bool) or not isinstance(val, int) or val < 0:
            raise ConfigError(f"'retries' must be a non-negative integer, got {val!r}")

    if "headers" in entry and entry["headers"] is not None:
        headers = entry["headers"]
        if not isinstance(headers, dict) or not all(isinstance(k, str) and isinstance(v, str) for k, v in headers.items()):
            raise ConfigError("'headers' must be a mapping of string keys to string values if provided")


def _coerce_transport(entry: Mapping[str, Any]) -> TransportConfig:
    config = TransportConfig()
    if entry.get("base_url") is not None:
        config.base_url = str(entry["base_url"]).strip().rstrip("/")
    if entry.get("timeout") is not None:
        config.timeout = float(entry["timeout"])
    if entry.get("retries") is not None:
        config.retries = int(entry["retries"])
    if entry.get("backoff") is not None:
        config.backoff = float(entry["backoff"])
    config.headers = {str(k): str(v) for k, v in (entry.get("headers") or {}).items()}
    return config


def apply_env_overrides(config: TransportConfig) -> TransportConfig:
    for env_name, (field_name, caster) in ENV_OVERRIDES.items():
        raw = os.environ.get(env_name)
        if raw is None or not raw.strip():
            continue
        try:
            value = caster(raw)
        except ValueError as exc:
            raise ConfigError(f"Invalid {env_name}={raw!r}: {exc}") from exc
        if value < 0 or (field_name != "retries" and value == 0):
            raise ConfigError(f"Invalid {env_name}={raw!r}: out of range")
        setattr(config, field_name, value)
    return config


def load_client_config(path: Path | str | None, *, required: bool = False) -> TransportConfig:
    """Load ``feedprops.yaml`` into a ``TransportConfig``.

    YAML structure:
      - Top-level mapping
      - Key ``transport``: mapping with base_url, timeout, retries, backoff
        and headers (all optional)

    A missing file yields defaults unless ``required`` is set. Unknown keys
    are ignored for forward compatibility. Environment overrides are applied
    last.
    """
    if path is None:
        return apply_env_overrides(TransportConfig())

    config_path = Path(path)
    if not config_path.exists():
        if required:
            raise ConfigError(f"Config file not found: {config_path}")
        return apply_env_overrides(TransportConfig())

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML must be a mapping, got: {type(data).__name__}")

    transport_raw = data.get("transport") or {}
    if not isinstance(transport_raw, dict):
        raise ConfigError("'transport' must be a mapping in the YAML configuration")

    _validate_transport_dict(transport_raw)
    return apply_env_overrides(_coerce_transport(transport_raw))
