"""Bridge settings — registry URL, authentication mode, transport policy.

Sources, lowest precedence first: field defaults, an optional YAML file,
``ASTRASYNC_*`` environment variables, explicit overrides (CLI options).
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from astrasync_bridge.errors import ConfigurationError

DEFAULT_API_URL = "https://astrasync-api-production.up.railway.app"


class AuthMode(str, Enum):
    """How ``register_agent`` authenticates against the registry."""

    NONE = "none"
    API_KEY = "api-key"
    PASSWORD = "password-login"


_ENV_VARS: dict[str, str] = {
    "ASTRASYNC_API_URL": "api_url",
    "ASTRASYNC_AUTH_MODE": "auth_mode",
    "ASTRASYNC_TIMEOUT": "timeout",
    "ASTRASYNC_RETRIES": "retries",
    "ASTRASYNC_TELEMETRY": "telemetry_enabled",
    "ASTRASYNC_LOG_LEVEL": "log_level",
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class BridgeSettings(BaseModel):
    """Process-wide configuration, read once at startup."""

    model_config = {"frozen": True}

    api_url: str = DEFAULT_API_URL
    auth_mode: AuthMode = AuthMode.API_KEY
    timeout: float = 30.0
    retries: int = 1
    source: str = "mcp-bridge"
    telemetry_source: str = "mcp-bridge"
    telemetry_enabled: bool = True
    log_level: str = "INFO"

    @field_validator("api_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            msg = f"api_url must be an http(s) URL, got {value!r}"
            raise ValueError(msg)
        return value.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            msg = "timeout must be positive"
            raise ValueError(msg)
        return value

    @field_validator("retries")
    @classmethod
    def _non_negative_retries(cls, value: int) -> int:
        if value < 0:
            msg = "retries must be >= 0"
            raise ValueError(msg)
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in _LOG_LEVELS:
            msg = f"log_level must be one of {', '.join(_LOG_LEVELS)}"
            raise ValueError(msg)
        return level

    @classmethod
    def load(
        cls,
        path: str | Path | None = None,
        *,
        environ: dict[str, str] | None = None,
        **overrides: Any,
    ) -> BridgeSettings:
        """Merge file, environment and *overrides* into validated settings.

        ``None`` overrides are ignored so CLI options can be passed through
        unconditionally.
        """
        data: dict[str, Any] = {}
        if path is not None:
            data.update(_read_yaml(Path(path)))

        env = os.environ if environ is None else environ
        for var, field in _ENV_VARS.items():
            if var in env and env[var] != "":
                data[field] = env[var]

        data.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigurationError(str(exc)) from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    """Read a settings file; ``${VAR}`` references are expanded first."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read {path}: {exc}"
        raise ConfigurationError(msg) from exc
    try:
        raw = yaml.safe_load(os.path.expandvars(text))
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML in {path}: {exc}"
        raise ConfigurationError(msg) from exc
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        msg = f"Config file {path} must contain a mapping at the top level"
        raise ConfigurationError(msg)
    # Accept kebab-case keys as written in hand-edited files.
    return {str(k).replace("-", "_"): v for k, v in raw.items()}
