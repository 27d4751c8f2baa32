from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from salter_aws.logging_utils import get_logger


DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_PARAMETER_PREFIX = "/preprod/testing/"
DEFAULT_REGION = "ap-southeast-3"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = get_logger(__name__)


class ConfigError(ValueError):
    """Raised when the tool configuration file is invalid or unusable."""


@dataclass(frozen=True, slots=True)
class ToolConfig:
    parameter_prefix: str = DEFAULT_PARAMETER_PREFIX
    region: str = DEFAULT_REGION

    def to_json(self) -> dict[str, str]:
        return {"parameterPrefix": self.parameter_prefix, "region": self.region}


def _env(name: str, env: dict[str, str], default: str | None = None) -> str | None:
    value = env.get(name, default)
    if value is None:
        return None
    value = value.strip()
    return value or None


def config_path(env: dict[str, str] | None = None) -> Path:
    current_env = dict(os.environ if env is None else env)
    return Path(_env("SALTER_CONFIG", current_env) or DEFAULT_CONFIG_FILE)


def log_level_from_env(env: dict[str, str] | None = None) -> str:
    current_env = dict(os.environ if env is None else env)
    level = (
        _env("SALTER_LOG_LEVEL", current_env, DEFAULT_LOG_LEVEL) or DEFAULT_LOG_LEVEL
    ).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(
            f"SALTER_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}"
        )
    return level


def _string_field(payload: dict[str, Any], name: str, default: str) -> str:
    value = payload.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise ConfigError(f"{name} must be a string")
    if not value.strip():
        raise ConfigError(f"{name} must not be empty")
    return value


def _write_defaults(path: Path) -> ToolConfig:
    config = ToolConfig()
    try:
        path.write_text(json.dumps(config.to_json(), indent=2), encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to write default {path}: {exc}") from exc
    print(f"Generated default {path}")
    logger.info("generated_default_config", extra={"parameter": str(path)})
    return config


def load_tool_config(
    path: str | Path | None = None,
    env: dict[str, str] | None = None,
) -> ToolConfig:
    """
    Load ``config.json``, creating it with defaults on first run.

    Missing keys fall back to the defaults; the region is not validated
    against the list of AWS regions.
    """
    config_file = Path(path) if path is not None else config_path(env)
    if not config_file.exists():
        return _write_defaults(config_file)
    try:
        raw = config_file.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read {config_file}: {exc}") from exc
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"failed to parse {config_file}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigError(f"{config_file} must contain a JSON object")
    return ToolConfig(
        parameter_prefix=_string_field(
            payload, "parameterPrefix", DEFAULT_PARAMETER_PREFIX
        ),
        region=_string_field(payload, "region", DEFAULT_REGION),
    )
