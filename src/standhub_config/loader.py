"""Configuration file loading."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError, ConfigErrorCodes
from .merger import deep_merge
from .models import AppConfig

DEFAULT_ENVIRONMENT = "development"


def _read_mapping(path: Path) -> dict[str, Any]:
    """Read one YAML document whose top level must be a mapping."""
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(
            code=ConfigErrorCodes.READ_FILE,
            message=f"Failed to read config file: {path}",
            cause=e,
        ) from e
    except yaml.YAMLError as e:
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"Failed to parse YAML: {path}",
            cause=e,
        ) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            code=ConfigErrorCodes.PARSE_YAML,
            message=f"{path}: expected a mapping at the top level, got {type(data).__name__}",
        )
    return data


def overlay_path(base_path: Path, environment: str) -> Path:
    """Overlay file for ``environment`` next to the base file.

    ``config.yaml`` with ``production`` gives ``config.production.yaml``.
    """
    return base_path.with_name(f"{base_path.stem}.{environment}{base_path.suffix}")


def _environment_of(data: dict[str, Any]) -> str:
    app = data.get("app")
    if isinstance(app, dict) and app.get("environment"):
        return str(app["environment"])
    return DEFAULT_ENVIRONMENT


def load(base_path: Path | str, env_path: Path | str | None = None) -> AppConfig:
    """Load the base file, merge its environment overlay and validate.

    Without ``env_path`` the overlay is looked up with ``overlay_path`` from
    the base file's ``app.environment``. A missing overlay is not an error.
    """
    base = Path(base_path)
    data = _read_mapping(base)
    if env_path is not None:
        overlay = Path(env_path)
    else:
        overlay = overlay_path(base, _environment_of(data))
    if overlay.exists():
        data = deep_merge(data, _read_mapping(overlay))
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            code=ConfigErrorCodes.VALIDATION,
            message=f"Config validation failed: {e}",
            cause=e,
        ) from e
