"""standhub config library."""

from .exceptions import ConfigError, ConfigErrorCodes
from .loader import load, overlay_path
from .merger import deep_merge
from .models import (
    ApiSection,
    AppConfig,
    AppSection,
    AuthSection,
    LogSection,
    ObservabilitySection,
    StorageSection,
)

__all__ = [
    "load",
    "overlay_path",
    "deep_merge",
    "AppConfig",
    "AppSection",
    "ApiSection",
    "AuthSection",
    "StorageSection",
    "LogSection",
    "ObservabilitySection",
    "ConfigError",
    "ConfigErrorCodes",
]
