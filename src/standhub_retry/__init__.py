"""standhub retry library."""

from .client import with_retry
from .exceptions import RetryError
from .models import RetryConfig

__all__ = [
    "RetryConfig",
    "RetryError",
    "with_retry",
]
