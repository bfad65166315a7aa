"""standhub token storage library."""

from .exceptions import TokenStorageError, TokenStorageErrorCodes
from .file import FileTokenStorage
from .memory import InMemoryTokenStorage
from .models import TokenMetadata, TokenRecord, now_ms
from .storage import TokenStorage

__all__ = [
    "TokenStorage",
    "InMemoryTokenStorage",
    "FileTokenStorage",
    "TokenRecord",
    "TokenMetadata",
    "TokenStorageError",
    "TokenStorageErrorCodes",
    "now_ms",
]
