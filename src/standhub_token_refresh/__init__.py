"""standhub token refresh library."""

from .client import TokenRefreshClient
from .exceptions import TokenRefreshError, TokenRefreshErrorCodes
from .http_client import HttpTokenRefreshClient
from .models import RefreshTokenResponse, TokenRefreshConfig

__all__ = [
    "TokenRefreshClient",
    "HttpTokenRefreshClient",
    "RefreshTokenResponse",
    "TokenRefreshConfig",
    "TokenRefreshError",
    "TokenRefreshErrorCodes",
]
