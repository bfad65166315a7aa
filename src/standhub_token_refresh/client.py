"""TokenRefreshClient abstract base class."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .models import RefreshTokenResponse


class TokenRefreshClient(ABC):
    """Exchanges a session token for a fresh one."""

    @abstractmethod
    async def refresh_token(self, current_token: str) -> RefreshTokenResponse:
        """Return a new token for ``current_token``.

        Raises:
            TokenRefreshError: code UNAUTHORIZED when the session is dead,
                REFRESH_FAILED when retries were exhausted
        """
        ...
