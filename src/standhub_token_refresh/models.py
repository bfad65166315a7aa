"""Token refresh data models."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .exceptions import TokenRefreshError, TokenRefreshErrorCodes


@dataclass(frozen=True)
class RefreshTokenResponse:
    """A freshly issued session token."""

    token: str
    expires_at: int  # epoch ms
    user_id: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> RefreshTokenResponse:
        """Build a response from the endpoint's JSON body.

        Raises:
            TokenRefreshError: INVALID_RESPONSE when token or expiresAt is missing
        """
        if not isinstance(data, dict) or not data.get("token") or not data.get("expiresAt"):
            raise TokenRefreshError(
                code=TokenRefreshErrorCodes.INVALID_RESPONSE,
                message="Invalid response from refresh endpoint",
            )
        try:
            expires_at = int(data["expiresAt"])
        except (TypeError, ValueError) as e:
            raise TokenRefreshError(
                code=TokenRefreshErrorCodes.INVALID_RESPONSE,
                message=f"Invalid expiresAt: {data['expiresAt']!r}",
                cause=e,
            ) from e
        return cls(
            token=str(data["token"]),
            expires_at=expires_at,
            user_id=str(data.get("userId") or ""),
        )


@dataclass
class TokenRefreshConfig:
    """Token refresh client settings."""

    base_url: str
    endpoint: str = "/refresh-auth-token"
    timeout_seconds: float = 10.0
    max_retries: int = 3
    initial_delay: float = 1.0  # seconds
    api_key: str = ""
