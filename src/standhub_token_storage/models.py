"""Session token record."""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass(frozen=True)
class TokenMetadata:
    """Expiry and refresh bookkeeping for the stored token."""

    expires_at: int  # epoch ms
    user_id: str = ""
    last_refresh: int = 0
    refresh_count: int = 0


@dataclass(frozen=True)
class TokenRecord:
    """The persisted session. Always replaced as a whole."""

    token: str
    expires_at: int  # epoch ms
    user_id: str = ""
    last_refresh: int = 0
    refresh_count: int = 0
    last_refresh_attempt: int = 0

    @property
    def metadata(self) -> TokenMetadata:
        return TokenMetadata(
            expires_at=self.expires_at,
            user_id=self.user_id,
            last_refresh=self.last_refresh,
            refresh_count=self.refresh_count,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "token": data["token"],
            "expiresAt": data["expires_at"],
            "userId": data["user_id"],
            "lastRefresh": data["last_refresh"],
            "refreshCount": data["refresh_count"],
            "lastRefreshAttempt": data["last_refresh_attempt"],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TokenRecord:
        """Build a record from its stored form.

        Raises:
            KeyError, TypeError, ValueError: the document is not a token record
        """
        token = data["token"]
        if not isinstance(token, str) or not token:
            raise ValueError("token must be a non-empty string")
        return cls(
            token=token,
            expires_at=int(data["expiresAt"]),
            user_id=str(data.get("userId") or ""),
            last_refresh=int(data.get("lastRefresh", 0)),
            refresh_count=int(data.get("refreshCount", 0)),
            last_refresh_attempt=int(data.get("lastRefreshAttempt", 0)),
        )
