"""Exception types for the token refresh library."""

from __future__ import annotations


class TokenRefreshError(Exception):
    """Base error of the token refresh library."""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"

    @property
    def is_unauthorized(self) -> bool:
        return self.code == TokenRefreshErrorCodes.UNAUTHORIZED


class TokenRefreshErrorCodes:
    """Error code constants for TokenRefreshError."""

    UNAUTHORIZED: str = "UNAUTHORIZED"
    REFRESH_FAILED: str = "REFRESH_FAILED"
    INVALID_RESPONSE: str = "INVALID_RESPONSE"
