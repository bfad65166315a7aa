"""Exception types for the token API library."""

from __future__ import annotations


class TokenApiError(Exception):
    """Base error of the token API library."""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Exception | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.code}: {super().__str__()}"


class TokenApiErrorCodes:
    """Error code constants for TokenApiError."""

    UNAUTHORIZED: str = "UNAUTHORIZED"
    HTTP_ERROR: str = "HTTP_ERROR"
    INVALID_RESPONSE: str = "INVALID_RESPONSE"
