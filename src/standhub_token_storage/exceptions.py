"""Exception types for the token storage library."""

from __future__ import annotations


class TokenStorageError(Exception):
    """Base error of the token storage library."""

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


class TokenStorageErrorCodes:
    """Error code constants for TokenStorageError."""

    READ_FAILED: str = "READ_FAILED"
    WRITE_FAILED: str = "WRITE_FAILED"
