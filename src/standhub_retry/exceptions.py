"""Exception types for the retry library."""

from __future__ import annotations


class RetryError(Exception):
    """Raised when every attempt failed."""

    def __init__(self, attempts: int, last_error: Exception | None = None) -> None:
        self.attempts = attempts
        self.last_error = last_error
        msg = f"Gave up after {attempts} attempts"
        if last_error:
            msg += f": {last_error}"
        super().__init__(msg)
        if last_error is not None:
            self.__cause__ = last_error
