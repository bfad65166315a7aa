"""Token storage base class."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace

import structlog

from .exceptions import TokenStorageError, TokenStorageErrorCodes
from .models import TokenMetadata, TokenRecord, now_ms

logger = structlog.get_logger(__name__)

REFRESH_THRESHOLD_SECONDS = 10 * 60
MIN_REFRESH_INTERVAL_SECONDS = 5 * 60


class TokenStorage(ABC):
    """Synchronous store for the current session token.

    Subclasses provide a backend through ``_read``, ``_write`` and
    ``_delete``. Read and delete failures are logged and reported as "no
    token" so the application falls back to re-authentication. A failed
    write raises TokenStorageError.
    """

    def __init__(
        self,
        refresh_threshold: float = REFRESH_THRESHOLD_SECONDS,
        min_refresh_interval: float = MIN_REFRESH_INTERVAL_SECONDS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._refresh_threshold_ms = int(refresh_threshold * 1000)
        self._min_refresh_interval_ms = int(min_refresh_interval * 1000)
        self._clock = clock

    @abstractmethod
    def _read(self) -> TokenRecord | None: ...

    @abstractmethod
    def _write(self, record: TokenRecord) -> None: ...

    @abstractmethod
    def _delete(self) -> None: ...

    def _load(self) -> TokenRecord | None:
        try:
            return self._read()
        except Exception as e:
            logger.error("token_read_failed", error=str(e))
            return None

    def _store(self, record: TokenRecord) -> None:
        try:
            self._write(record)
        except Exception as e:
            logger.error("token_write_failed", error=str(e))
            raise TokenStorageError(
                code=TokenStorageErrorCodes.WRITE_FAILED,
                message=f"Failed to save authentication token: {e}",
                cause=e,
            ) from e

    def get_token(self) -> str | None:
        """Return the stored bearer token regardless of its expiry."""
        record = self._load()
        return record.token if record else None

    def get_token_metadata(self) -> TokenMetadata | None:
        record = self._load()
        return record.metadata if record else None

    def save_token_with_metadata(
        self, token: str, expires_at: int, user_id: str = ""
    ) -> TokenRecord:
        """Replace the stored record with a new token and expiry.

        ``user_id`` defaults to the owner of the previous record.
        """
        previous = self._load()
        record = TokenRecord(
            token=token,
            expires_at=expires_at,
            user_id=user_id or (previous.user_id if previous else ""),
            last_refresh=self._clock(),
            refresh_count=(previous.refresh_count if previous else 0) + 1,
        )
        self._store(record)
        return record

    def mark_refresh_attempt(self) -> None:
        """Record that a refresh is in flight.

        The marker holds off overlapping refreshes until the call resolves.
        A successful save replaces it; a failed call should drop it with
        ``clear_refresh_attempt`` so the next cycle may try again.
        """
        record = self._load()
        if record is None:
            return
        self._store(replace(record, last_refresh_attempt=self._clock()))

    def clear_refresh_attempt(self) -> None:
        """Drop the in-flight marker left by ``mark_refresh_attempt``."""
        record = self._load()
        if record is None or not record.last_refresh_attempt:
            return
        self._store(replace(record, last_refresh_attempt=0))

    def should_refresh_token(self) -> bool:
        """True when the token expires within the refresh threshold."""
        record = self._load()
        if record is None:
            return False
        return record.expires_at - self._clock() <= self._refresh_threshold_ms

    def can_refresh_now(self) -> bool:
        """True when the minimum spacing since the last refresh has elapsed."""
        record = self._load()
        if record is None:
            return True
        last = max(record.last_refresh, record.last_refresh_attempt)
        return self._clock() - last >= self._min_refresh_interval_ms

    def get_time_until_expiration(self) -> int:
        """Milliseconds until expiry, 0 when absent or expired."""
        record = self._load()
        if record is None:
            return 0
        return max(0, record.expires_at - self._clock())

    def is_token_expired(self) -> bool:
        """True when a record is present but already past its expiry."""
        record = self._load()
        return record is not None and record.expires_at <= self._clock()

    def clear_token_storage(self) -> None:
        try:
            self._delete()
        except Exception as e:
            logger.error("token_clear_failed", error=str(e))
