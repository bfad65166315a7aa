"""In-memory token storage."""

from __future__ import annotations

from .models import TokenRecord
from .storage import TokenStorage


class InMemoryTokenStorage(TokenStorage):
    """Keeps the record in process memory. Used in tests and short-lived tools."""

    _record: TokenRecord | None = None

    def _read(self) -> TokenRecord | None:
        return self._record

    def _write(self, record: TokenRecord) -> None:
        self._record = record

    def _delete(self) -> None:
        self._record = None
