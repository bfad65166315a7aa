"""JSON file token storage."""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Callable
from pathlib import Path

from .models import TokenRecord, now_ms
from .storage import (
    MIN_REFRESH_INTERVAL_SECONDS,
    REFRESH_THRESHOLD_SECONDS,
    TokenStorage,
)


class FileTokenStorage(TokenStorage):
    """Stores the record as a single JSON document.

    Writes go to a temporary file in the same directory which is then
    renamed over the target, so readers see either the old or the new record.
    """

    def __init__(
        self,
        path: Path | str,
        refresh_threshold: float = REFRESH_THRESHOLD_SECONDS,
        min_refresh_interval: float = MIN_REFRESH_INTERVAL_SECONDS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        super().__init__(refresh_threshold, min_refresh_interval, clock)
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> TokenRecord | None:
        if not self._path.exists():
            return None
        data = json.loads(self._path.read_text(encoding="utf-8"))
        return TokenRecord.from_dict(data)

    def _write(self, record: TokenRecord) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".token-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(record.to_dict(), f)
            os.chmod(tmp, 0o600)
            os.replace(tmp, self._path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def _delete(self) -> None:
        self._path.unlink(missing_ok=True)
