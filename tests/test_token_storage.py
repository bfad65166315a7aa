"""Token storage unit tests."""

from __future__ import annotations

import json

import pytest
from standhub_token_storage import (
    FileTokenStorage,
    InMemoryTokenStorage,
    TokenRecord,
    TokenStorageError,
    TokenStorageErrorCodes,
)

MINUTE = 60_000


def make_storage(clock) -> InMemoryTokenStorage:
    return InMemoryTokenStorage(clock=clock)


def test_empty_storage(clock) -> None:
    """An empty store reports no token and no metadata."""
    storage = make_storage(clock)
    assert storage.get_token() is None
    assert storage.get_token_metadata() is None
    assert storage.should_refresh_token() is False
    assert storage.can_refresh_now() is True
    assert storage.get_time_until_expiration() == 0
    assert storage.is_token_expired() is False


def test_save_round_trip(clock) -> None:
    """A saved token and expiry are read back unchanged."""
    storage = make_storage(clock)
    expires_at = clock.now + 60 * MINUTE
    storage.save_token_with_metadata("tok-1", expires_at, "user-1")
    assert storage.get_token() == "tok-1"
    metadata = storage.get_token_metadata()
    assert metadata is not None
    assert metadata.expires_at == expires_at
    assert metadata.user_id == "user-1"
    assert metadata.last_refresh == clock.now
    assert metadata.refresh_count == 1


def test_save_replaces_whole_record(clock) -> None:
    """A second save replaces token and expiry and keeps the owner."""
    storage = make_storage(clock)
    storage.save_token_with_metadata("old", clock.now + MINUTE, "user-1")
    clock.advance(30)
    storage.save_token_with_metadata("new", clock.now + 60 * MINUTE)
    metadata = storage.get_token_metadata()
    assert storage.get_token() == "new"
    assert metadata.expires_at == clock.now + 60 * MINUTE
    assert metadata.user_id == "user-1"
    assert metadata.refresh_count == 2


@pytest.mark.parametrize("minutes_left", [11, 30, 60])
def test_should_not_refresh_outside_threshold(clock, minutes_left: int) -> None:
    """Tokens with more than ten minutes left are not refreshed."""
    storage = make_storage(clock)
    storage.save_token_with_metadata("tok", clock.now + minutes_left * MINUTE)
    assert storage.should_refresh_token() is False


@pytest.mark.parametrize("minutes_left", [10, 5, 1, 0, -2])
def test_should_refresh_within_threshold(clock, minutes_left: int) -> None:
    """Tokens with ten minutes or less left, expired ones included, are due."""
    storage = make_storage(clock)
    storage.save_token_with_metadata("tok", clock.now + minutes_left * MINUTE)
    assert storage.should_refresh_token() is True


def test_can_refresh_now_respects_min_interval(clock) -> None:
    """A refresh is allowed only five minutes after the last one."""
    storage = make_storage(clock)
    storage.save_token_with_metadata("tok", clock.now + 8 * MINUTE)
    assert storage.can_refresh_now() is False
    clock.advance(4 * 60)
    assert storage.can_refresh_now() is False
    clock.advance(60)
    assert storage.can_refresh_now() is True


def test_mark_refresh_attempt_gates_next_refresh(clock) -> None:
    """A recorded attempt counts as the last refresh for spacing purposes."""
    storage = make_storage(clock)
    storage.save_token_with_metadata("tok", clock.now + 30 * MINUTE)
    clock.advance(6 * 60)
    assert storage.can_refresh_now() is True
    storage.mark_refresh_attempt()
    assert storage.can_refresh_now() is False
    assert storage.get_token() == "tok"


def test_clear_refresh_attempt_reopens_gate(clock) -> None:
    """Dropping the in-flight marker falls back to the last successful refresh."""
    storage = make_storage(clock)
    storage.save_token_with_metadata("tok", clock.now + 30 * MINUTE)
    clock.advance(6 * 60)
    storage.mark_refresh_attempt()
    clock.advance(60)
    storage.clear_refresh_attempt()
    assert storage.can_refresh_now() is True
    record = storage._record
    assert record is not None
    assert record.last_refresh_attempt == 0
    assert record.refresh_count == 1


def test_clear_refresh_attempt_without_record(clock) -> None:
    """Clearing the marker with no stored token is a no-op."""
    storage = make_storage(clock)
    storage.clear_refresh_attempt()
    assert storage.get_token() is None


def test_mark_refresh_attempt_without_record(clock) -> None:
    """Marking an attempt with no stored token is a no-op."""
    storage = make_storage(clock)
    storage.mark_refresh_attempt()
    assert storage.get_token() is None


def test_expiry_helpers(clock) -> None:
    """Time to expiry is floored at zero once the token expired."""
    storage = make_storage(clock)
    storage.save_token_with_metadata("tok", clock.now + 2 * MINUTE)
    assert storage.get_time_until_expiration() == 2 * MINUTE
    assert storage.is_token_expired() is False
    clock.advance(3 * 60)
    assert storage.get_time_until_expiration() == 0
    assert storage.is_token_expired() is True


def test_clear_token_storage(clock) -> None:
    """Clearing removes the record entirely."""
    storage = make_storage(clock)
    storage.save_token_with_metadata("tok", clock.now + MINUTE)
    storage.clear_token_storage()
    assert storage.get_token() is None
    assert storage.get_token_metadata() is None


class _BrokenStorage(InMemoryTokenStorage):
    def _read(self) -> TokenRecord | None:
        raise OSError("backend unavailable")

    def _delete(self) -> None:
        raise OSError("backend unavailable")


def test_read_failure_fails_closed(clock) -> None:
    """Backend read errors are reported as no token."""
    storage = _BrokenStorage(clock=clock)
    assert storage.get_token() is None
    assert storage.get_token_metadata() is None
    assert storage.should_refresh_token() is False
    storage.clear_token_storage()  # Should not raise


def test_file_storage_persists_across_instances(tmp_path, clock) -> None:
    """A token saved by one instance is visible to another on the same file."""
    path = tmp_path / "session" / "token.json"
    FileTokenStorage(path, clock=clock).save_token_with_metadata(
        "tok-file", clock.now + MINUTE, "user-9"
    )
    reopened = FileTokenStorage(path, clock=clock)
    assert reopened.get_token() == "tok-file"
    assert reopened.get_token_metadata().user_id == "user-9"
    stored = json.loads(path.read_text(encoding="utf-8"))
    assert stored["token"] == "tok-file"
    assert stored["expiresAt"] == clock.now + MINUTE
    assert list(path.parent.iterdir()) == [path]


def test_file_storage_clear(tmp_path, clock) -> None:
    """Clearing removes the file."""
    path = tmp_path / "token.json"
    storage = FileTokenStorage(path, clock=clock)
    storage.save_token_with_metadata("tok", clock.now + MINUTE)
    storage.clear_token_storage()
    assert not path.exists()
    storage.clear_token_storage()  # Should not raise


def test_file_storage_corrupt_document(tmp_path, clock) -> None:
    """A corrupt file is treated as no token."""
    path = tmp_path / "token.json"
    path.write_text("{not json", encoding="utf-8")
    storage = FileTokenStorage(path, clock=clock)
    assert storage.get_token() is None


def test_file_storage_missing_expiry(tmp_path, clock) -> None:
    """A record without expiry is treated as no token."""
    path = tmp_path / "token.json"
    path.write_text(json.dumps({"token": "tok"}), encoding="utf-8")
    assert FileTokenStorage(path, clock=clock).get_token() is None


def test_file_storage_write_failure(tmp_path, clock) -> None:
    """A failed write raises TokenStorageError(WRITE_FAILED)."""
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    storage = FileTokenStorage(blocker / "token.json", clock=clock)
    with pytest.raises(TokenStorageError) as exc_info:
        storage.save_token_with_metadata("tok", clock.now + MINUTE)
    assert exc_info.value.code == TokenStorageErrorCodes.WRITE_FAILED
