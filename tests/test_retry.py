"""Retry engine unit tests."""

import pytest
from standhub_retry import RetryConfig, RetryError, with_retry


def test_default_config() -> None:
    """Defaults: three retries starting at one second, no jitter."""
    cfg = RetryConfig()
    assert cfg.max_retries == 3
    assert cfg.max_attempts == 4
    assert cfg.initial_delay == 1.0
    assert cfg.multiplier == 2.0
    assert cfg.jitter is False


def test_compute_delay_doubles() -> None:
    """Delays double from the initial delay."""
    cfg = RetryConfig(initial_delay=1.0, multiplier=2.0)
    assert [cfg.compute_delay(n) for n in range(3)] == [1.0, 2.0, 4.0]


def test_compute_delay_capped() -> None:
    """Delays stop growing at max_delay."""
    cfg = RetryConfig(initial_delay=10.0, multiplier=10.0, max_delay=30.0)
    assert cfg.compute_delay(5) == pytest.approx(30.0)


def test_compute_delay_with_jitter() -> None:
    """Jittered delays stay within ten percent."""
    cfg = RetryConfig(initial_delay=1.0, multiplier=1.0, jitter=True)
    for _ in range(50):
        assert 0.9 <= cfg.compute_delay(0) <= 1.1


async def test_with_retry_success_first_try(sleeper) -> None:
    """No sleep happens when the first attempt succeeds."""

    async def succeeds() -> str:
        return "ok"

    assert await with_retry(RetryConfig(), succeeds, sleep=sleeper) == "ok"
    assert sleeper.delays == []


async def test_with_retry_success_after_failures(sleeper) -> None:
    """A call that fails twice succeeds on the third attempt."""
    call_count = 0

    async def fails_twice() -> str:
        nonlocal call_count
        call_count += 1
        if call_count < 3:
            raise ValueError("not yet")
        return "done"

    result = await with_retry(RetryConfig(), fails_twice, sleep=sleeper)
    assert result == "done"
    assert call_count == 3
    assert sleeper.delays == [1.0, 2.0]


async def test_with_retry_exhausted(sleeper) -> None:
    """Exhausted retries raise RetryError carrying the last error."""
    call_count = 0

    async def always_fails() -> None:
        nonlocal call_count
        call_count += 1
        raise RuntimeError("boom")

    with pytest.raises(RetryError) as exc_info:
        await with_retry(RetryConfig(max_retries=3), always_fails, sleep=sleeper)
    assert call_count == 4
    assert exc_info.value.attempts == 4
    assert isinstance(exc_info.value.last_error, RuntimeError)
    assert sleeper.delays == [1.0, 2.0, 4.0]


async def test_with_retry_non_retryable_propagates(sleeper) -> None:
    """Errors rejected by retry_if propagate after a single attempt."""
    call_count = 0

    async def fails() -> None:
        nonlocal call_count
        call_count += 1
        raise PermissionError("denied")

    with pytest.raises(PermissionError):
        await with_retry(
            RetryConfig(),
            fails,
            retry_if=lambda e: not isinstance(e, PermissionError),
            sleep=sleeper,
        )
    assert call_count == 1
    assert sleeper.delays == []


async def test_with_retry_zero_retries(sleeper) -> None:
    """max_retries=0 makes exactly one attempt."""

    async def fails() -> None:
        raise RuntimeError("boom")

    with pytest.raises(RetryError) as exc_info:
        await with_retry(RetryConfig(max_retries=0), fails, sleep=sleeper)
    assert exc_info.value.attempts == 1
    assert sleeper.delays == []
