from __future__ import annotations

import pytest

from dynamodbcopy.errors import RetryTimeoutError, ValidationError
from dynamodbcopy.retry import MAX_RETRY_ELAPSED_MS, RetryExecutor, jitter_sleeper
from dynamodbcopy.testkit import fixed_sleeper, no_sleep


def test_retry_returns_when_operation_is_done() -> None:
    calls: list[tuple[int, int]] = []

    def op(attempt: int, elapsed_ms: int) -> bool:
        calls.append((attempt, elapsed_ms))
        return True

    assert RetryExecutor(sleeper=no_sleep).run(op) == 0
    assert calls == [(0, 0)]


def test_retry_sleeps_elapsed_times_attempt_between_attempts() -> None:
    requested: list[int] = []
    seen: list[tuple[int, int]] = []

    def op(attempt: int, elapsed_ms: int) -> bool:
        seen.append((attempt, elapsed_ms))
        return attempt == 3

    executor = RetryExecutor(sleeper=fixed_sleeper(10, calls=requested))
    elapsed = executor.run(op)

    # 0*0+10 -> 10, 10*1+10 -> 30, 30*2+10 -> 100
    assert requested == [0, 10, 60]
    assert seen == [(0, 0), (1, 10), (2, 30), (3, 100)]
    assert elapsed == 100


def test_retry_raises_operation_errors_immediately() -> None:
    calls = 0

    def op(attempt: int, elapsed_ms: int) -> bool:
        nonlocal calls
        calls += 1
        raise ValidationError("nope")

    with pytest.raises(ValidationError, match="nope"):
        RetryExecutor(sleeper=no_sleep).run(op)
    assert calls == 1


def test_retry_times_out_with_elapsed_and_ceiling() -> None:
    executor = RetryExecutor(sleeper=fixed_sleeper(100), max_elapsed_ms=1000)

    with pytest.raises(RetryTimeoutError) as excinfo:
        executor.run(lambda attempt, elapsed: False, table_name="tbl", operation_name="wait_for_ready")

    assert excinfo.value.max_elapsed_ms == 1000
    assert excinfo.value.elapsed_ms >= 1000
    assert excinfo.value.table_name == "tbl"
    assert "wait_for_ready on tbl" in str(excinfo.value)


def test_retry_honours_starting_elapsed() -> None:
    executor = RetryExecutor(sleeper=no_sleep, max_elapsed_ms=500)
    with pytest.raises(RetryTimeoutError):
        executor.run(lambda attempt, elapsed: True, elapsed_ms=500)


def test_retry_default_ceiling_is_three_minutes() -> None:
    assert MAX_RETRY_ELAPSED_MS == 180_000
    assert RetryExecutor(sleeper=no_sleep).max_elapsed_ms == 180_000


def test_retry_rejects_non_positive_ceiling() -> None:
    with pytest.raises(ValueError, match="max_elapsed_ms"):
        RetryExecutor(sleeper=no_sleep, max_elapsed_ms=0)


def test_jitter_sleeper_adds_bounded_jitter() -> None:
    slept: list[float] = []
    sleeper = jitter_sleeper(max_jitter_ms=100, sleep=slept.append, randrange=lambda n: n - 1)

    assert sleeper(250) == 349
    assert slept == [0.349]


def test_jitter_sleeper_clamps_negative_requests() -> None:
    slept: list[float] = []
    sleeper = jitter_sleeper(sleep=slept.append, randrange=lambda n: 0)

    assert sleeper(-5) == 0
    assert slept == [0.0]


def test_jitter_sleeper_rejects_non_positive_jitter() -> None:
    with pytest.raises(ValueError, match="max_jitter_ms"):
        jitter_sleeper(max_jitter_ms=0)
