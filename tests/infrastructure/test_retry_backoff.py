from __future__ import annotations

import pytest

from socorro.infrastructure.retry import retry_with_backoff


def test_returns_first_success_without_sleeping() -> None:
    delays: list[float] = []

    assert retry_with_backoff(lambda: "ok", sleep=delays.append) == "ok"
    assert delays == []


def test_retries_with_exponential_delays() -> None:
    delays: list[float] = []
    calls = {"count": 0}

    def flaky() -> str:
        calls["count"] += 1
        if calls["count"] < 3:
            raise ConnectionError("timeout")
        return "ok"

    result = retry_with_backoff(flaky, max_attempts=3, base_delay=1.0, sleep=delays.append)

    assert result == "ok"
    assert calls["count"] == 3
    assert delays == [1.0, 2.0]


def test_propagates_last_exception_after_all_attempts() -> None:
    delays: list[float] = []
    errors = iter([ValueError("primeira"), ValueError("segunda"), ValueError("terceira")])

    def failing() -> None:
        raise next(errors)

    with pytest.raises(ValueError, match="terceira"):
        retry_with_backoff(failing, max_attempts=3, base_delay=0.5, sleep=delays.append)

    assert delays == [0.5, 1.0]


def test_rejects_non_positive_attempts() -> None:
    with pytest.raises(ValueError):
        retry_with_backoff(lambda: None, max_attempts=0)
