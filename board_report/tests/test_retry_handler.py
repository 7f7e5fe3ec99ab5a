"""Tests for the retry wait policy and the transient-retry wrapper."""

import asyncio

import pytest

from board_report.clients.retry_handler import (
    RetryExhaustedError,
    RetryStrategy,
    retry_while_transient,
)

from .fakes import SleepRecorder


class Transient(Exception):
    def __init__(self, retry_after=None):
        super().__init__("transient")
        self.retry_after = retry_after


class Fatal(Exception):
    pass


def flaky(failures):
    """Async callable raising the given exceptions in turn, then returning "ok"."""
    remaining = list(failures)
    calls = {"count": 0}

    async def call():
        calls["count"] += 1
        if remaining:
            raise remaining.pop(0)
        return "ok"

    return call, calls


def run(func, strategy, sleeper):
    return asyncio.run(
        retry_while_transient(
            func,
            is_transient=lambda e: isinstance(e, Transient),
            strategy=strategy,
            get_retry_after=lambda e: getattr(e, "retry_after", None),
            sleep=sleeper,
        )
    )


def test_backoff_doubles_up_to_cap():
    strategy = RetryStrategy(base_delay=1.0, max_delay=30.0)
    delays = [strategy.get_delay(attempt) for attempt in range(8)]
    assert delays == [1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0, 30.0]


def test_server_delay_overrides_backoff():
    strategy = RetryStrategy()
    assert strategy.get_delay(5, retry_after=3) == 3.0
    assert strategy.get_delay(0, retry_after=0) == 0.0


def test_server_delay_is_not_capped():
    assert RetryStrategy(max_delay=30.0).get_delay(0, retry_after=45) == 45.0


def test_should_retry_respects_budget():
    strategy = RetryStrategy(max_retries=2)
    assert strategy.should_retry(0)
    assert strategy.should_retry(1)
    assert not strategy.should_retry(2)


def test_unbounded_budget_always_retries():
    assert RetryStrategy(max_retries=None).should_retry(10_000)


def test_retries_transient_errors_until_success():
    sleeper = SleepRecorder()
    func, calls = flaky([Transient(), Transient()])

    assert run(func, RetryStrategy(max_retries=5), sleeper) == "ok"
    assert calls["count"] == 3
    assert sleeper.delays == [1.0, 2.0]


def test_uses_server_supplied_delay():
    sleeper = SleepRecorder()
    func, _ = flaky([Transient(retry_after=3)])

    run(func, RetryStrategy(max_retries=5), sleeper)

    assert sleeper.delays == [3.0]


def test_fatal_error_propagates_without_retry():
    sleeper = SleepRecorder()
    func, calls = flaky([Fatal("boom")])

    with pytest.raises(Fatal):
        run(func, RetryStrategy(max_retries=5), sleeper)

    assert calls["count"] == 1
    assert sleeper.delays == []


def test_exhausted_budget_raises_with_last_error():
    sleeper = SleepRecorder()
    last = Transient()
    func, calls = flaky([Transient(), Transient(), last])

    with pytest.raises(RetryExhaustedError) as excinfo:
        run(func, RetryStrategy(max_retries=2), sleeper)

    assert excinfo.value.last_error is last
    assert calls["count"] == 3
    assert sleeper.delays == [1.0, 2.0]
