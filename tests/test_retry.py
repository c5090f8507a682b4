import asyncio

import pytest

from src.geofee.errors import NetworkError, ProviderError, RateLimitError
from src.geofee.services.retry import RetryPolicy


class Recorder:
    def __init__(self, failures):
        self.failures = list(failures)
        self.calls = 0
        self.sleeps: list[float] = []

    async def sleep(self, seconds):
        self.sleeps.append(seconds)

    async def operation(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return "ok"


def test_network_errors_back_off_exponentially():
    recorder = Recorder([NetworkError("timeout")] * 3)
    policy = RetryPolicy(retries=3, retry_delay=1.0, sleep=recorder.sleep)

    assert asyncio.run(policy.call(recorder.operation)) == "ok"
    assert recorder.calls == 4
    assert recorder.sleeps == [1.0, 2.0, 4.0]


def test_network_error_raised_when_retries_exhausted():
    recorder = Recorder([NetworkError("timeout")] * 5)
    policy = RetryPolicy(retries=2, retry_delay=0.5, sleep=recorder.sleep)

    with pytest.raises(NetworkError):
        asyncio.run(policy.call(recorder.operation))
    assert recorder.calls == 3
    assert recorder.sleeps == [0.5, 1.0]


def test_rate_limit_not_retried_by_default():
    recorder = Recorder([RateLimitError("slow down", retry_after=5)])
    policy = RetryPolicy(sleep=recorder.sleep)

    with pytest.raises(RateLimitError):
        asyncio.run(policy.call(recorder.operation))
    assert recorder.calls == 1


def test_rate_limit_waits_for_retry_after_when_enabled():
    recorder = Recorder([RateLimitError("slow down", retry_after=5), RateLimitError("slow down")])
    policy = RetryPolicy(retries=3, retry_on_rate_limit=True, sleep=recorder.sleep)

    assert asyncio.run(policy.call(recorder.operation)) == "ok"
    assert recorder.sleeps == [5, 60.0]


def test_provider_errors_propagate_immediately():
    recorder = Recorder([ProviderError("denied")])
    policy = RetryPolicy(retries=3, sleep=recorder.sleep)

    with pytest.raises(ProviderError):
        asyncio.run(policy.call(recorder.operation))
    assert recorder.calls == 1
    assert recorder.sleeps == []
