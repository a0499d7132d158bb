"""
Unit tests for the async retry helper
"""

import asyncio

import pytest

from services.common.result import Result
from services.common.retry import with_retry


class RecordingSleep:
    """Stands in for asyncio.sleep and records requested delays"""

    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def _flaky(failures, value='ok', exc=ConnectionError):
    calls = {'count': 0}

    async def operation():
        calls['count'] += 1
        if calls['count'] <= failures:
            raise exc("connection reset")
        return value

    return operation, calls


class TestWithRetry:

    def test_first_attempt_success_does_not_sleep(self):
        sleep = RecordingSleep()
        operation, calls = _flaky(0)

        assert asyncio.run(with_retry(operation, sleep=sleep)) == 'ok'
        assert calls['count'] == 1
        assert sleep.delays == []

    def test_exponential_backoff_on_exceptions(self):
        sleep = RecordingSleep()
        operation, calls = _flaky(3)

        result = asyncio.run(with_retry(operation, max_retries=3, base_delay=1.0, sleep=sleep))

        assert result == 'ok'
        assert calls['count'] == 4
        assert sleep.delays == [1.0, 2.0, 4.0]

    def test_exception_reraised_when_retries_exhausted(self):
        sleep = RecordingSleep()
        operation, calls = _flaky(10)

        with pytest.raises(ConnectionError):
            asyncio.run(with_retry(operation, max_retries=3, base_delay=0.5, sleep=sleep))

        assert calls['count'] == 4
        assert sleep.delays == [0.5, 1.0, 2.0]

    def test_negative_result_is_retried_then_returned(self):
        sleep = RecordingSleep()
        calls = {'count': 0}

        async def operation():
            calls['count'] += 1
            return Result.failure("temporarily unavailable", code="REPOSITORY_ERROR")

        result = asyncio.run(with_retry(
            operation, max_retries=2, base_delay=1.0,
            should_retry=lambda r: not r, sleep=sleep
        ))

        assert result.is_failure
        assert calls['count'] == 3
        assert sleep.delays == [1.0, 2.0]

    def test_negative_result_recovers(self):
        sleep = RecordingSleep()
        results = [Result.failure("busy"), Result.success(42)]

        async def operation():
            return results.pop(0)

        result = asyncio.run(with_retry(operation, should_retry=lambda r: not r, sleep=sleep))

        assert result.data == 42
        assert sleep.delays == [1.0]

    def test_accepted_value_not_retried(self):
        sleep = RecordingSleep()

        async def operation():
            return False

        # Without should_retry a falsy value is still a valid answer
        assert asyncio.run(with_retry(operation, sleep=sleep)) is False
        assert sleep.delays == []

    def test_zero_retries(self):
        operation, calls = _flaky(1)

        with pytest.raises(ConnectionError):
            asyncio.run(with_retry(operation, max_retries=0, sleep=RecordingSleep()))
        assert calls['count'] == 1
