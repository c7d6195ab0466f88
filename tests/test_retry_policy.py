"""Tests for the backoff policy"""

import math

import pytest

from rebound.domain.config.retry import RetryConfig
from rebound.domain.errors import EncodingError, ResponseReadError, TransportError
from rebound.domain.models.attempt_result import AttemptResult
from rebound.infrastructure.retry import (
    backoff_seconds,
    create_retrying,
    should_retry_result,
    should_retry_status,
)


class TestBackoffSeconds:
    """Tests for backoff_seconds"""

    def test_first_attempt_never_waits(self):
        """Test attempt index 0 has no wait"""
        assert backoff_seconds(RetryConfig(interval_seconds=5, backoff_rate=3), 0) == 0.0

    def test_exponential_growth_seeded_at_one(self):
        """Test waits follow interval * rate^index"""
        config = RetryConfig(max_attempts=5, interval_seconds=1, backoff_rate=2)
        assert [backoff_seconds(config, i) for i in range(5)] == [0.0, 2.0, 4.0, 8.0, 16.0]

    def test_rate_one_is_constant(self):
        """Test backoff_rate=1 gives a constant interval"""
        config = RetryConfig(interval_seconds=0.25, backoff_rate=1)
        assert [backoff_seconds(config, i) for i in range(1, 4)] == [0.25, 0.25, 0.25]

    def test_zero_rate_gives_zero_wait(self):
        """Test backoff_rate=0 collapses every wait to zero"""
        config = RetryConfig(interval_seconds=1, backoff_rate=0)
        assert backoff_seconds(config, 3) == 0.0

    def test_zero_interval_skips_the_power(self):
        """Test a zero interval never computes rate^index"""
        config = RetryConfig(interval_seconds=0, backoff_rate=10)
        assert backoff_seconds(config, 400) == 0.0

    def test_overflow_is_infinite(self):
        """Test a wait too large for a float is reported as infinite"""
        config = RetryConfig(interval_seconds=1, backoff_rate=10)
        assert backoff_seconds(config, 400) == math.inf


class TestRetryDecision:
    """Tests for retry predicates"""

    @pytest.mark.parametrize("status,expected", [(200, False), (204, False), (404, False), (499, False), (500, True), (503, True), (999, True)])
    def test_should_retry_status(self, status, expected):
        """Test the server error threshold"""
        assert should_retry_status(status) is expected

    def test_transport_error_is_retried(self):
        """Test transport failures are transient"""
        assert should_retry_result(AttemptResult.failed(TransportError("reset")))

    @pytest.mark.parametrize("error_cls", [EncodingError, ResponseReadError])
    def test_other_errors_are_not_retried(self, error_cls):
        """Test non-transport failures resolve the loop"""
        assert not should_retry_result(AttemptResult.failed(error_cls("boom")))

    def test_server_error_without_error_is_retried(self):
        """Test a 5xx answer is retried"""
        assert should_retry_result(AttemptResult(status=502, body=b""))


class TestCreateRetrying:
    """Tests for the tenacity controller"""

    def test_returns_last_result_when_exhausted(self):
        """Test exhaustion returns the last result instead of raising"""
        results = iter([AttemptResult(status=500, body=b"a"), AttemptResult(status=503, body=b"b")])
        retrying = create_retrying(RetryConfig(max_attempts=2), sleep=lambda _: None)

        result = retrying(lambda: next(results))

        assert result.status == 503
        assert result.body == b"b"

    def test_after_called_for_every_retried_attempt(self):
        """Test the after hook sees each retried attempt, the last one included"""
        seen = []
        retrying = create_retrying(
            RetryConfig(max_attempts=3),
            after=lambda state: seen.append(state.attempt_number),
            sleep=lambda _: None,
        )

        retrying(lambda: AttemptResult(status=500, body=b""))

        assert seen == [1, 2, 3]

    def test_exceptions_propagate(self):
        """Test unexpected exceptions are not swallowed or retried"""
        calls = {"n": 0}

        def boom():
            calls["n"] += 1
            raise KeyError("bug")

        retrying = create_retrying(RetryConfig(max_attempts=3), sleep=lambda _: None)

        with pytest.raises(KeyError):
            retrying(boom)
        assert calls["n"] == 1
