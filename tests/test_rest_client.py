"""Tests for the RestClient facade"""

import pytest
from pydantic import ValidationError

from rebound.application.rest_client import Requester, RestClient
from rebound.domain.models.attempt_result import AttemptResult
from rebound.infrastructure.events.memory import MemoryEventSink


class TestBuilder:
    """Tests for the fluent immutable builder"""

    def test_builder_sets_all_options(self):
        """Test every option lands in the request config"""
        client = (
            RestClient()
            .with_method("post")
            .with_url("http://localhost:8080")
            .with_headers({"Content-Type": "application/json"})
            .with_timeout(10)
            .with_interval_seconds(1)
            .with_backoff_rate(2)
            .with_max_attempts(3)
        )

        config = client.config
        assert config.method == "POST"
        assert config.url == "http://localhost:8080"
        assert config.headers == {"Content-Type": "application/json"}
        assert config.timeout == 10
        assert config.retry.max_attempts == 3
        assert config.retry.interval_seconds == 1
        assert config.retry.backoff_rate == 2

    def test_with_returns_new_client(self):
        """Test setters leave the receiver unchanged"""
        base = RestClient().with_url("http://a.test")
        other = base.with_url("http://b.test")

        assert base.config.url == "http://a.test"
        assert other.config.url == "http://b.test"
        assert base is not other

    def test_with_header_adds_single_header(self):
        """Test with_header merges into existing headers"""
        client = RestClient().with_headers({"A": "1"}).with_header("B", "2")

        assert client.config.headers == {"A": "1", "B": "2"}

    def test_with_headers_copies_mapping(self):
        """Test later mutation of the caller's dict does not leak in"""
        headers = {"A": "1"}
        client = RestClient().with_headers(headers)
        headers["A"] = "changed"

        assert client.config.headers == {"A": "1"}

    def test_zero_max_attempts_rejected(self):
        """Test max_attempts must be at least 1"""
        with pytest.raises(ValidationError, match="max_attempts"):
            RestClient().with_max_attempts(0)

    def test_negative_interval_rejected(self):
        """Test interval_seconds must not be negative"""
        with pytest.raises(ValidationError, match="interval_seconds"):
            RestClient().with_interval_seconds(-1)

    def test_is_requester(self):
        assert isinstance(RestClient(), Requester)


class TestDo:
    """Tests for RestClient.do"""

    def test_do_runs_through_orchestrator(self, fake_invoker, sleeps):
        """Test do() retries with the configured policy and injected collaborators"""
        fake_invoker.invoke.side_effect = [
            AttemptResult(status=503, body=b""),
            AttemptResult(status=200, body=b'{"message": "success"}'),
        ]
        sink = MemoryEventSink()
        client = (
            RestClient(invoker=fake_invoker, sink=sink, sleep=sleeps)
            .with_url("http://localhost:8080")
            .with_max_attempts(3)
            .with_interval_seconds(1)
            .with_backoff_rate(2)
        )

        outcome = client.do({"q": 1})

        assert outcome.status == 200
        assert outcome.value == {"message": "success"}
        assert sleeps == [2.0]
        assert len(sink.named("retry")) == 1
        assert fake_invoker.invoke.call_args.args[1] == {"q": 1}
