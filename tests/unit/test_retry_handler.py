"""Tests for retrying transient read failures."""

from unittest.mock import patch

import pytest
import requests

from zosctl.retry_config import RetryConfig, get_retry_config, reset_retry_config
from zosctl.retry_handler import is_retryable, retry_with_exponential_backoff


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("zosctl.retry_handler.time.sleep") as sleep:
        yield sleep


class TestRetryDecorator:
    def test_succeeds_after_transient_failures(self, no_sleep):
        calls = []

        @retry_with_exponential_backoff(max_attempts=3, initial_delay=1, jitter=False)
        def flaky():
            calls.append(1)
            if len(calls) < 3:
                raise requests.exceptions.ConnectionError("reset")
            return "ok"

        assert flaky() == "ok"
        assert [c.args[0] for c in no_sleep.call_args_list] == [1, 2]

    def test_gives_up_after_max_attempts(self):
        @retry_with_exponential_backoff(max_attempts=2, jitter=False)
        def down():
            raise requests.exceptions.Timeout("timed out")

        with pytest.raises(requests.exceptions.Timeout):
            down()

    def test_ssl_error_not_retried(self, no_sleep):
        @retry_with_exponential_backoff(max_attempts=3)
        def bad_cert():
            raise requests.exceptions.SSLError("certificate verify failed")

        with pytest.raises(requests.exceptions.SSLError):
            bad_cert()
        no_sleep.assert_not_called()

    def test_other_errors_not_caught(self, no_sleep):
        @retry_with_exponential_backoff(max_attempts=3)
        def broken():
            raise ValueError("bug")

        with pytest.raises(ValueError):
            broken()
        no_sleep.assert_not_called()

    def test_delay_capped(self, no_sleep):
        @retry_with_exponential_backoff(max_attempts=4, initial_delay=10, max_delay=15, jitter=False)
        def down():
            raise requests.exceptions.ConnectionError("refused")

        with pytest.raises(requests.exceptions.ConnectionError):
            down()
        assert [c.args[0] for c in no_sleep.call_args_list] == [10, 15, 15]


def test_is_retryable():
    assert is_retryable(requests.exceptions.ConnectionError())
    assert not is_retryable(requests.exceptions.SSLError())
    assert not is_retryable(ValueError())


def test_retry_config_from_environment(monkeypatch):
    monkeypatch.setenv("ZOSCTL_RETRY_MAX_ATTEMPTS", "0")
    monkeypatch.setenv("ZOSCTL_RETRY_INITIAL_DELAY", "0.5")
    monkeypatch.setenv("ZOSCTL_RETRY_JITTER_ENABLED", "false")
    reset_retry_config()

    config = get_retry_config()

    assert config == RetryConfig(max_attempts=1, initial_delay=0.5, max_delay=30.0, jitter_enabled=False)
    assert get_retry_config() is config
