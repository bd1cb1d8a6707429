"""
Unit tests for the retry utilities module.
"""

from unittest.mock import MagicMock, patch

import pytest

from da_challenge_toolkit.shared.exceptions import (
    ConnectivityException,
    QueryException,
)
from da_challenge_toolkit.shared.retry import (
    DEFAULT_RETRYABLE_EXCEPTIONS,
    NO_RETRY_CONFIG,
    RetryConfig,
    retry_sync_operation,
)


@pytest.fixture(autouse=True)
def no_sleep():
    with patch("da_challenge_toolkit.shared.retry.time.sleep") as sleep:
        yield sleep


class TestRetrySyncOperation:
    """Tests for the retry_sync_operation function."""

    def test_succeeds_first_try(self):
        """Test function that succeeds on first attempt."""
        mock_fn = MagicMock(return_value="success")

        assert retry_sync_operation(mock_fn, max_attempts=3) == "success"
        assert mock_fn.call_count == 1

    def test_basic_operation(self):
        """Test basic sync operation retry."""
        call_count = [0]

        def failing_then_success():
            call_count[0] += 1
            if call_count[0] < 3:
                raise ConnectivityException("fail")
            return "success"

        result = retry_sync_operation(
            failing_then_success,
            max_attempts=3,
            base_delay=0.01,
        )
        assert result == "success"
        assert call_count[0] == 3

    def test_fails_after_max_attempts(self):
        """Test function that always fails exhausts retries."""
        mock_fn = MagicMock(side_effect=ConnectivityException("always fail"))

        with pytest.raises(ConnectivityException, match="always fail"):
            retry_sync_operation(mock_fn, max_attempts=3, base_delay=0.01)

        assert mock_fn.call_count == 3

    def test_non_retryable_propagates_immediately(self):
        """Query errors are answers, not transient failures."""
        mock_fn = MagicMock(side_effect=QueryException("reverted"))

        with pytest.raises(QueryException):
            retry_sync_operation(mock_fn, max_attempts=3, base_delay=0.01)

        assert mock_fn.call_count == 1

    def test_exponential_backoff(self, no_sleep):
        """Delays double each attempt."""
        mock_fn = MagicMock(side_effect=ConnectivityException("fail"))

        with pytest.raises(ConnectivityException):
            retry_sync_operation(
                mock_fn, max_attempts=4, base_delay=1.0, max_delay=30.0
            )

        delays = [c.args[0] for c in no_sleep.call_args_list]
        assert delays == [1.0, 2.0, 4.0]

    def test_max_delay_cap(self, no_sleep):
        mock_fn = MagicMock(side_effect=ConnectivityException("fail"))

        with pytest.raises(ConnectivityException):
            retry_sync_operation(
                mock_fn, max_attempts=4, base_delay=5.0, max_delay=8.0
            )

        delays = [c.args[0] for c in no_sleep.call_args_list]
        assert delays == [5.0, 8.0, 8.0]

    def test_with_args(self):
        """Test sync operation with arguments."""
        mock_fn = MagicMock(return_value="result")

        result = retry_sync_operation(
            mock_fn,
            "arg1",
            "arg2",
            max_attempts=3,
            kwarg1="value1",
        )

        assert result == "result"
        mock_fn.assert_called_once_with("arg1", "arg2", kwarg1="value1")

    def test_single_attempt(self, no_sleep):
        mock_fn = MagicMock(side_effect=ConnectivityException("down"))

        with pytest.raises(ConnectivityException):
            retry_sync_operation(mock_fn, max_attempts=1)

        assert mock_fn.call_count == 1
        no_sleep.assert_not_called()

    def test_custom_retryable_exceptions(self):
        mock_fn = MagicMock(side_effect=[ValueError("fail"), "ok"])

        result = retry_sync_operation(
            mock_fn,
            max_attempts=2,
            retryable_exceptions=(ValueError,),
        )
        assert result == "ok"


class TestRetryConfig:
    """Tests for RetryConfig class."""

    def test_default_config(self):
        """Test default configuration values."""
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.base_delay == 1.0
        assert config.max_delay == 30.0
        assert config.exponential is True
        assert config.retryable_exceptions == DEFAULT_RETRYABLE_EXCEPTIONS

    def test_custom_config(self):
        """Test custom configuration values."""
        config = RetryConfig(
            max_attempts=5,
            base_delay=0.5,
            max_delay=10.0,
            exponential=False,
            retryable_exceptions=(ValueError, TypeError),
        )
        assert config.max_attempts == 5
        assert config.base_delay == 0.5
        assert config.max_delay == 10.0
        assert config.exponential is False
        assert config.retryable_exceptions == (ValueError, TypeError)

    def test_at_least_one_attempt(self):
        assert RetryConfig(max_attempts=0).max_attempts == 1

    def test_with_attempts_keeps_backoff(self):
        config = RetryConfig(max_attempts=1, base_delay=0.5, max_delay=4.0)

        more = config.with_attempts(4)

        assert more.max_attempts == 4
        assert (more.base_delay, more.max_delay) == (0.5, 4.0)
        assert config.max_attempts == 1

    def test_run(self):
        config = RetryConfig(max_attempts=2, base_delay=0.01)
        mock_fn = MagicMock(
            side_effect=[ConnectivityException("fail"), "success"]
        )

        assert config.run(mock_fn, 1, key="v") == "success"
        mock_fn.assert_called_with(1, key="v")

    def test_no_retry_config(self, no_sleep):
        mock_fn = MagicMock(side_effect=ConnectivityException("down"))

        with pytest.raises(ConnectivityException):
            NO_RETRY_CONFIG.run(mock_fn)

        assert NO_RETRY_CONFIG.max_attempts == 1
        assert mock_fn.call_count == 1
        no_sleep.assert_not_called()
