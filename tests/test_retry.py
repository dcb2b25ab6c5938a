"""Tests for retry decorator and logger context."""
import logging
import unittest
from unittest.mock import patch

from finadvisor.utils.exceptions import LLMError, RetryableLLMError
from finadvisor.utils.logger import UserContextFilter
from finadvisor.utils.retry import retry_with_backoff


class TestRetryWithBackoff(unittest.TestCase):
    """Test retry_with_backoff functionality."""

    @patch("finadvisor.utils.retry.time.sleep")
    def test_retries_then_succeeds(self, mock_sleep):
        """Test a retryable error is retried."""
        calls = []

        @retry_with_backoff(max_attempts=2, backoff_factor=2.0)
        def flaky():
            calls.append(1)
            if len(calls) == 1:
                raise RetryableLLMError("temporary")
            return "ok"

        self.assertEqual(flaky(), "ok")
        self.assertEqual(len(calls), 2)
        mock_sleep.assert_called_once_with(1.0)

    @patch("finadvisor.utils.retry.time.sleep")
    def test_raises_after_max_attempts(self, mock_sleep):
        """Test the last error propagates."""
        @retry_with_backoff(max_attempts=2)
        def always_fails():
            raise RetryableLLMError("still down")

        with self.assertRaises(RetryableLLMError):
            always_fails()
        self.assertEqual(mock_sleep.call_count, 1)

    def test_non_retryable_not_retried(self):
        """Test errors outside retryable_exceptions propagate immediately."""
        calls = []

        @retry_with_backoff(max_attempts=2)
        def broken():
            calls.append(1)
            raise LLMError("empty completion")

        with self.assertRaises(LLMError):
            broken()
        self.assertEqual(len(calls), 1)

    def test_invalid_max_attempts(self):
        with self.assertRaises(ValueError):
            retry_with_backoff(max_attempts=0)


class TestUserContextFilter(unittest.TestCase):
    """Test log records are stamped with the user."""

    def test_default_and_set_user(self):
        log_filter = UserContextFilter()
        record = logging.LogRecord("finadvisor", logging.INFO, __file__, 1, "msg", None, None)

        log_filter.filter(record)
        self.assertEqual(record.user_id, "system")

        log_filter.user_id = "user-1"
        log_filter.filter(record)
        self.assertEqual(record.user_id, "user-1")


if __name__ == "__main__":
    unittest.main()
