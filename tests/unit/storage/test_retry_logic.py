"""Unit tests for storage.retry_logic module."""

from unittest.mock import MagicMock, patch

import pytest

from docpub.storage import StorageError, StorageUnavailableError
from docpub.storage.retry_logic import _is_transient_error, retry_on_transient


class TestIsTransientError:
    """Test cases for _is_transient_error function."""

    def test_detects_unavailable_error(self):
        """StorageUnavailableError is transient."""
        assert _is_transient_error(StorageUnavailableError("https://blobs")) is True

    @pytest.mark.parametrize("status", [429, 502, 503, 504])
    def test_detects_status_code_attribute(self, status):
        """Transient status codes on the exception are detected."""
        error = Exception("API error")
        error.status_code = status
        assert _is_transient_error(error) is True

    def test_detects_response_status_code(self):
        """Transient status codes on an attached response are detected."""
        error = Exception("API error")
        error.response = MagicMock()
        error.response.status_code = 503
        assert _is_transient_error(error) is True

    def test_other_errors_are_not_transient(self):
        """Plain errors and 404s are not retried."""
        error = Exception("Not found")
        error.status_code = 404
        assert _is_transient_error(error) is False
        assert _is_transient_error(StorageError("put", "k", "HTTP 400")) is False


class TestRetryOnTransient:
    """Test cases for retry_on_transient function."""

    def test_success_on_first_attempt(self):
        """Returns the result of a successful call."""
        mock_func = MagicMock(return_value="ok")
        assert retry_on_transient(mock_func, "a", key="b") == "ok"
        mock_func.assert_called_once_with("a", key="b")

    @patch('time.sleep')
    def test_retries_then_succeeds(self, mock_sleep):
        """Transient failures are retried with exponential backoff."""
        # Arrange
        transient = StorageUnavailableError("https://blobs", "HTTP 503")
        mock_func = MagicMock(side_effect=[transient, transient, "ok"])

        # Act
        result = retry_on_transient(mock_func)

        # Assert
        assert result == "ok"
        assert mock_func.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    @patch('time.sleep')
    def test_gives_up_after_max_retries(self, mock_sleep):
        """Persistent failures raise StorageUnavailableError after 3 retries."""
        mock_func = MagicMock(side_effect=StorageUnavailableError("https://blobs", "HTTP 503"))

        with pytest.raises(StorageUnavailableError) as exc_info:
            retry_on_transient(mock_func)

        assert mock_func.call_count == 4
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2, 4]
        assert exc_info.value.endpoint == "https://blobs"

    @patch('time.sleep')
    def test_non_transient_error_not_retried(self, mock_sleep):
        """Other errors propagate immediately."""
        mock_func = MagicMock(side_effect=ValueError("bad"))

        with pytest.raises(ValueError):
            retry_on_transient(mock_func)

        mock_func.assert_called_once()
        mock_sleep.assert_not_called()
