"""
Unit tests: clock, exceptions and logging helpers
"""
import logging
from datetime import date, datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from fleetdash.infra import clock
from fleetdash.infra.clock import MockClock, days_until, format_date, parse_date, parse_datetime, set_clock
from fleetdash.infra.exceptions import (
    APIError,
    AuthenticationError,
    ErrorHandler,
    NetworkError,
    NotFoundError,
    ProcessingError,
    handle_async_errors,
    handle_errors,
)
from fleetdash.infra.logging import LoggerManager, get_logger, redact


class TestClock:
    """Replaceable clock and lenient date parsing"""

    @pytest.fixture(autouse=True)
    def fixed_clock(self):
        mock = MockClock(datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc))
        set_clock(mock)
        yield mock
        set_clock(clock.SystemClock())

    def test_mock_clock(self, fixed_clock):
        assert clock.today() == date(2024, 3, 10)
        fixed_clock.advance(timedelta(days=1))
        assert clock.today() == date(2024, 3, 11)

    @pytest.mark.parametrize("value,expected", [
        ("2024-03-15", date(2024, 3, 15)),
        ("2024-03-15T23:00:00.000000Z", date(2024, 3, 15)),
        (datetime(2024, 3, 15, 8), date(2024, 3, 15)),
        ("", None),
        ("not a date", None),
        (None, None),
    ])
    def test_parse_date(self, value, expected):
        assert parse_date(value) == expected

    def test_parse_datetime_assumes_utc(self):
        assert parse_datetime("2024-03-15T10:00:00").tzinfo == timezone.utc
        assert parse_datetime("garbage") is None

    def test_format_and_days_until(self):
        assert format_date("2024-03-15T10:00:00Z") == "2024-03-15"
        assert format_date(None) == ""
        assert days_until("2024-03-15") == 5
        assert days_until("2024-03-01") == -9


class TestExceptions:
    """Error types and the handler helpers"""

    def test_server_message_and_validation_errors(self):
        err = APIError("Request failed", status_code=422,
                       response={"message": "The given data was invalid.", "errors": {"email": ["taken"]}})
        assert err.server_message == "The given data was invalid."
        assert err.validation_errors == {"email": ["taken"]}
        assert APIError("x", response="<html>").validation_errors == {}

    def test_status_specific_errors(self):
        assert AuthenticationError().status_code == 401
        assert AuthenticationError().error_code == "AUTH_ERROR"
        assert NotFoundError().status_code == 404
        assert isinstance(NotFoundError(), APIError)

    def test_user_message(self):
        handler = ErrorHandler(MagicMock())
        assert handler.user_message(APIError("x", response={"message": "Nope"})) == "Nope"
        assert handler.user_message(NetworkError("Request timed out")) == "Request timed out"
        assert handler.user_message(RuntimeError("boom"), fallback="later") == "later"

    def test_handle_errors_wraps_unexpected(self):
        @handle_errors(logger=MagicMock())
        def explode():
            raise KeyError("k")

        with pytest.raises(ProcessingError):
            explode()

    async def test_handle_async_errors_keeps_known(self):
        @handle_async_errors(logger=MagicMock())
        async def missing():
            raise NotFoundError("gone")

        with pytest.raises(NotFoundError):
            await missing()


class TestLogging:
    @pytest.fixture(autouse=True)
    def reset(self):
        root = logging.getLogger()
        level = root.level
        LoggerManager.reset()
        yield
        LoggerManager.reset()
        root.setLevel(level)

    def test_logger_is_cached(self):
        assert get_logger("fleetdash.test") is get_logger("fleetdash.test")

    def test_settings_apply_level_and_file(self, tmp_path):
        log_file = tmp_path / "logs" / "fleetdash.log"
        LoggerManager.configure_from_settings(MagicMock(log_level="debug", log_file=str(log_file)))

        assert logging.getLogger().level == logging.DEBUG
        get_logger("fleetdash.test").debug("Vehicle 7 loaded")
        assert "[DEBUG] [fleetdash.test:" in log_file.read_text(encoding="utf-8")

    def test_same_settings_keep_one_file_handler(self, tmp_path):
        settings = MagicMock(log_level="info", log_file=str(tmp_path / "a.log"))
        LoggerManager.configure_from_settings(settings)
        LoggerManager.configure_from_settings(settings)
        log_path = str(tmp_path / "a.log")
        file_handlers = [h for h in logging.getLogger().handlers if getattr(h, "baseFilename", None) == log_path]
        assert len(file_handlers) == 1

    def test_blank_log_file_stops_file_logging(self, tmp_path):
        LoggerManager.configure_from_settings(MagicMock(log_level="info", log_file=str(tmp_path / "a.log")))
        LoggerManager.configure_from_settings(MagicMock(log_level="info", log_file=None))
        assert LoggerManager._file_handler is None
        log_path = str(tmp_path / "a.log")
        assert not any(getattr(h, "baseFilename", None) == log_path for h in logging.getLogger().handlers)

    def test_tokens_are_masked_in_the_file(self, tmp_path):
        log_file = tmp_path / "fleetdash.log"
        LoggerManager.configure_from_settings(MagicMock(log_level="info", log_file=str(log_file)))
        get_logger("fleetdash.test").warning("Sent Authorization: Bearer %s", "abc.def-123")
        text = log_file.read_text(encoding="utf-8")
        assert "Bearer ***" in text
        assert "abc.def-123" not in text

    def test_unknown_level_is_ignored(self):
        LoggerManager.set_level("debug")
        LoggerManager.set_level("chatty")
        assert logging.getLogger().level == logging.DEBUG


class TestRedact:
    @pytest.mark.parametrize("text,expected", [
        ("Authorization: Bearer 12|abcDEF", "Authorization: Bearer ***"),
        ("context={'token': 'qr-9f8e7d6c5b4a'}", "context={'token': 'qr-9f8e7...'}"),
        ("auth_token=abcdefghijkl", "auth_token=abcdefgh..."),
        ("token=short", "token=short"),
        ("Public lookup failed for token abcd1234...", "Public lookup failed for token abcd1234..."),
    ])
    def test_redact(self, text, expected):
        assert redact(text) == expected


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
