"""
Infrastructure layer - logging

Root handlers for the dashboard process: a console stream, an optional log
file from ``Settings.log_file``, and a filter that masks bearer and QR tokens
before any record is written.
"""

import logging
import re
import sys
from pathlib import Path
from typing import Dict, Optional

CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] [%(name)s] %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s] [%(name)s:%(lineno)d] %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# third-party loggers that drown the dashboard's own messages at INFO
QUIET_LOGGERS = ("aiohttp.access", "aiohttp.client", "watchdog", "PIL", "urllib3")

_BEARER = re.compile(r"(Bearer\s+)[\w.\-~+/=|]+")
_TOKEN_VALUE = re.compile(r"""(['"]?(?:auth_)?token['"]?\s*[:=]\s*['"]?)([\w\-]{8})[\w\-]*""")


def redact(text: str) -> str:
    """Mask bearer credentials; token values keep their first 8 characters."""
    text = _BEARER.sub(r"\1***", text)
    return _TOKEN_VALUE.sub(r"\1\2...", text)


class TokenRedactingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        # the same record reaches every root handler
        if getattr(record, "_redacted", False):
            return True
        record._redacted = True
        message = record.getMessage()
        masked = redact(message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


class LoggerManager:
    """Process-wide logging setup; safe to call on every Streamlit rerun."""

    _loggers: Dict[str, logging.Logger] = {}
    _configured: bool = False
    _log_file: Optional[Path] = None
    _file_handler: Optional[logging.FileHandler] = None
    _level: int = logging.INFO
    _filter = TokenRedactingFilter()

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if not cls._configured:
            cls._configure_logging()
        if name not in cls._loggers:
            cls._loggers[name] = logging.getLogger(name)
        return cls._loggers[name]

    @classmethod
    def _configure_logging(cls) -> None:
        root = logging.getLogger()
        root.setLevel(cls._level)

        # a host (streamlit, pytest) may already own the console
        if not root.handlers:
            console = logging.StreamHandler(sys.stdout)
            console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=DATE_FORMAT))
            root.addHandler(console)
        for handler in root.handlers:
            if cls._filter not in handler.filters:
                handler.addFilter(cls._filter)

        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        cls._configured = True
        if cls._log_file and cls._file_handler is None:
            cls._attach_file_handler(cls._log_file)

    @classmethod
    def _attach_file_handler(cls, log_file: Path) -> None:
        root = logging.getLogger()
        cls._detach_file_handler()
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(log_file, encoding='utf-8')
        except OSError as e:
            root.warning(f"Could not open log file {log_file}: {e}")
            return
        handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        handler.addFilter(cls._filter)
        root.addHandler(handler)
        cls._file_handler = handler

    @classmethod
    def _detach_file_handler(cls) -> None:
        if cls._file_handler is not None:
            logging.getLogger().removeHandler(cls._file_handler)
            cls._file_handler.close()
            cls._file_handler = None

    @classmethod
    def set_log_file(cls, log_file: Optional[Path]) -> None:
        """Write to ``log_file`` from now on; ``None`` stops file logging."""
        cls._log_file = log_file
        if log_file is None:
            cls._detach_file_handler()
        elif cls._configured:
            cls._attach_file_handler(log_file)

    @classmethod
    def set_level(cls, level: str) -> None:
        value = logging.getLevelName(str(level).upper())
        if isinstance(value, int):
            cls._level = value
            logging.getLogger().setLevel(value)

    @classmethod
    def configure_from_settings(cls, settings) -> None:
        """Apply ``log_level`` and ``log_file``; repeated calls with the same settings do nothing."""
        cls.set_level(settings.log_level)
        log_file = Path(settings.log_file) if settings.log_file else None
        if log_file != cls._log_file:
            cls.set_log_file(log_file)
        if not cls._configured:
            cls._configure_logging()

    @classmethod
    def reset(cls) -> None:
        """Drop the file handler and forget all state (tests)."""
        cls._detach_file_handler()
        for handler in logging.getLogger().handlers:
            handler.removeFilter(cls._filter)
        cls._loggers.clear()
        cls._configured = False
        cls._log_file = None
        cls._level = logging.INFO


def get_logger(name: str) -> logging.Logger:
    return LoggerManager.get_logger(name)


def set_log_level(level: str) -> None:
    LoggerManager.set_level(level)
