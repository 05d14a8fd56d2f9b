"""
Infrastructure layer.

Shared building blocks with no UI and no API knowledge:
- config: settings resolution (YAML + dotenv + env)
- logging: logger manager
- exceptions: exception hierarchy + error handling helpers
- clock: replaceable "today" and lenient date parsing
"""

from .exceptions import (
    FleetDashException,
    ConfigError,
    ValidationError,
    NetworkError,
    APIError,
    AuthenticationError,
    NotFoundError,
    ProcessingError,
    FileOperationError,
    handle_errors,
    handle_async_errors,
    ErrorHandler,
)
from .logging import LoggerManager, get_logger, set_log_level
from .clock import Clock, SystemClock, MockClock, get_clock, set_clock, today, parse_date, parse_datetime, format_date, days_until
from .config import Settings, load_settings, get_settings, reset_settings

__all__ = [
    "FleetDashException",
    "ConfigError",
    "ValidationError",
    "NetworkError",
    "APIError",
    "AuthenticationError",
    "NotFoundError",
    "ProcessingError",
    "FileOperationError",
    "handle_errors",
    "handle_async_errors",
    "ErrorHandler",
    "LoggerManager",
    "get_logger",
    "set_log_level",
    "Clock",
    "SystemClock",
    "MockClock",
    "get_clock",
    "set_clock",
    "today",
    "parse_date",
    "parse_datetime",
    "format_date",
    "days_until",
    "Settings",
    "load_settings",
    "get_settings",
    "reset_settings",
]
