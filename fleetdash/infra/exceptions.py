"""
Infrastructure layer - exceptions

Standard exception classes and error handling helpers.
"""

from typing import Any, Dict, Optional
from functools import wraps


class FleetDashException(Exception):
    """Base exception for the dashboard"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "UNKNOWN_ERROR"
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class ConfigError(FleetDashException):
    """Configuration error"""
    def __init__(self, message: str, config_key: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, "CONFIG_ERROR", {"config_key": config_key, **kwargs})


class ValidationError(FleetDashException):
    """Client-side input validation error"""
    def __init__(self, message: str, field: Optional[str] = None, value: Any = None, **kwargs) -> None:
        super().__init__(message, "VALIDATION_ERROR", {"field": field, "value": value, **kwargs})


class NetworkError(FleetDashException):
    """Transport level failure (connection refused, timeout, DNS)"""
    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None, **kwargs) -> None:
        super().__init__(message, "NETWORK_ERROR", {"url": url, "status_code": status_code, **kwargs})


class APIError(FleetDashException):
    """Non-2xx response from the fleet API"""
    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: Optional[str] = None,
        response: Any = None,
        **kwargs
    ) -> None:
        super().__init__(message, "API_ERROR", {"status_code": status_code, "url": url, "response": response, **kwargs})
        self.status_code = status_code
        self.url = url
        self.response = response

    @property
    def server_message(self) -> Optional[str]:
        """``message`` field of the JSON error body, when the server sent one."""
        if isinstance(self.response, dict):
            msg = self.response.get("message")
            if msg:
                return str(msg)
        return None

    @property
    def validation_errors(self) -> Dict[str, Any]:
        """Per-field ``errors`` block of a 422 response, or empty."""
        if isinstance(self.response, dict) and isinstance(self.response.get("errors"), dict):
            return self.response["errors"]
        return {}


class AuthenticationError(APIError):
    """401 from the API; the stored session has been cleared"""
    def __init__(self, message: str = "Session expired, please sign in again", **kwargs) -> None:
        super().__init__(message, status_code=401, **kwargs)
        self.error_code = "AUTH_ERROR"


class NotFoundError(APIError):
    """404 from the API, or a public token that resolves to nothing"""
    def __init__(self, message: str = "Not found", **kwargs) -> None:
        kwargs.setdefault("status_code", 404)
        super().__init__(message, **kwargs)
        self.error_code = "NOT_FOUND"


class ProcessingError(FleetDashException):
    """Unexpected failure while handling data"""
    def __init__(self, message: str, data_type: Optional[str] = None, data_id: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, "PROCESSING_ERROR", {"data_type": data_type, "data_id": data_id, **kwargs})


class FileOperationError(FleetDashException):
    """Local file read/write error"""
    def __init__(self, message: str, file_path: Optional[str] = None, operation: Optional[str] = None, **kwargs) -> None:
        super().__init__(message, "FILE_ERROR", {"file_path": file_path, "operation": operation, **kwargs})


# =============================================================================
# Error handling decorators
# =============================================================================

def handle_errors(logger=None):
    """
    Unified error handling decorator

    Args:
        logger: logger to use; defaults to this module's logger
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            _logger = logger
            if _logger is None:
                from .logging import get_logger
                _logger = get_logger(__name__)
            try:
                return func(*args, **kwargs)
            except FleetDashException as e:
                _logger.error(f"[{e.error_code}] {e.message}")
                raise
            except Exception as e:
                error = ProcessingError(f"Unexpected error: {str(e)}", data_type="unknown")
                _logger.error(f"Unhandled exception: {str(e)}", exc_info=True)
                raise error from e
        return wrapper
    return decorator


def handle_async_errors(logger=None):
    """
    Async variant of ``handle_errors``
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            _logger = logger
            if _logger is None:
                from .logging import get_logger
                _logger = get_logger(__name__)
            try:
                return await func(*args, **kwargs)
            except FleetDashException as e:
                _logger.error(f"[{e.error_code}] {e.message}")
                raise
            except Exception as e:
                error = ProcessingError(f"Unexpected async error: {str(e)}", data_type="unknown")
                _logger.error(f"Unhandled async exception: {str(e)}", exc_info=True)
                raise error from e
        return wrapper
    return decorator


class ErrorHandler:
    """Error handling helper"""

    def __init__(self, logger=None):
        if logger is None:
            from .logging import get_logger
            logger = get_logger(__name__)
        self.logger = logger

    def handle_and_log(self, error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Log an error with optional context

        Args:
            error: the exception
            context: extra context (page, operation, ids)
        """
        context = context or {}

        if isinstance(error, FleetDashException):
            self.logger.error(f"[{error.error_code}] {error.message} context={context}")
            self.logger.debug(f"Error payload: {error.to_dict()}")
        else:
            self.logger.error(f"System error: {str(error)} context={context}", exc_info=True)

    def user_message(self, error: Exception, fallback: str = "Please try again") -> str:
        """Text to show in an in-page error or toast"""
        if isinstance(error, APIError) and error.server_message:
            return error.server_message
        if isinstance(error, FleetDashException):
            return error.message
        return fallback
