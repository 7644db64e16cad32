"""
Home Assistant API Client Exceptions

Exception hierarchy for the Home Assistant REST client. Every failure the
client surfaces is an ``HAClientError``; subclasses tag the kind of failure
while the message keeps a human-readable description of it.
"""

import logging
from enum import Enum
from typing import Dict, Any, Optional

import httpx


logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class HAClientError(Exception):
    """
    Base exception class for Home Assistant client errors
    """

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        details: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.severity = severity
        self.details = details or {}
        self.original_exception = original_exception
        self._log_error()

    def _log_error(self):
        """Log the error based on severity"""
        log_message = f"{self.__class__.__name__}: {self.message}"
        if self.details:
            log_message += f" - Details: {self.details}"

        if self.severity == ErrorSeverity.LOW:
            logger.debug(log_message)
        elif self.severity == ErrorSeverity.MEDIUM:
            logger.warning(log_message)
        elif self.severity == ErrorSeverity.HIGH:
            logger.error(log_message)
        elif self.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for serialization"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "severity": self.severity.value,
            "details": self.details
        }


class HAValidationError(HAClientError):
    """Raised when constructor or call arguments are invalid, before any I/O"""

    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        details = kwargs.pop('details', {})
        if field:
            details['field'] = field
        super().__init__(message, severity=ErrorSeverity.LOW, details=details, **kwargs)


class HAAuthenticationError(HAClientError):
    """Raised when an access token fails validation"""

    def __init__(self, message: str = "Authentication failed", **kwargs):
        super().__init__(message, severity=ErrorSeverity.CRITICAL, **kwargs)


class HAConnectionError(HAClientError):
    """Raised when the transport fails (connection refused, timeout, DNS, I/O)"""

    def __init__(self, message: str = "Error communicating with Home Assistant API", **kwargs):
        super().__init__(message, severity=ErrorSeverity.HIGH, **kwargs)


class HAAPIError(HAClientError):
    """Raised when Home Assistant answers with a non-2xx status"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop('details', {})
        if status_code:
            details['status_code'] = status_code
        if body is not None:
            details['body'] = body
        self.status_code = status_code
        self.body = body
        super().__init__(message, details=details, **kwargs)

    @property
    def is_authentication_error(self) -> bool:
        return self.status_code == 401

    @property
    def is_server_error(self) -> bool:
        return self.status_code is not None and 500 <= self.status_code < 600


class HAParseError(HAClientError):
    """Raised when a response body is not JSON or does not fit the expected shape"""

    def __init__(self, message: str = "Error parsing API response", **kwargs):
        super().__init__(message, **kwargs)


class HAEmptyResponseError(HAClientError):
    """Raised when a 2xx response carries no body where one was expected"""

    def __init__(self, message: str = "Empty response from API", **kwargs):
        super().__init__(message, **kwargs)


class HAConfigurationError(HAClientError):
    """Raised when there's a configuration issue"""

    def __init__(self, message: str = "Configuration error", **kwargs):
        super().__init__(message, severity=ErrorSeverity.CRITICAL, **kwargs)


def create_ha_error_from_response(response: httpx.Response) -> HAAPIError:
    """
    Create an HAAPIError from a non-2xx HTTP response

    The message always contains the numeric status code and, when present,
    the raw body text, so callers matching on "401" or "500" keep working.

    Args:
        response: HTTP response object

    Returns:
        HAAPIError describing the response
    """
    status_code = response.status_code
    body = response.text if response.content else None

    message = f"API request failed with status code {status_code}: {body}"
    severity = ErrorSeverity.MEDIUM

    if status_code == 401:
        message = f"Authentication failed: {message}"
        severity = ErrorSeverity.CRITICAL
    elif 500 <= status_code < 600:
        message = f"Server error: {message}"
        severity = ErrorSeverity.HIGH

    return HAAPIError(message, status_code=status_code, body=body, severity=severity)
