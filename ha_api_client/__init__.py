"""
Home Assistant API Client Package

This package provides a typed client for the Home Assistant REST API:
bearer-token authentication, one method per endpoint and pydantic models
for every response.
"""

import logging

from .auth import TokenStore, ReadWriteLock, validate_token, MIN_TOKEN_LENGTH
from .client import HomeAssistantClient
from .config import HAClientConfig
from .exceptions import (
    HAClientError,
    HAValidationError,
    HAAuthenticationError,
    HAConnectionError,
    HAAPIError,
    HAParseError,
    HAEmptyResponseError,
    HAConfigurationError,
    ErrorSeverity,
    create_ha_error_from_response
)
from .executor import RequestExecutor
from .models import (
    ApiStatus,
    EntityState,
    Event,
    EventListener,
    Service,
    ServiceField,
    ServiceTarget,
)
from .timestamps import (
    TimestampCodec,
    TimestampParseError,
    HATimestamp,
    DEFAULT_FRACTION_DIGITS
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"

__all__ = [
    # Client classes
    "HomeAssistantClient",
    "RequestExecutor",

    # Authentication
    "TokenStore",
    "ReadWriteLock",
    "validate_token",
    "MIN_TOKEN_LENGTH",

    # Configuration
    "HAClientConfig",

    # Exception classes
    "HAClientError",
    "HAValidationError",
    "HAAuthenticationError",
    "HAConnectionError",
    "HAAPIError",
    "HAParseError",
    "HAEmptyResponseError",
    "HAConfigurationError",
    "ErrorSeverity",
    "create_ha_error_from_response",

    # Response models
    "ApiStatus",
    "EntityState",
    "Event",
    "EventListener",
    "Service",
    "ServiceField",
    "ServiceTarget",

    # Timestamps
    "TimestampCodec",
    "TimestampParseError",
    "HATimestamp",
    "DEFAULT_FRACTION_DIGITS",
]
