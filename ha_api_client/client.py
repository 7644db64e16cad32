"""
Home Assistant Client Module

This module provides a typed client for the Home Assistant REST API. Every
endpoint has a blocking method and a coroutine twin (``*_async``) that runs
the blocking call on the client's worker pool.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError

from .auth import TokenStore
from .config import HAClientConfig
from .exceptions import HAClientError, HAValidationError
from .executor import RequestExecutor
from .models import (
    ApiStatus,
    DomainModel,
    EntityIdModel,
    EntityState,
    EventListener,
    EventTypeModel,
    Service,
    ServiceCallModel,
)
from .timestamps import DEFAULT_FRACTION_DIGITS, TimestampCodec


logger = logging.getLogger(__name__)


def _validate_input(model_class, **kwargs):
    """
    Validate input parameters using Pydantic model

    Args:
        model_class: Pydantic model class to use for validation
        **kwargs: Parameters to validate

    Returns:
        Validated model instance

    Raises:
        HAValidationError: If validation fails
    """
    try:
        return model_class(**kwargs)
    except ValidationError as e:
        error_details = []
        fields = []
        for error in e.errors():
            field = ".".join(str(x) for x in error["loc"])
            fields.append(field)
            error_details.append(f"{field}: {error['msg']}")

        raise HAValidationError(
            f"Input validation failed: {'; '.join(error_details)}",
            field=fields[0] if fields else None,
            original_exception=e
        ) from e


class HomeAssistantClient:
    """
    Client for the Home Assistant REST API

    Example::

        with HomeAssistantClient("http://homeassistant.local:8123", token) as ha:
            for state in ha.get_states():
                print(state.entity_id, state.state)
    """

    def __init__(
        self,
        base_url: str,
        access_token: str,
        http_client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
        verify_ssl: bool = True,
        timestamp_fraction_digits: int = DEFAULT_FRACTION_DIGITS,
        serialize_requests: bool = True,
        max_workers: Optional[int] = None
    ):
        """
        Initialize the Home Assistant client

        Args:
            base_url: Base URL of the Home Assistant instance (e.g., "http://homeassistant.local:8123")
            access_token: Long-lived access token for authentication
            http_client: httpx client to send requests through; one is created
                (and owned) when omitted
            timeout: Transport timeout in seconds for an owned client
            verify_ssl: Verify certificates for an owned client
            timestamp_fraction_digits: Fractional-second digits in API timestamps (3 or 6)
            serialize_requests: GETs hold the shared lock and POSTs the
                exclusive lock for the whole round trip
            max_workers: Size of the worker pool used by the *_async methods.
                None means the ThreadPoolExecutor default, min(32, cpu_count + 4),
                so the pool is bounded rather than growing without limit

        Raises:
            HAValidationError: If base_url or access_token is missing or blank
            HAAuthenticationError: If the token is too short or has invalid characters
        """
        if not isinstance(base_url, str) or not base_url.strip():
            raise HAValidationError("Base URL cannot be null or empty", field="base_url")
        if not isinstance(access_token, str) or not access_token.strip():
            raise HAValidationError("Access token cannot be null or empty", field="access_token")

        token_store = TokenStore(access_token)

        try:
            codec = TimestampCodec(timestamp_fraction_digits)
        except ValueError as e:
            raise HAValidationError(str(e), field="timestamp_fraction_digits", original_exception=e) from e

        self._base_url = base_url.rstrip('/')
        self._owns_http_client = http_client is None
        if http_client is None:
            http_client = httpx.Client(timeout=timeout, verify=verify_ssl)

        self._executor = RequestExecutor(
            self._base_url,
            token_store,
            http_client,
            codec=codec,
            serialize_requests=serialize_requests,
        )
        self._closed = False
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="ha-api-client"
        )

        logger.info(f"HomeAssistantClient initialized for {self._base_url}")

    @classmethod
    def from_config(cls, config: HAClientConfig, http_client: Optional[httpx.Client] = None) -> 'HomeAssistantClient':
        """
        Create HomeAssistantClient from HAClientConfig object

        Args:
            config: Configuration object
            http_client: Optional httpx client to send requests through

        Returns:
            HomeAssistantClient: Configured client instance
        """
        return cls(
            base_url=config.base_url,
            access_token=config.access_token,
            http_client=http_client,
            timeout=config.timeout,
            verify_ssl=config.verify_ssl,
            timestamp_fraction_digits=config.timestamp_fraction_digits,
            serialize_requests=config.serialize_requests,
            max_workers=config.max_workers,
        )

    @classmethod
    def from_env(cls, prefix: str = 'HA_', env_file: Optional[Union[str, Path]] = None) -> 'HomeAssistantClient':
        """
        Create HomeAssistantClient from environment variables

        Raises:
            HAConfigurationError: If required environment variables are missing
        """
        return cls.from_config(HAClientConfig.from_env(prefix, env_file=env_file))

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def executor(self) -> RequestExecutor:
        return self._executor

    def update_token(self, access_token: str) -> None:
        """
        Replace the access token used for subsequent requests

        Raises:
            HAAuthenticationError: If the token fails validation
        """
        self._executor.token_store.set(access_token)
        logger.info(f"Access token replaced for {self._base_url}")

    def close(self) -> None:
        """Close an owned HTTP client and stop the worker pool"""
        if self._owns_http_client:
            self._executor.http_client.close()
        self._closed = True
        self._pool.shutdown(wait=False)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __eq__(self, other):
        if not isinstance(other, HomeAssistantClient):
            return NotImplemented
        return self._base_url == other._base_url

    def __hash__(self):
        return hash(self._base_url)

    def __repr__(self):
        return f"HomeAssistantClient(base_url={self._base_url!r})"

    # ------------------------------------------------------------------
    # Blocking API
    # ------------------------------------------------------------------

    def get_api_status(self) -> ApiStatus:
        """
        Check that the API is running and the token is accepted

        Returns:
            ApiStatus with the server message
        """
        return self._executor.execute_get("/api/", ApiStatus)

    def get_states(self) -> List[EntityState]:
        """
        Get all entity states

        Returns:
            List of EntityState objects, in server order
        """
        return self._executor.execute_get_list("/api/states", EntityState)

    def get_state(self, entity_id: str) -> EntityState:
        """
        Get the current state of an entity

        Args:
            entity_id: The entity ID (e.g., "light.living_room")

        Raises:
            HAValidationError: If entity_id is empty
            HAAPIError: If the server rejects the request (404 for unknown entities)
        """
        validated = _validate_input(EntityIdModel, entity_id=entity_id)
        return self._executor.execute_get(f"/api/states/{validated.entity_id}", EntityState)

    def get_events(self) -> List[EventListener]:
        """Get the event types the server knows about, with listener counts"""
        return self._executor.execute_get_list("/api/events", EventListener)

    def list_event_types(self) -> List[str]:
        """Get just the event type names"""
        return [listener.event for listener in self.get_events()]

    def fire_event(self, event_type: str, event_data: Optional[Dict[str, Any]] = None) -> None:
        """
        Fire an event on the Home Assistant event bus

        Args:
            event_type: Event type to fire
            event_data: Event payload; an empty object is sent when omitted
        """
        validated = _validate_input(EventTypeModel, event_type=event_type)
        self._executor.execute_post(f"/api/events/{validated.event_type}", event_data or {})

    def get_services(self) -> Dict[str, Dict[str, Service]]:
        """Get all services, keyed by domain then service name"""
        return self._executor.execute_get("/api/services", Dict[str, Dict[str, Service]])

    def get_domain_services(self, domain: str) -> Dict[str, Service]:
        """
        Get the services of one domain

        Raises:
            HAValidationError: If domain is empty
        """
        validated = _validate_input(DomainModel, domain=domain)
        return self._executor.execute_get(f"/api/services/{validated.domain}", Dict[str, Service])

    def call_service(
        self,
        domain: str,
        service: str,
        service_data: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Call a service

        Args:
            domain: Service domain (e.g., "light")
            service: Service name (e.g., "turn_on")
            service_data: Service payload; an empty object is sent when omitted

        Raises:
            HAValidationError: If domain or service is empty
        """
        validated = _validate_input(
            ServiceCallModel,
            domain=domain,
            service=service,
            service_data=service_data
        )
        self._executor.execute_post(
            f"/api/services/{validated.domain}/{validated.service}",
            validated.service_data
        )

    def get_config(self) -> Dict[str, Any]:
        """Get the server configuration"""
        return self._executor.execute_get("/api/config", Dict[str, Any])

    def get_error_log(self) -> List[Dict[str, Any]]:
        """Get the server error log entries"""
        return self._executor.execute_get_list("/api/error_log", Dict[str, Any])

    # ------------------------------------------------------------------
    # Async API
    # ------------------------------------------------------------------

    async def _run(self, func: Callable, *args):
        # Cancelling the awaiting task does not stop the worker; its result is dropped
        if self._closed:
            raise HAClientError("Client is closed")
        loop = asyncio.get_running_loop()
        try:
            future = loop.run_in_executor(self._pool, partial(func, *args))
        except RuntimeError as e:
            raise HAClientError("Client is closed", original_exception=e) from e
        return await future

    async def get_api_status_async(self) -> ApiStatus:
        return await self._run(self.get_api_status)

    async def get_states_async(self) -> List[EntityState]:
        return await self._run(self.get_states)

    async def get_state_async(self, entity_id: str) -> EntityState:
        return await self._run(self.get_state, entity_id)

    async def get_events_async(self) -> List[EventListener]:
        return await self._run(self.get_events)

    async def list_event_types_async(self) -> List[str]:
        return await self._run(self.list_event_types)

    async def fire_event_async(self, event_type: str, event_data: Optional[Dict[str, Any]] = None) -> None:
        return await self._run(self.fire_event, event_type, event_data)

    async def get_services_async(self) -> Dict[str, Dict[str, Service]]:
        return await self._run(self.get_services)

    async def get_domain_services_async(self, domain: str) -> Dict[str, Service]:
        return await self._run(self.get_domain_services, domain)

    async def call_service_async(
        self,
        domain: str,
        service: str,
        service_data: Optional[Dict[str, Any]] = None
    ) -> None:
        return await self._run(self.call_service, domain, service, service_data)

    async def get_config_async(self) -> Dict[str, Any]:
        return await self._run(self.get_config)

    async def get_error_log_async(self) -> List[Dict[str, Any]]:
        return await self._run(self.get_error_log)
