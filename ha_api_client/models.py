"""
Pydantic models for the Home Assistant REST API

Response models mirror the JSON documents returned by the API (snake_case
field names as on the wire, unknown fields ignored). They are frozen:
values are built once by decoding and never mutated afterwards.

Input models validate path parameters before a request is issued.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .timestamps import HATimestamp


class HAResponseModel(BaseModel):
    """Base for decoded API documents"""
    model_config = ConfigDict(frozen=True, extra='ignore')


class ApiStatus(HAResponseModel):
    """Response of ``GET /api/``"""
    message: Optional[str] = None
    version: Optional[str] = None


class EntityState(HAResponseModel):
    """State of one entity as returned by ``/api/states``"""
    entity_id: str
    state: Optional[str] = None
    attributes: Any = None
    last_changed: Optional[HATimestamp] = None
    last_updated: Optional[HATimestamp] = None
    last_reported: Optional[HATimestamp] = None
    context: Optional[Dict[str, Any]] = None

    @property
    def domain(self) -> str:
        """Domain prefix of the entity id (``light`` for ``light.kitchen``)"""
        return self.entity_id.split('.', 1)[0]


class Event(HAResponseModel):
    """A fired event record"""
    event_type: Optional[str] = None
    event_data: Any = None
    origin: Optional[str] = None
    time_fired: Optional[HATimestamp] = None
    context: Optional[Dict[str, Any]] = None


class EventListener(HAResponseModel):
    """
    One entry of ``GET /api/events``.

    The server sends ``{"event": ..., "listener_count": ...}`` objects; a bare
    event type string is accepted as well.
    """
    event: str
    listener_count: Optional[int] = None

    @model_validator(mode='before')
    @classmethod
    def accept_bare_name(cls, data):
        if isinstance(data, str):
            return {"event": data}
        return data


class ServiceField(HAResponseModel):
    """Description of one parameter a service accepts"""
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    required: Optional[bool] = None
    example: Any = None
    min: Any = None
    max: Any = None


class ServiceTarget(HAResponseModel):
    """What a service can be targeted at"""
    entity: Optional[bool] = None
    device: Optional[bool] = None
    area: Optional[bool] = None
    entity_registry_entry_id: Optional[bool] = None
    device_registry_entry_id: Optional[bool] = None
    area_registry_entry_id: Optional[bool] = None


class Service(HAResponseModel):
    """A service exposed by a domain"""
    domain: Optional[str] = None
    service: Optional[str] = None
    description: Optional[str] = None
    fields: Dict[str, ServiceField] = Field(default_factory=dict)
    target: Optional[ServiceTarget] = None


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


def _require_non_blank(v, label: str):
    if not isinstance(v, str) or not v.strip():
        raise ValueError(f"{label} cannot be null or empty")
    return v


class EntityIdModel(BaseModel):
    """Validates an entity id path parameter"""
    entity_id: Optional[str] = Field(..., description="Home Assistant entity ID")

    @field_validator('entity_id', mode='before')
    @classmethod
    def validate_entity_id(cls, v):
        return _require_non_blank(v, "Entity ID")


class EventTypeModel(BaseModel):
    """Validates an event type path parameter"""
    event_type: Optional[str] = Field(..., description="Event type to fire")

    @field_validator('event_type', mode='before')
    @classmethod
    def validate_event_type(cls, v):
        return _require_non_blank(v, "Event type")


class DomainModel(BaseModel):
    """Validates a service domain path parameter"""
    domain: Optional[str] = Field(..., description="Service domain (e.g. 'light')")

    @field_validator('domain', mode='before')
    @classmethod
    def validate_domain(cls, v):
        return _require_non_blank(v, "Domain")


class ServiceCallModel(DomainModel):
    """Validates the path parameters of a service call"""
    service: Optional[str] = Field(..., description="Service name (e.g. 'turn_on')")
    service_data: Dict[str, Any] = Field(default_factory=dict, description="Service payload")

    @field_validator('service', mode='before')
    @classmethod
    def validate_service(cls, v):
        return _require_non_blank(v, "Service")

    @field_validator('service_data', mode='before')
    @classmethod
    def default_service_data(cls, v):
        return {} if v is None else v
