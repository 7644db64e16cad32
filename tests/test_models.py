"""Tests for the response and input validation models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest
from pydantic import ValidationError

from ha_api_client.models import (
    EntityIdModel,
    EntityState,
    Event,
    EventListener,
    Service,
    ServiceCallModel,
)
from ha_api_client.timestamps import CODEC_CONTEXT_KEY, TimestampCodec

pytestmark = pytest.mark.unit


class TestEntityState:
    def test_decodes_wire_document(self, state_payload: dict[str, Any]) -> None:
        state = EntityState.model_validate(state_payload)

        assert state.entity_id == "light.living_room"
        assert state.state == "on"
        assert state.attributes["brightness"] == 180
        assert state.last_changed == datetime(2025, 3, 25, 4, 50, 56, 76866, tzinfo=timezone.utc)
        assert state.context["id"] == "01JQ6"
        assert state.domain == "light"

    def test_json_round_trip(self, state_payload: dict[str, Any]) -> None:
        state = EntityState.model_validate(state_payload)
        restored = EntityState.model_validate_json(state.model_dump_json())

        assert restored == state

    def test_encodes_timestamps_in_wire_shape(self, state_payload: dict[str, Any]) -> None:
        state = EntityState.model_validate(state_payload)
        assert state.model_dump(mode="json")["last_changed"] == "2025-03-25T04:50:56.076866+00:00"

    def test_ignores_unknown_fields(self, state_payload: dict[str, Any]) -> None:
        state = EntityState.model_validate({**state_payload, "extra_field": 1})
        assert not hasattr(state, "extra_field")

    def test_missing_last_reported_is_none(self, state_payload: dict[str, Any]) -> None:
        state_payload.pop("last_reported")
        assert EntityState.model_validate(state_payload).last_reported is None

    def test_is_immutable(self, state_payload: dict[str, Any]) -> None:
        state = EntityState.model_validate(state_payload)
        with pytest.raises(ValidationError):
            state.state = "off"

    def test_bad_timestamp_is_rejected(self, state_payload: dict[str, Any]) -> None:
        state_payload["last_changed"] = "2025-03-25T04:50:56.076+00:00"
        with pytest.raises(ValidationError):
            EntityState.model_validate(state_payload)

    def test_codec_from_validation_context(self, state_payload: dict[str, Any]) -> None:
        state_payload["last_changed"] = "2025-03-25T04:50:56.076+00:00"
        state_payload["last_updated"] = "2025-03-25T04:50:56.076+00:00"
        state_payload["last_reported"] = "2025-03-25T04:50:56.076+00:00"
        state = EntityState.model_validate(
            state_payload, context={CODEC_CONTEXT_KEY: TimestampCodec(3)}
        )
        assert state.last_changed.microsecond == 76000


def test_event_decodes_time_fired() -> None:
    event = Event.model_validate(
        {
            "event_type": "call_service",
            "event_data": {"domain": "light"},
            "origin": "LOCAL",
            "time_fired": "2025-03-25T04:50:56.076866+00:00",
            "context": {"id": "abc"},
        }
    )
    assert event.event_type == "call_service"
    assert event.time_fired.tzinfo is not None


@pytest.mark.parametrize(
    "item, expected",
    [
        ("state_changed", EventListener(event="state_changed")),
        (
            {"event": "state_changed", "listener_count": 5},
            EventListener(event="state_changed", listener_count=5),
        ),
    ],
)
def test_event_listener_accepts_names_and_objects(item: Any, expected: EventListener) -> None:
    assert EventListener.model_validate(item) == expected


def test_service_decodes_fields_and_target() -> None:
    service = Service.model_validate(
        {
            "domain": "light",
            "service": "turn_on",
            "description": "Turn on one or more lights.",
            "fields": {
                "brightness": {
                    "name": "Brightness",
                    "description": "Brightness value",
                    "type": "integer",
                    "required": False,
                    "example": 120,
                    "min": 0,
                    "max": 255,
                }
            },
            "target": {"entity": True, "area_registry_entry_id": False},
        }
    )

    assert service.fields["brightness"].max == 255
    assert service.fields["brightness"].required is False
    assert service.target.entity is True
    assert service.target.area_registry_entry_id is False
    assert service.target.device is None


class TestInputModels:
    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_entity_id_must_not_be_blank(self, value: Any) -> None:
        with pytest.raises(ValidationError, match="Entity ID cannot be null or empty"):
            EntityIdModel(entity_id=value)

    def test_service_call_defaults_payload(self) -> None:
        call = ServiceCallModel(domain="light", service="turn_on", service_data=None)
        assert call.service_data == {}

    def test_service_call_requires_service(self) -> None:
        with pytest.raises(ValidationError, match="Service cannot be null or empty"):
            ServiceCallModel(domain="light", service="")


def test_naive_datetime_is_rejected(state_payload: dict[str, Any]) -> None:
    state_payload["last_changed"] = datetime(2025, 1, 1)
    with pytest.raises(ValidationError, match="UTC offset"):
        EntityState.model_validate(state_payload)


def test_aware_datetime_is_accepted_and_serializes(state_payload: dict[str, Any]) -> None:
    state_payload["last_changed"] = datetime(2025, 1, 1, tzinfo=timezone.utc)
    state = EntityState.model_validate(state_payload)
    assert state.model_dump(mode="json")["last_changed"] == "2025-01-01T00:00:00.000000+00:00"
