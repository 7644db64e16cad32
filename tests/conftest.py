"""Shared fixtures: a client whose HTTP traffic goes to an in-process handler."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from typing import Any

import httpx
import pytest

from ha_api_client import HomeAssistantClient

BASE_URL = "http://localhost:8123"
ACCESS_TOKEN = "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9.mock_token"


class FakeHomeAssistant:
    """Records requests and answers them with a queued or fixed response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = lambda request: httpx.Response(
            200, json={}
        )

    def reply_json(self, payload: Any, status_code: int = 200) -> None:
        self.responder = lambda request: httpx.Response(status_code, json=payload)

    def reply_text(self, text: str, status_code: int = 200) -> None:
        self.responder = lambda request: httpx.Response(status_code, text=text)

    def reply_empty(self, status_code: int = 200) -> None:
        self.responder = lambda request: httpx.Response(status_code)

    def raise_error(self, exc: Exception) -> None:
        def responder(request: httpx.Request) -> httpx.Response:
            raise exc

        self.responder = responder

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)


@pytest.fixture
def fake_ha() -> FakeHomeAssistant:
    return FakeHomeAssistant()


@pytest.fixture
def http_client(fake_ha: FakeHomeAssistant) -> Iterator[httpx.Client]:
    client = httpx.Client(transport=httpx.MockTransport(fake_ha.handler))
    yield client
    client.close()


@pytest.fixture
def ha_client(http_client: httpx.Client) -> Iterator[HomeAssistantClient]:
    client = HomeAssistantClient(BASE_URL, ACCESS_TOKEN, http_client=http_client)
    yield client
    client.close()


@pytest.fixture
def state_payload() -> dict[str, Any]:
    return {
        "entity_id": "light.living_room",
        "state": "on",
        "attributes": {"friendly_name": "Living Room", "brightness": 180},
        "last_changed": "2025-03-25T04:50:56.076866+00:00",
        "last_updated": "2025-03-25T04:50:56.076866+00:00",
        "last_reported": "2025-03-25T04:51:02.000123+00:00",
        "context": {"id": "01JQ6", "parent_id": None, "user_id": None},
    }
