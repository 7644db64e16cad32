"""
Request execution for the Home Assistant REST API

Builds one HTTP request, sends it through the injected ``httpx.Client``,
classifies the response and decodes the JSON body with pydantic.
"""

import logging
from contextlib import contextmanager, nullcontext
from functools import lru_cache
from typing import Any, Dict, Iterator, List, Optional, Type, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from .auth import TokenStore
from .exceptions import (
    HAConnectionError,
    HAEmptyResponseError,
    HAParseError,
    create_ha_error_from_response,
)
from .timestamps import CODEC_CONTEXT_KEY, DEFAULT_CODEC, TimestampCodec


logger = logging.getLogger(__name__)

T = TypeVar("T")


@lru_cache(maxsize=None)
def _adapter(shape) -> TypeAdapter:
    return TypeAdapter(shape)


class RequestExecutor:
    """
    Executes authenticated requests against one Home Assistant instance.

    Locking follows the token store's readers-writer lock: GET requests hold
    the read side and POST requests the write side for the whole round trip,
    so POSTs are serialized against every other request of the same client
    while GETs may overlap each other. With ``serialize_requests=False`` the
    lock only covers reading the token; each request still sees a consistent
    token but no ordering between requests is implied.
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        http_client: httpx.Client,
        codec: TimestampCodec = DEFAULT_CODEC,
        serialize_requests: bool = True
    ):
        self.base_url = base_url
        self.token_store = token_store
        self.http_client = http_client
        self.codec = codec
        self.serialize_requests = serialize_requests

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @contextmanager
    def _shared(self) -> Iterator[None]:
        cm = self.token_store.lock.read_locked() if self.serialize_requests else nullcontext()
        with cm:
            yield

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        cm = self.token_store.lock.write_locked() if self.serialize_requests else nullcontext()
        with cm:
            yield

    def _headers(self) -> Dict[str, str]:
        headers = self.token_store.auth_header()
        headers["Content-Type"] = "application/json"
        return headers

    def _send(self, method: str, path: str, body: Any = None) -> httpx.Response:
        """Send one request; transport failures become HAConnectionError"""
        url = self.url(path)
        logger.debug(f"{method} {url}")
        try:
            return self.http_client.request(
                method,
                url,
                headers=self._headers(),
                json=body if method == "POST" else None,
            )
        except httpx.HTTPError as e:
            raise HAConnectionError(
                f"Error communicating with Home Assistant API: {e}",
                details={"method": method, "path": path},
                original_exception=e
            ) from e

    def _decode(self, response: httpx.Response, shape: Any) -> Any:
        """Classify a response and decode its JSON body into ``shape``"""
        if not response.is_success:
            raise create_ha_error_from_response(response)

        if not response.content:
            raise HAEmptyResponseError(details={"status_code": response.status_code})

        try:
            return _adapter(shape).validate_json(
                response.content,
                context={CODEC_CONTEXT_KEY: self.codec},
            )
        except ValidationError as e:
            raise HAParseError(
                f"Error parsing API response: {e}",
                original_exception=e
            ) from e

    def execute_get(self, path: str, shape: Type[T]) -> T:
        """GET ``path`` and decode the body into ``shape``"""
        with self._shared():
            response = self._send("GET", path)
            return self._decode(response, shape)

    def execute_get_list(self, path: str, element_shape: Type[T]) -> List[T]:
        """GET ``path`` and decode the body into a list of ``element_shape``"""
        return self.execute_get(path, List[element_shape])

    def execute_post(self, path: str, body: Optional[Dict[str, Any]] = None) -> None:
        """POST a JSON body to ``path``; a successful reply body is discarded"""
        with self._exclusive():
            response = self._send("POST", path, {} if body is None else body)
            if not response.is_success:
                raise create_ha_error_from_response(response)

    def execute_post_with_response(
        self,
        path: str,
        body: Optional[Dict[str, Any]],
        shape: Type[T]
    ) -> T:
        """POST a JSON body to ``path`` and decode the reply into ``shape``"""
        with self._exclusive():
            response = self._send("POST", path, {} if body is None else body)
            return self._decode(response, shape)
