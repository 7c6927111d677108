import io
import itertools
import threading
from abc import ABC, abstractmethod
from logging import getLogger
from typing import Any, Dict, NoReturn, Optional, Type, TypeVar

from httpx import AsyncBaseTransport, AsyncClient, Cookies, Headers, RequestError, Response

from .._config import ServiceConfig, UrlScheme
from .._utils._cancellation import (
    CancellationToken,
    CancellationTokenSource,
    run_cancellable,
)
from .._utils._request_spec import RequestSpec
from .._utils._ssl_context import get_httpx_client_kwargs
from ..models.errors import (
    NoConnectionError,
    RemoteServiceError,
    RequestCancelledError,
    ResponseDecodeError,
)
from ..models.responses import ServiceResponse, TypedServiceResponse
from ..serialization import PydanticSerializer, Serializer
from ._request_builder import RequestBuilder

T = TypeVar("T")


class WebService(ABC):
    """Base class of every web service client.

    A service owns one lazily created ``httpx.AsyncClient`` (with its cookie
    jar and serializer) shared by all its requests, the service-wide
    cancellation scope, and the policy turning responses into payloads or
    classified errors. Subclasses provide the common path of their endpoints
    through ``generic_service_path``.
    """

    def __init__(self, config: ServiceConfig) -> None:
        self._logger = getLogger("typedhttp")
        self._config = config

        self._scope_lock = threading.Lock()
        self._scope = CancellationTokenSource(name="service")

        self._client_lock = threading.Lock()
        self._client: Optional[AsyncClient] = None
        self._serializer: Optional[Serializer] = None

        self._request_ids = itertools.count(1)

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def base_host(self) -> str:
        return self._config.base_host

    @property
    def default_scheme(self) -> UrlScheme:
        return self._config.default_scheme

    @property
    def prehandle_errors(self) -> bool:
        """Check success responses for an embedded error before decoding them.

        Some protocols answer 200 (OK) with an error body instead of using a
        proper status code.
        """
        return False

    @property
    def default_headers(self) -> Dict[str, str]:
        return {
            "Accept": self.serializer.media_type,
            **self.custom_headers,
        }

    @property
    def custom_headers(self) -> Dict[str, str]:
        return {}

    @property
    def cookies(self) -> Cookies:
        """Cookie jar shared by all requests of the service."""
        return self.client.cookies

    @property
    def serializer(self) -> Serializer:
        if self._serializer is None:
            self._serializer = self.create_serializer()
        return self._serializer

    @property
    def client(self) -> AsyncClient:
        with self._client_lock:
            if self._client is None:
                self._client = self._create_client()
            return self._client

    def _create_client(self) -> AsyncClient:
        transport = self.create_transport()
        client_kwargs: Dict[str, Any] = {
            **get_httpx_client_kwargs(
                self._config.effective_timeout, with_ssl=transport is None
            ),
            "headers": Headers(self.default_headers),
        }
        if transport is not None:
            client_kwargs["transport"] = transport

        self._log(f"{self.base_host} client created, timeout: {client_kwargs['timeout']}")
        return AsyncClient(**client_kwargs)

    def create_transport(self) -> Optional[AsyncBaseTransport]:
        """Override to plug a custom (native, mock) transport into the client."""
        return None

    def create_serializer(self) -> Serializer:
        """Override to change the serializer."""
        return PydanticSerializer()

    def create_request(self) -> RequestBuilder:
        """Create a request builder seeded with the service scheme, host and path."""
        builder = RequestBuilder(self, self.default_scheme, self.base_host)
        self.generic_service_path(builder)
        return builder

    @abstractmethod
    def generic_service_path(self, builder: RequestBuilder) -> None:
        """Add the path shared by all endpoints of the service to ``builder``."""

    def link_cancellation(
        self, *tokens: Optional[CancellationToken]
    ) -> CancellationTokenSource:
        """Link ``tokens`` with the scope that is current right now."""
        with self._scope_lock:
            return CancellationTokenSource.linked(
                *tokens, self._scope.token, name="linked"
            )

    def close(self) -> None:
        """Cancel all current requests. New requests can be sent afterwards."""
        with self._scope_lock:
            scope, self._scope = self._scope, CancellationTokenSource(name="service")
        scope.cancel()
        scope.close()

    async def aclose(self) -> None:
        """Cancel all current requests and close the underlying client."""
        self.close()
        with self._client_lock:
            client, self._client = self._client, None
        if client is not None:
            await client.aclose()

    async def __aenter__(self) -> "WebService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def request(
        self, method: str, spec: RequestSpec, token: CancellationToken
    ) -> ServiceResponse:
        request_id = next(self._request_ids)
        response = await self._send(request_id, method, spec, token)

        if self.prehandle_errors:
            await self.handle_prehandled_error(response.content, token)

        return ServiceResponse(status_code=response.status_code, headers=response.headers)

    async def request_typed(
        self,
        method: str,
        spec: RequestSpec,
        result_type: Type[T],
        token: CancellationToken,
    ) -> TypedServiceResponse[T]:
        request_id = next(self._request_ids)
        response = await self._send(request_id, method, spec, token)
        if self._config.logging_enabled:
            self._log(f"{self.base_host} Request {request_id} received: {response.text}")

        if self.prehandle_errors:
            await self.handle_prehandled_error(response.content, token)

        data = await self._decode(response, result_type, token)
        return TypedServiceResponse(
            status_code=response.status_code, headers=response.headers, data=data
        )

    async def _send(
        self,
        request_id: int,
        method: str,
        spec: RequestSpec,
        token: CancellationToken,
    ) -> Response:
        token.raise_if_cancellation_requested()

        self._log(f"{self.base_host} Request {request_id}: {method} {spec.url}")
        if spec.content is not None:
            body = spec.content.as_text()
            if body is not None:
                self._log(f"{self.base_host} Request {request_id} body: {body}")

        client = self.client
        request = client.build_request(
            method,
            spec.url,
            headers=spec.request_headers(),
            **(spec.content.httpx_kwargs() if spec.content is not None else {}),
        )
        try:
            response = await run_cancellable(client.send(request), token)
        except RequestCancelledError:
            self._log(f"{self.base_host} Request {request_id} cancelled")
            raise
        except RequestError as e:
            self._log(f"[Error] Request {request_id} transport failure: {e!r}")
            raise NoConnectionError() from e

        if not response.is_success:
            await self.handle_remote_error(response.status_code, response.content, token)
            self.raise_remote_error(response.status_code, response.content)

        return response

    async def _decode(
        self, response: Response, result_type: Type[T], token: CancellationToken
    ) -> Optional[T]:
        if result_type is str:
            return response.text  # type: ignore[return-value]
        if not response.content.strip():
            return None
        try:
            return await run_cancellable(
                self.serializer.deserialize(
                    io.BytesIO(response.content), result_type, token
                ),
                token,
            )
        except RequestCancelledError:
            raise
        except Exception as e:
            self._log(f"[Error] Error while parsing response: {e!r}")
            raise ResponseDecodeError(response.text) from e

    def _decode_text(self, body: bytes) -> str:
        return body.decode("utf-8", errors="replace")

    async def handle_prehandled_error(
        self, body: bytes, token: CancellationToken
    ) -> None:
        """Inspect a success body for an embedded error; raise to fail the call."""

    async def handle_remote_error(
        self, status_code: int, body: bytes, token: CancellationToken
    ) -> None:
        """Classify a non-success response by raising.

        Returning declines the classification; the call then fails with an
        untyped ``RemoteServiceError``.
        """
        self.raise_remote_error(status_code, body)

    def raise_remote_error(self, status_code: int, body: bytes) -> NoReturn:
        raise RemoteServiceError(status_code, self._decode_text(body))

    def _log(self, message: str) -> None:
        if self._config.logging_enabled:
            self._logger.debug(message)
