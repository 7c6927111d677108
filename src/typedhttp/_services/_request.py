import asyncio
import threading
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Generator, Generic, Optional, Type, TypeVar

from httpx import Headers

from .._utils._cancellation import CancellationToken, CancellationTokenSource
from .._utils._request_spec import RequestSpec
from ..models.errors import RequestCancelledError
from ..models.responses import ServiceResponse, TypedServiceResponse

if TYPE_CHECKING:
    from ._base_service import WebService

T = TypeVar("T")


class RequestState(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class Request:
    """Awaitable, cancellable handle of one in-flight call.

    The call is scheduled on the running event loop as soon as the handle is
    created. ``cancel`` may be called any number of times, from any thread,
    before or after completion. The handle may be dropped without awaiting it.
    """

    def __init__(
        self,
        service: "WebService",
        method: str,
        spec: RequestSpec,
        token: Optional[CancellationToken] = None,
    ) -> None:
        loop = asyncio.get_running_loop()
        self.method = method
        self.spec = spec
        self.headers: Optional[Headers] = None
        self.status_code: Optional[int] = None

        self._release_lock = threading.Lock()
        self._released = False
        self._request_source = CancellationTokenSource(name="request")
        self._linked_source = service.link_cancellation(
            self._request_source.token, token
        )
        self._task: "asyncio.Task[Any]" = loop.create_task(
            self._run(self._dispatch(service, self._linked_source.token))
        )
        self._task.add_done_callback(_retrieve_exception)
        self._task.add_done_callback(lambda _: self._release())

    def _dispatch(
        self, service: "WebService", token: CancellationToken
    ) -> Awaitable[ServiceResponse]:
        return service.request(self.method, self.spec, token)

    async def _run(self, call: Awaitable[ServiceResponse]) -> Any:
        try:
            response = await call
            self.headers = response.headers
            self.status_code = response.status_code
            return self._unwrap(response)
        finally:
            self._release()

    def _unwrap(self, response: ServiceResponse) -> Any:
        return None

    def _release(self) -> None:
        with self._release_lock:
            if self._released:
                return
            self._released = True
        self._linked_source.close()
        self._request_source.close()

    def cancel(self) -> None:
        self._request_source.cancel()

    @property
    def state(self) -> RequestState:
        if not self._task.done():
            return RequestState.PENDING
        if self._task.cancelled():
            return RequestState.CANCELLED
        error = self._task.exception()
        if error is None:
            return RequestState.COMPLETED
        if isinstance(error, RequestCancelledError):
            return RequestState.CANCELLED
        return RequestState.FAILED

    def done(self) -> bool:
        return self._task.done()

    def as_future(self) -> "asyncio.Future[Any]":
        return self._task

    def __await__(self) -> Generator[Any, None, None]:
        return self._task.__await__()

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.method} {self.spec.url} {self.state.value}>"


class TypedRequest(Request, Generic[T]):
    """Request whose awaited value is the decoded payload of type ``result_type``."""

    def __init__(
        self,
        service: "WebService",
        method: str,
        spec: RequestSpec,
        result_type: Type[T],
        token: Optional[CancellationToken] = None,
    ) -> None:
        self.result_type = result_type
        super().__init__(service, method, spec, token)

    def _dispatch(
        self, service: "WebService", token: CancellationToken
    ) -> Awaitable[TypedServiceResponse[T]]:
        return service.request_typed(self.method, self.spec, self.result_type, token)

    def _unwrap(self, response: ServiceResponse) -> Optional[T]:
        assert isinstance(response, TypedServiceResponse)
        return response.data

    @property
    def result(self) -> Optional[T]:
        """Decoded payload of a finished request.

        Raises:
            asyncio.InvalidStateError: If the request is still pending.
        """
        return self._task.result()

    def as_future(self) -> "asyncio.Future[Optional[T]]":
        return self._task

    def __await__(self) -> Generator[Any, None, Optional[T]]:
        return self._task.__await__()


def _retrieve_exception(task: "asyncio.Future[Any]") -> None:
    # marks the failure as retrieved so dropped handles stay silent
    if not task.cancelled():
        task.exception()
