import io
from typing import Any, Generic, Optional, Type, TypeVar, get_args, get_origin

from .._config import ServiceConfig
from .._utils._cancellation import CancellationToken, run_cancellable
from ..models.errors import (
    PrehandledError,
    RequestCancelledError,
    SerializationError,
    TypedRemoteServiceError,
)
from ..models.responses import BasicResponse
from ._base_service import WebService

TError = TypeVar("TError")


class TypedWebService(WebService, Generic[TError]):
    """Web service whose error responses decode into ``TError``.

    The error type is taken from the generic argument of the subclass
    (``class Api(TypedWebService[ApiError])``), from an ``error_type`` class
    attribute, or from the ``error_type`` constructor argument. When it is a
    ``BasicResponse``, success responses are checked for ``success == False``
    before their payload is decoded.
    """

    error_type: Type[TError]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        for base in getattr(cls, "__orig_bases__", ()):
            if get_origin(base) is TypedWebService:
                args = get_args(base)
                if args and isinstance(args[0], type):
                    cls.error_type = args[0]

    def __init__(
        self, config: ServiceConfig, error_type: Optional[Type[TError]] = None
    ) -> None:
        super().__init__(config)
        if error_type is not None:
            self.error_type = error_type
        if getattr(self, "error_type", None) is None:
            raise TypeError(f"{type(self).__name__} does not declare an error type")

    @property
    def prehandle_errors(self) -> bool:
        return issubclass(self.error_type, BasicResponse)

    async def decode_error(
        self, body: bytes, token: CancellationToken
    ) -> Optional[TError]:
        if not body.strip():
            return None
        return await run_cancellable(
            self.serializer.deserialize(io.BytesIO(body), self.error_type, token),
            token,
        )

    async def handle_prehandled_error(
        self, body: bytes, token: CancellationToken
    ) -> None:
        try:
            error = await self.decode_error(body, token)
        except SerializationError as e:
            self._log(f"[Error] Body is not a {self.error_type.__name__}: {e}")
            return

        if isinstance(error, BasicResponse) and not error.success:
            raise PrehandledError(error)

    async def handle_remote_error(
        self, status_code: int, body: bytes, token: CancellationToken
    ) -> None:
        try:
            error = await self.decode_error(body, token)
        except RequestCancelledError:
            raise
        except Exception as e:
            self._log(f"[Error] while parsing error: {e!r}")
            error = None

        if error is not None:
            raise TypedRemoteServiceError(status_code, error)

        self.raise_remote_error(status_code, body)
