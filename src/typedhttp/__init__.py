"""Typed asyncio HTTP client toolkit built on httpx.

Describe a call with a ``RequestBuilder``, dispatch it through a shared
``WebService`` and await either the decoded payload or a classified error.
"""

from ._config import CRITICAL_TIMEOUT, ServiceConfig, UrlScheme
from ._services import (
    Request,
    RequestBuilder,
    RequestState,
    TypedRequest,
    TypedWebService,
    WebService,
)
from ._utils import CancellationToken, CancellationTokenSource
from ._utils._content import (
    BinaryContent,
    FormUrlEncodedContent,
    MultipartContent,
    MultipartPart,
    RequestContent,
    SerializedContent,
)
from ._utils._request_spec import RequestSpec
from .models import (
    BaseHostMissingError,
    BasicResponse,
    FileContent,
    NoConnectionError,
    PrehandledError,
    QueryParameter,
    RemoteServiceError,
    RequestCancelledError,
    ResponseDecodeError,
    SerializationError,
    ServiceResponse,
    ServiceResponseError,
    TypedRemoteServiceError,
    TypedServiceResponse,
    TypedServiceResponseError,
    WebServiceError,
)
from .serialization import MsgspecSerializer, PydanticSerializer, Serializer

__version__ = "0.1.0"

__all__ = [
    "BaseHostMissingError",
    "BasicResponse",
    "BinaryContent",
    "CRITICAL_TIMEOUT",
    "CancellationToken",
    "CancellationTokenSource",
    "FileContent",
    "FormUrlEncodedContent",
    "MsgspecSerializer",
    "MultipartContent",
    "MultipartPart",
    "NoConnectionError",
    "PrehandledError",
    "PydanticSerializer",
    "QueryParameter",
    "RemoteServiceError",
    "Request",
    "RequestBuilder",
    "RequestCancelledError",
    "RequestContent",
    "RequestSpec",
    "RequestState",
    "ResponseDecodeError",
    "SerializationError",
    "Serializer",
    "ServiceConfig",
    "ServiceResponse",
    "ServiceResponseError",
    "TypedRemoteServiceError",
    "TypedRequest",
    "TypedServiceResponse",
    "TypedServiceResponseError",
    "TypedWebService",
    "UrlScheme",
    "WebService",
    "WebServiceError",
]
