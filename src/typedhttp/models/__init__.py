from .content import FileContent, QueryParameter
from .errors import (
    BaseHostMissingError,
    NoConnectionError,
    PrehandledError,
    RemoteServiceError,
    RequestCancelledError,
    ResponseDecodeError,
    SerializationError,
    ServiceResponseError,
    TypedRemoteServiceError,
    TypedServiceResponseError,
    WebServiceError,
)
from .responses import BasicResponse, ServiceResponse, TypedServiceResponse

__all__ = [
    "BaseHostMissingError",
    "BasicResponse",
    "FileContent",
    "NoConnectionError",
    "PrehandledError",
    "QueryParameter",
    "RemoteServiceError",
    "RequestCancelledError",
    "ResponseDecodeError",
    "SerializationError",
    "ServiceResponse",
    "ServiceResponseError",
    "TypedRemoteServiceError",
    "TypedServiceResponse",
    "TypedServiceResponseError",
    "WebServiceError",
]
