from ._base_service import WebService
from ._request import Request, RequestState, TypedRequest
from ._request_builder import RequestBuilder
from ._typed_service import TypedWebService

__all__ = [
    "Request",
    "RequestBuilder",
    "RequestState",
    "TypedRequest",
    "TypedWebService",
    "WebService",
]
