from abc import ABC
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from httpx import Headers

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResponse:
    status_code: int
    headers: Headers


@dataclass(frozen=True)
class TypedServiceResponse(ServiceResponse, Generic[T]):
    """Response with a decoded payload.

    ``data`` is None when the body was empty or a JSON ``null``.
    """

    data: Optional[T] = None


class BasicResponse(ABC):
    """Marker for error payloads that embed a ``success`` flag.

    Services whose error type subclasses (or is registered with) this class
    check every success response for ``success == False``. Implementations
    must provide a boolean ``success`` attribute.
    """

    success: bool
