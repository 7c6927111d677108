from typing import Generic, Optional, TypeVar

TError = TypeVar("TError")


class WebServiceError(Exception):
    """Base class for every classified failure of a web service call."""


class BaseHostMissingError(WebServiceError):
    def __init__(self, variable: str = "TYPEDHTTP_BASE_HOST"):
        self.variable = variable
        self.message = f"Base host is not configured. Set the {variable} environment variable."
        super().__init__(self.message)


class NoConnectionError(WebServiceError):
    """The transport failed before any response was received.

    The underlying ``httpx`` error is available as ``__cause__``.
    """

    def __init__(self, message: str = "Can't connect to service"):
        self.message = message
        super().__init__(self.message)


class ServiceResponseError(WebServiceError):
    """The service answered with an error body that could not be typed."""

    def __init__(self, response: Optional[str]):
        self.response = response
        super().__init__(response or "Service returned an error")


class RemoteServiceError(ServiceResponseError):
    """Non-success status code with an untyped body."""

    def __init__(self, status_code: int, response: Optional[str]):
        self.status_code = status_code
        super().__init__(response)

    def __str__(self) -> str:
        return f"Service responded with status {self.status_code}: {self.response}"


class ResponseDecodeError(ServiceResponseError):
    """A success response body could not be decoded into the requested type.

    ``response`` holds the raw body text; the serializer failure is ``__cause__``.
    """

    def __str__(self) -> str:
        return f"Can't decode service response: {self.response}"


class TypedServiceResponseError(WebServiceError, Generic[TError]):
    """The service answered with an error body decoded as the service error type."""

    def __init__(self, response: TError):
        self.response = response
        super().__init__(repr(response))


class PrehandledError(TypedServiceResponseError[TError]):
    """A success status code whose body reports ``success`` as false."""


class TypedRemoteServiceError(TypedServiceResponseError[TError]):
    """Non-success status code whose body decoded as the service error type."""

    def __init__(self, status_code: int, response: TError):
        self.status_code = status_code
        super().__init__(response)

    def __str__(self) -> str:
        return f"Service responded with status {self.status_code}: {self.response!r}"


class RequestCancelledError(Exception):
    """The call was cancelled by the request, the caller's token or the service.

    Never wrapped into a ``WebServiceError``. ``source`` names the
    cancellation source that fired first.
    """

    def __init__(self, source: Optional[str] = None):
        self.source = source
        message = "Request was cancelled"
        if source:
            message = f"{message} by {source}"
        super().__init__(message)


class SerializationError(Exception):
    """Raised by serializers on malformed or mismatching input."""
