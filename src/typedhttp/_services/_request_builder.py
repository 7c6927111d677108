from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Type

from .._config import UrlScheme
from .._utils._cancellation import CancellationToken
from .._utils._content import RequestContent, create_content
from .._utils._request_spec import RequestSpec
from ..models.content import QueryParameter
from ._request import Request, TypedRequest

if TYPE_CHECKING:
    from ._base_service import WebService


class RequestBuilder:
    """Fluent description of a single call to a ``WebService``.

    Every mutator returns the builder itself. The finalizers (``get``,
    ``post``, ``put``, ``delete``) snapshot the builder into a ``RequestSpec``
    and dispatch it right away, returning an awaitable ``Request`` (or a
    ``TypedRequest`` when ``result_type`` is given).

    Examples:
        ```python
        data = await (
            service.create_request()
            .add_path("users/42")
            .add_query_parameter("fields", "name")
            .get(User)
        )
        ```
    """

    def __init__(
        self,
        service: "WebService",
        scheme: UrlScheme = UrlScheme.HTTPS,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ) -> None:
        self.service = service
        self.scheme = scheme
        self.host = host
        self.port = port
        self.segments: List[str] = []
        self.query_parameters: List[QueryParameter] = []
        self.headers: Dict[str, str] = {}
        self.content: Optional[RequestContent] = None

    def set_scheme(self, scheme: UrlScheme) -> "RequestBuilder":
        self.scheme = scheme
        return self

    def set_host(self, host: str) -> "RequestBuilder":
        self.host = host
        return self

    def set_port(self, port: int) -> "RequestBuilder":
        self.port = port
        return self

    def add_segment(self, segment: str) -> "RequestBuilder":
        """Append one segment to the url path.

        ``add_segment("test")`` turns ``https://example.com/service`` into
        ``https://example.com/service/test``.

        Raises:
            ValueError: If ``segment`` is empty or whitespace only.
        """
        if not segment or segment.isspace():
            raise ValueError("Empty url segment")
        self.segments.append(segment)
        return self

    def add_path(self, path: str) -> "RequestBuilder":
        """Append a ``/`` delimited path, one segment per piece.

        Raises:
            ValueError: If any piece is empty, e.g. for ``"a//b"`` or ``"/a"``.
        """
        for segment in path.split("/"):
            self.add_segment(segment)
        return self

    def add_query_parameter(self, key: str, value: str) -> "RequestBuilder":
        self.query_parameters.append(QueryParameter(key, value))
        return self

    def add_header(self, key: str, value: str) -> "RequestBuilder":
        self.headers[key] = value
        return self

    def body(self, value: Any) -> "RequestBuilder":
        """Set the request body, choosing the encoding from the value's shape.

        1. ``bytes``-like values and binary streams are sent as is.
        2. Mappings (or lists of pairs) of ``str`` to ``str`` become a url-encoded form.
        3. Mappings (or lists of pairs) of ``str`` to anything become multipart
           form data; ``FileContent`` values become file parts.
        4. Anything else goes through the service serializer. ``None`` clears the body.
        """
        self.content = create_content(value, self.service.serializer)
        return self

    def build(self) -> RequestSpec:
        if not self.host:
            raise ValueError("Host is not set")
        return RequestSpec(
            scheme=self.scheme,
            host=self.host,
            port=self.port,
            segments=tuple(self.segments),
            query_parameters=tuple(self.query_parameters),
            headers=MappingProxyType(dict(self.headers)),
            content=self.content,
        )

    def build_url(self) -> str:
        return self.build().url

    def get(
        self,
        result_type: Optional[Type[Any]] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Request:
        return self._request("GET", result_type, token)

    def post(
        self,
        result_type: Optional[Type[Any]] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Request:
        return self._request("POST", result_type, token)

    def put(
        self,
        result_type: Optional[Type[Any]] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Request:
        return self._request("PUT", result_type, token)

    def delete(
        self,
        result_type: Optional[Type[Any]] = None,
        *,
        token: Optional[CancellationToken] = None,
    ) -> Request:
        return self._request("DELETE", result_type, token)

    def _request(
        self,
        method: str,
        result_type: Optional[Type[Any]],
        token: Optional[CancellationToken],
    ) -> Request:
        spec = self.build()
        if result_type is None:
            return Request(self.service, method, spec, token)
        return TypedRequest(self.service, method, spec, result_type, token)
