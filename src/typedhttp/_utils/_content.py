"""Request body encodings and the rules choosing between them.

``create_content`` walks ``CONTENT_RULES`` in order and uses the first
encoder whose predicate accepts the body value.
"""

import io
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

from ..models.content import FileContent
from ..serialization import Serializer

OCTET_STREAM = "application/octet-stream"
FORM_URLENCODED = "application/x-www-form-urlencoded"
TEXT_PLAIN = "text/plain; charset=utf-8"


class RequestContent:
    """Encoded request body ready to be handed to ``httpx``."""

    media_type: Optional[str] = None

    def httpx_kwargs(self) -> Dict[str, Any]:
        raise NotImplementedError

    def headers(self) -> Dict[str, str]:
        if self.media_type is None:
            return {}
        return {"Content-Type": self.media_type}

    def as_text(self) -> Optional[str]:
        """Printable body for diagnostics, None for binary payloads."""
        return None


@dataclass(frozen=True)
class BinaryContent(RequestContent):
    data: bytes
    media_type: Optional[str] = OCTET_STREAM

    def httpx_kwargs(self) -> Dict[str, Any]:
        return {"content": self.data}


@dataclass(frozen=True)
class FormUrlEncodedContent(RequestContent):
    fields: Tuple[Tuple[str, str], ...]
    media_type: Optional[str] = FORM_URLENCODED

    def encode(self) -> bytes:
        return urlencode(self.fields).encode("ascii")

    def httpx_kwargs(self) -> Dict[str, Any]:
        return {"content": self.encode()}

    def as_text(self) -> Optional[str]:
        return self.encode().decode("ascii")


@dataclass(frozen=True)
class SerializedContent(RequestContent):
    data: bytes
    media_type: Optional[str] = "application/json"

    def httpx_kwargs(self) -> Dict[str, Any]:
        return {"content": self.data}

    def as_text(self) -> Optional[str]:
        return self.data.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class MultipartPart:
    name: str
    data: bytes
    content_type: Optional[str]
    file_name: Optional[str] = None


@dataclass(frozen=True)
class MultipartContent(RequestContent):
    """multipart/form-data body; ``httpx`` renders the boundary and content type."""

    parts: Tuple[MultipartPart, ...] = field(default_factory=tuple)
    media_type: Optional[str] = None

    def httpx_kwargs(self) -> Dict[str, Any]:
        return {
            "files": [
                (part.name, (part.file_name, part.data, part.content_type))
                for part in self.parts
            ]
        }

    def part(self, name: str) -> MultipartPart:
        for part in self.parts:
            if part.name == name:
                return part
        raise KeyError(name)


def _is_binary(value: Any) -> bool:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return True
    return isinstance(value, io.IOBase) and not isinstance(value, io.TextIOBase)


def _read_binary(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    return value.read()


def _pairs(value: Any) -> Optional[List[Tuple[Any, Any]]]:
    """Key/value pairs of a mapping or of a list/tuple of 2-tuples, else None."""
    if isinstance(value, Mapping):
        return list(value.items())
    if isinstance(value, (list, tuple)) and all(
        isinstance(item, tuple) and len(item) == 2 for item in value
    ):
        return list(value)
    return None


def _is_string_pairs(value: Any) -> bool:
    pairs = _pairs(value)
    return pairs is not None and all(
        isinstance(key, str) and isinstance(item, str) for key, item in pairs
    )


def _is_object_pairs(value: Any) -> bool:
    pairs = _pairs(value)
    return pairs is not None and all(isinstance(key, str) for key, _ in pairs)


def _binary(value: Any, serializer: Serializer) -> RequestContent:
    return BinaryContent(_read_binary(value))


def _form(value: Any, serializer: Serializer) -> RequestContent:
    return FormUrlEncodedContent(tuple(_pairs(value) or ()))


def _multipart_part(name: str, value: Any, serializer: Serializer) -> MultipartPart:
    if isinstance(value, str):
        return MultipartPart(name, value.encode("utf-8"), TEXT_PLAIN)
    if isinstance(value, FileContent):
        return MultipartPart(
            name, _read_binary(value.stream), OCTET_STREAM, value.file_name
        )
    if _is_binary(value):
        return MultipartPart(name, _read_binary(value), OCTET_STREAM)
    return MultipartPart(name, serializer.serialize(value), serializer.media_type)


def _multipart(value: Any, serializer: Serializer) -> RequestContent:
    return MultipartContent(
        tuple(
            _multipart_part(key, item, serializer)
            for key, item in _pairs(value) or ()
        )
    )


def _serialized(value: Any, serializer: Serializer) -> RequestContent:
    return SerializedContent(serializer.serialize(value), serializer.media_type)


ContentRule = Tuple[
    Callable[[Any], bool], Callable[[Any, Serializer], RequestContent]
]

CONTENT_RULES: List[ContentRule] = [
    (_is_binary, _binary),
    (_is_string_pairs, _form),
    (_is_object_pairs, _multipart),
]


def create_content(
    value: Any, serializer: Serializer
) -> Union[RequestContent, None]:
    """Encode a request body according to its runtime shape.

    Binary payloads are sent as is, string pairs as a url-encoded form,
    string-keyed pairs of any values as multipart, and everything else
    through ``serializer``. ``None`` means no body.
    """
    if value is None:
        return None
    for predicate, encoder in CONTENT_RULES:
        if predicate(value):
            return encoder(value, serializer)
    return _serialized(value, serializer)
