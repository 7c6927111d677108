from typing import BinaryIO, Optional, Protocol, Type, TypeVar, runtime_checkable

from .._utils._cancellation import CancellationToken

T = TypeVar("T")


@runtime_checkable
class Serializer(Protocol):
    """Encodes request bodies and decodes response bodies.

    ``deserialize`` returns None for a JSON ``null`` and raises
    ``SerializationError`` when the payload does not match ``result_type``.
    """

    media_type: str

    def serialize(self, value: object) -> bytes: ...

    async def deserialize(
        self,
        stream: BinaryIO,
        result_type: Type[T],
        token: Optional[CancellationToken] = None,
    ) -> Optional[T]: ...
