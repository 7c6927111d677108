from typing import Any, BinaryIO, Optional, Type, TypeVar

import msgspec
from pydantic import BaseModel

from .._utils._cancellation import CancellationToken
from ..models.errors import SerializationError

T = TypeVar("T")


def _enc_hook(obj: Any) -> Any:
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json", by_alias=True)
    raise NotImplementedError(f"Objects of type {type(obj).__name__} are not supported")


def _dec_hook(tp: Type, obj: Any) -> Any:
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return tp.model_validate(obj)
    raise NotImplementedError(f"Objects of type {tp} are not supported")


class MsgspecSerializer:
    """Direct JSON serializer for ``msgspec.Struct`` types, dataclasses and builtins."""

    media_type = "application/json"

    def __init__(self) -> None:
        self._encoder = msgspec.json.Encoder(enc_hook=_enc_hook)

    def serialize(self, value: object) -> bytes:
        try:
            return self._encoder.encode(value)
        except (msgspec.EncodeError, NotImplementedError, TypeError) as e:
            raise SerializationError(
                f"Can't serialize {type(value).__name__}: {e}"
            ) from e

    async def deserialize(
        self,
        stream: BinaryIO,
        result_type: Type[T],
        token: Optional[CancellationToken] = None,
    ) -> Optional[T]:
        if token is not None:
            token.raise_if_cancellation_requested()

        data = stream.read()
        if data.strip() == b"null":
            return None
        try:
            return msgspec.json.decode(data, type=result_type, dec_hook=_dec_hook)
        except (msgspec.MsgspecError, NotImplementedError, ValueError) as e:
            raise SerializationError(
                f"Can't decode {getattr(result_type, '__name__', result_type)}: {e}"
            ) from e
