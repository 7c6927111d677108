from functools import lru_cache
from typing import Any, BinaryIO, Optional, Type, TypeVar

from pydantic import BaseModel, TypeAdapter

from .._utils._cancellation import CancellationToken
from ..models.errors import SerializationError

T = TypeVar("T")


@lru_cache(maxsize=256)
def _adapter(tp: Any) -> TypeAdapter:
    return TypeAdapter(tp)


class PydanticSerializer:
    """Contract based serializer driven by the target type's annotations.

    Field aliases are honoured in both directions, so models declared as
    ``name: str = Field(alias="Name")`` read and write ``Name``.
    """

    media_type = "application/json"

    def __init__(self, by_alias: bool = True, exclude_none: bool = False) -> None:
        self.by_alias = by_alias
        self.exclude_none = exclude_none

    def serialize(self, value: object) -> bytes:
        if isinstance(value, BaseModel):
            return value.model_dump_json(
                by_alias=self.by_alias, exclude_none=self.exclude_none
            ).encode("utf-8")
        try:
            return _adapter(type(value)).dump_json(
                value, by_alias=self.by_alias, exclude_none=self.exclude_none
            )
        except Exception as e:
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
            return _adapter(result_type).validate_json(data)
        except ValueError as e:
            raise SerializationError(
                f"Can't decode {getattr(result_type, '__name__', result_type)}: {e}"
            ) from e
