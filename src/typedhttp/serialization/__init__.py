from ._msgspec_serializer import MsgspecSerializer
from ._pydantic_serializer import PydanticSerializer
from ._serializer import Serializer

__all__ = ["MsgspecSerializer", "PydanticSerializer", "Serializer"]
