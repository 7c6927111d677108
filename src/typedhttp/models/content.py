from dataclasses import dataclass
from typing import BinaryIO, Union


@dataclass(frozen=True)
class QueryParameter:
    key: str
    value: str


@dataclass(frozen=True)
class FileContent:
    """A named file to send as one part of a multipart body."""

    file_name: str
    stream: Union[BinaryIO, bytes]
