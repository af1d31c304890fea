import struct
from enum import Enum
from io import BytesIO
from typing import Any, Optional

from .config import BYTE_ORDER


class PrimitiveType(Enum):
    UInt16 = 1
    Int32 = 2
    UInt32 = 3


class RTextStream:
    """
    Random-access reader/writer over an RText buffer.
    Every field helper works in both directions, selected by mode ("read" or "write").
    """

    type_map = {
        PrimitiveType.UInt16: (BYTE_ORDER + "H", 2),
        PrimitiveType.Int32: (BYTE_ORDER + "i", 4),
        PrimitiveType.UInt32: (BYTE_ORDER + "I", 4),
    }

    def __init__(self, stream: Optional[BytesIO] = None):
        self.stream = stream if stream is not None else BytesIO()

    @classmethod
    def from_bytes(cls, data: bytes) -> "RTextStream":
        return cls(BytesIO(data))

    @property
    def size(self) -> int:
        with self.stream.getbuffer() as view:
            return len(view)

    def tell(self) -> int:
        return self.stream.tell()

    def seek(self, offset: int) -> None:
        self.stream.seek(offset)

    def getvalue(self) -> bytes:
        return self.stream.getvalue()

    def read(self, size: int) -> bytes:
        """Read a fixed number of bytes from the stream."""
        data = self.stream.read(size)
        if len(data) != size:
            raise EOFError("Unexpected end of stream while reading.")
        return data

    def write(self, data: bytes) -> None:
        """Write raw bytes to the stream."""
        self.stream.write(data)

    def read_write_primitive(
        self,
        primitive_type: PrimitiveType,
        value: Any = None,
        mode: str = "read",
    ) -> Any:
        """
        Read or write a primitive value based on the specified PrimitiveType.
        mode: "read" or "write".
        """
        fmt, size = self.type_map[primitive_type]
        if mode == "read":
            return struct.unpack(fmt, self.read(size))[0]
        self.write(struct.pack(fmt, value))

    def read_write_u16(self, value: Optional[int] = None, mode: str = "read") -> Any:
        return self.read_write_primitive(PrimitiveType.UInt16, value, mode)

    def read_write_i32(self, value: Optional[int] = None, mode: str = "read") -> Any:
        return self.read_write_primitive(PrimitiveType.Int32, value, mode)

    def read_write_u32(self, value: Optional[int] = None, mode: str = "read") -> Any:
        return self.read_write_primitive(PrimitiveType.UInt32, value, mode)

    def align(self, alignment: int) -> None:
        """Pad the stream with zeros up to the next multiple of alignment."""
        remainder = self.tell() % alignment
        if remainder:
            self.write(b"\x00" * (alignment - remainder))
