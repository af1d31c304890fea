"""
Shared string region: length-prefixed, zero-terminated, 4-byte aligned runs.

Encoding collects payloads in a StringPool and hands out pool indices; the
indices only become byte offsets once the pool is laid out behind the entry
blocks.
"""

from typing import List

from .config import STRING_ALIGNMENT
from .errors import StringResolutionError
from .stream import RTextStream

LENGTH_FIELD_SIZE = 2
TERMINATOR = b"\x00"


def string_size(payload: bytes) -> int:
    """On-disk size of one string including its padding."""
    size = LENGTH_FIELD_SIZE + len(payload) + len(TERMINATOR)
    return size + (-size % STRING_ALIGNMENT)


def read_string_payload(
    stream: RTextStream, offset: int, region_offset: int
) -> bytes:
    """Return the raw (possibly encrypted) payload of the string at offset."""
    if offset < region_offset:
        raise StringResolutionError(offset, "offset lies before the string region")
    if offset % STRING_ALIGNMENT:
        raise StringResolutionError(offset, "offset is not 4-byte aligned")
    if offset + LENGTH_FIELD_SIZE > stream.size:
        raise StringResolutionError(offset, "offset is past the end of the file")

    stream.seek(offset)
    length = stream.read_write_u16()
    end = offset + LENGTH_FIELD_SIZE + length
    if end + len(TERMINATOR) > stream.size:
        raise StringResolutionError(
            offset, f"length {length} runs past the end of the file"
        )

    payload = stream.read(length)
    if stream.read(len(TERMINATOR)) != TERMINATOR:
        raise StringResolutionError(offset, "missing string terminator")
    return payload


class StringPool:
    """Arena of string payloads addressed by index until layout time."""

    def __init__(self):
        self.payloads: List[bytes] = []

    def __len__(self) -> int:
        return len(self.payloads)

    def add(self, payload: bytes) -> int:
        if len(payload) > 0xFFFF:
            raise ValueError(f"String of {len(payload)} bytes does not fit a 16-bit length.")
        self.payloads.append(payload)
        return len(self.payloads) - 1

    def layout(self, base_offset: int) -> List[int]:
        """Byte offset of every pooled string when the region starts at base_offset."""
        offsets = []
        offset = base_offset
        for payload in self.payloads:
            offsets.append(offset)
            offset += string_size(payload)
        return offsets

    def write(self, stream: RTextStream) -> None:
        for payload in self.payloads:
            stream.read_write_u16(len(payload), mode="write")
            stream.write(payload)
            stream.write(TERMINATOR)
            stream.align(STRING_ALIGNMENT)
