import logging
from dataclasses import dataclass
from enum import Enum

from .config import (
    CURRENT_RECORD_SIZE,
    HEADER_SIZE,
    LEGACY_RECORD_SIZE,
    SIGNATURE,
    VERSION_TAG_CURRENT,
    VERSION_TAG_LEGACY,
)
from .errors import MalformedHeader, UnsupportedVersion
from .stream import RTextStream

logger = logging.getLogger(__name__)


class Variant(Enum):
    Legacy = VERSION_TAG_LEGACY
    Current = VERSION_TAG_CURRENT

    @property
    def has_ids(self) -> bool:
        """Whether records carry an explicit numeric id on disk."""
        return self is Variant.Current

    @property
    def record_size(self) -> int:
        return CURRENT_RECORD_SIZE if self.has_ids else LEGACY_RECORD_SIZE


@dataclass
class RTextHeader:
    variant: Variant
    page_count: int
    page_table_offset: int
    string_region_offset: int


def read_header(stream: RTextStream) -> RTextHeader:
    """
    Validate the fixed header and return the variant plus the region offsets.
    Leaves the stream positioned right after the header.
    """
    if stream.size < HEADER_SIZE:
        raise MalformedHeader(
            f"File is {stream.size} bytes, smaller than the {HEADER_SIZE}-byte header."
        )

    stream.seek(0)
    signature = stream.read(len(SIGNATURE))
    if signature != SIGNATURE:
        raise MalformedHeader(f"Bad signature {signature!r}, expected {SIGNATURE!r}.")

    tag = stream.read(2)
    try:
        variant = Variant(tag)
    except ValueError:
        raise UnsupportedVersion(tag) from None

    page_count = stream.read_write_u32()
    page_table_offset = stream.read_write_u32()
    string_region_offset = stream.read_write_u32()
    stream.seek(HEADER_SIZE)

    if page_table_offset < HEADER_SIZE:
        raise MalformedHeader(
            f"Page table offset 0x{page_table_offset:X} overlaps the header."
        )
    if string_region_offset > stream.size:
        raise MalformedHeader(
            f"String region offset 0x{string_region_offset:X} is past the end of the file."
        )

    logger.debug(
        f"RT{tag.decode('ascii')} header: {page_count} pages, "
        f"page table at 0x{page_table_offset:X}, strings at 0x{string_region_offset:X}"
    )
    return RTextHeader(variant, page_count, page_table_offset, string_region_offset)


def write_header(stream: RTextStream, header: RTextHeader) -> None:
    stream.seek(0)
    stream.write(SIGNATURE)
    stream.write(header.variant.value)
    stream.read_write_u32(header.page_count, mode="write")
    stream.read_write_u32(header.page_table_offset, mode="write")
    stream.read_write_u32(header.string_region_offset, mode="write")
    stream.align(HEADER_SIZE)
