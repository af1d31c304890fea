import logging
from dataclasses import dataclass
from typing import List

from .config import PAGE_ENTRY_SIZE, STRING_ENCODING
from .errors import MalformedPageTable, StringResolutionError
from .header import RTextHeader
from .stream import RTextStream
from .strings import read_string_payload

logger = logging.getLogger(__name__)


@dataclass
class PageRecord:
    """One page table row: the page name and where its entry block lives."""

    name: str
    entry_count: int
    entry_block_offset: int


def read_page_table(stream: RTextStream, header: RTextHeader) -> List[PageRecord]:
    """Decode the page table in on-disk order, checking every offset it holds."""
    table_end = header.page_table_offset + header.page_count * PAGE_ENTRY_SIZE
    if table_end > stream.size:
        raise MalformedPageTable(
            f"Page table of {header.page_count} pages at 0x{header.page_table_offset:X} "
            f"runs past the end of the file."
        )

    record_size = header.variant.record_size
    raw_records = []
    stream.seek(header.page_table_offset)
    for _ in range(header.page_count):
        name_offset = stream.read_write_u32()
        entry_count = stream.read_write_u32()
        entry_block_offset = stream.read_write_u32()
        stream.read_write_u32()  # reserved
        raw_records.append((name_offset, entry_count, entry_block_offset))

    records: List[PageRecord] = []
    seen = set()
    for index, (name_offset, entry_count, entry_block_offset) in enumerate(raw_records):
        if name_offset >= stream.size:
            raise MalformedPageTable(
                f"Page {index}: name offset 0x{name_offset:X} is past the end of the file."
            )
        block_end = entry_block_offset + entry_count * record_size
        if entry_block_offset < table_end or block_end > stream.size:
            raise MalformedPageTable(
                f"Page {index}: entry block 0x{entry_block_offset:X}-0x{block_end:X} "
                f"lies outside the entry region."
            )

        payload = read_string_payload(stream, name_offset, header.string_region_offset)
        try:
            name = payload.decode(STRING_ENCODING)
        except UnicodeDecodeError as e:
            raise StringResolutionError(name_offset, f"page name is not UTF-8 ({e})")
        if name in seen:
            raise MalformedPageTable(f"Page name '{name}' appears more than once.")
        seen.add(name)

        records.append(PageRecord(name, entry_count, entry_block_offset))

    logger.debug(f"Read page table: {[record.name for record in records]}")
    return records


def write_page_table(
    stream: RTextStream,
    records: List[PageRecord],
    name_offsets: List[int],
    table_offset: int,
) -> None:
    """Back-fill the page table once entry blocks and strings have been placed."""
    stream.seek(table_offset)
    for record, name_offset in zip(records, name_offsets):
        stream.read_write_u32(name_offset, mode="write")
        stream.read_write_u32(record.entry_count, mode="write")
        stream.read_write_u32(record.entry_block_offset, mode="write")
        stream.read_write_u32(0, mode="write")
