import logging
from io import BytesIO
from pathlib import Path
from typing import List, Optional, Union

from .cipher import XorCipher
from .config import DEFAULT_KEY, HEADER_SIZE, PAGE_ENTRY_SIZE, STRING_ENCODING
from .document import Page, RTextDocument
from .entries import EntryRef, encode_entry_block, read_entries, write_entry_block
from .errors import MalformedPageTable
from .header import RTextHeader, read_header, write_header
from .pages import PageRecord, read_page_table, write_page_table
from .stream import RTextStream
from .strings import StringPool

logger = logging.getLogger(__name__)


class RText:
    """
    High-level parser/encoder for RText files, built on top of RTextStream.
    """

    def __init__(self, stream: BytesIO, key: bytes = DEFAULT_KEY):
        self.stream = RTextStream(stream)
        self.cipher = XorCipher(key)
        self.header: Optional[RTextHeader] = None

    def parse(self) -> RTextDocument:
        """Decode the whole buffer into a document. Any structural error aborts."""
        self.header = read_header(self.stream)
        records = read_page_table(self.stream, self.header)

        document = RTextDocument(self.header.variant, key=self.cipher.key)
        for record in records:
            page = document.add_page(record.name)
            for unit in read_entries(self.stream, record, self.header, self.cipher):
                if unit.label in page.pair_units:
                    raise MalformedPageTable(
                        f"Page '{record.name}' holds label '{unit.label}' more than once."
                    )
                page.pair_units[unit.label] = unit

        logger.debug(
            f"Decoded {document.variant.name} document: "
            f"{len(document.pages)} pages, "
            f"{sum(len(page) for page in document.pages.values())} entries"
        )
        return document

    def encode(self, document: RTextDocument) -> None:
        """
        Encode the document into the stream.
        Entry blocks and strings are sized first, then the header and page table
        are written with the offsets that sizing produced.
        """
        variant = document.variant
        pages: List[Page] = list(document.pages.values())

        pool = StringPool()
        name_indices: List[int] = []
        blocks: List[List[EntryRef]] = []
        for page in pages:
            name_indices.append(pool.add(page.name.encode(STRING_ENCODING)))
            blocks.append(encode_entry_block(page, pool, self.cipher))

        page_table_offset = HEADER_SIZE
        offset = page_table_offset + len(pages) * PAGE_ENTRY_SIZE
        records: List[PageRecord] = []
        for page, block in zip(pages, blocks):
            records.append(PageRecord(page.name, len(block), offset))
            offset += len(block) * variant.record_size
        string_offsets = pool.layout(offset)

        header = RTextHeader(variant, len(pages), page_table_offset, offset)
        write_header(self.stream, header)
        write_page_table(
            self.stream,
            records,
            [string_offsets[index] for index in name_indices],
            page_table_offset,
        )
        for block in blocks:
            write_entry_block(self.stream, block, string_offsets, variant)
        pool.write(self.stream)
        self.header = header

        logger.debug(
            f"Encoded {variant.name} document: {len(pages)} pages, "
            f"{len(pool)} strings, {self.stream.size} bytes"
        )


def decode(data: bytes, key: bytes = DEFAULT_KEY) -> RTextDocument:
    return RText(BytesIO(data), key).parse()


def encode(document: RTextDocument) -> bytes:
    output = BytesIO()
    RText(output, document.key).encode(document)
    return output.getvalue()


def load(path: Union[str, Path], key: bytes = DEFAULT_KEY) -> RTextDocument:
    """Read and decode a single RText file."""
    with open(path, "rb") as f:
        return decode(f.read(), key)


def save(document: RTextDocument, path: Union[str, Path]) -> None:
    """Encode and write a single RText file; a failed encode leaves path untouched."""
    data = encode(document)
    with open(path, "wb") as out_file:
        out_file.write(data)
