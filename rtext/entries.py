from dataclasses import dataclass
from typing import List, Optional

from .cipher import XorCipher
from .config import STRING_ENCODING
from .document import CurrentEntry, LegacyEntry, Page, PairUnit
from .errors import StringResolutionError
from .header import RTextHeader, Variant
from .pages import PageRecord
from .stream import RTextStream
from .strings import StringPool, read_string_payload


@dataclass
class EntryRef:
    """Encoded record waiting for its string pool indices to become offsets."""

    id: Optional[int]
    label_index: int
    value_index: int


def read_text(
    stream: RTextStream, offset: int, region_offset: int, cipher: XorCipher
) -> str:
    """Resolve one encrypted string. KeyTooShort from the cipher propagates as-is."""
    plain = cipher.decrypt(read_string_payload(stream, offset, region_offset))
    try:
        return plain.decode(STRING_ENCODING)
    except UnicodeDecodeError as e:
        raise StringResolutionError(offset, f"decrypted text is not UTF-8 ({e})")


def read_entries(
    stream: RTextStream,
    record: PageRecord,
    header: RTextHeader,
    cipher: XorCipher,
) -> List[PairUnit]:
    """Decode a page's entry block in on-disk order."""
    has_ids = header.variant.has_ids
    raw_entries = []
    stream.seek(record.entry_block_offset)
    for _ in range(record.entry_count):
        entry_id = stream.read_write_i32() if has_ids else None
        label_offset = stream.read_write_u32()
        value_offset = stream.read_write_u32()
        if has_ids:
            stream.read_write_u32()  # reserved
        raw_entries.append((entry_id, label_offset, value_offset))

    region = header.string_region_offset
    units: List[PairUnit] = []
    for entry_id, label_offset, value_offset in raw_entries:
        label = read_text(stream, label_offset, region, cipher)
        if not label:
            raise StringResolutionError(label_offset, "empty label")
        value = read_text(stream, value_offset, region, cipher)
        if has_ids:
            units.append(CurrentEntry(entry_id, label, value))
        else:
            units.append(LegacyEntry(label, value))
    return units


def encode_entry_block(
    page: Page, pool: StringPool, cipher: XorCipher
) -> List[EntryRef]:
    """Encrypt a page's labels and values into the pool, in page order."""
    refs = []
    for unit in page:
        label_index = pool.add(cipher.encrypt(unit.label.encode(STRING_ENCODING)))
        value_index = pool.add(cipher.encrypt(unit.value.encode(STRING_ENCODING)))
        entry_id = unit.id if isinstance(unit, CurrentEntry) else None
        refs.append(EntryRef(entry_id, label_index, value_index))
    return refs


def write_entry_block(
    stream: RTextStream,
    refs: List[EntryRef],
    string_offsets: List[int],
    variant: Variant,
) -> None:
    for ref in refs:
        if variant.has_ids:
            stream.read_write_i32(ref.id, mode="write")
        stream.read_write_u32(string_offsets[ref.label_index], mode="write")
        stream.read_write_u32(string_offsets[ref.value_index], mode="write")
        if variant.has_ids:
            stream.read_write_u32(0, mode="write")
