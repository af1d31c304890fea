"""Shared fixtures: RText buffers assembled by hand with struct."""

import struct
from typing import List, Sequence, Tuple

import pytest

from rtext.config import DEFAULT_KEY


def xor(data: bytes, key: bytes) -> bytes:
    return bytes(b ^ key[i] for i, b in enumerate(data))


def pack_string(payload: bytes) -> bytes:
    raw = struct.pack(">H", len(payload)) + payload + b"\x00"
    return raw + b"\x00" * (-len(raw) % 4)


def build_rtext(
    tag: bytes,
    pages: Sequence[Tuple[str, List[tuple]]],
    key: bytes = DEFAULT_KEY,
) -> bytes:
    """
    Lay out header, page table, entry blocks and string region.
    Entries are (label, value) for tag b"03" and (id, label, value) for b"04".
    """
    has_ids = tag == b"04"
    record_size = 0x10 if has_ids else 0x08
    table_offset = 0x20
    first_block = table_offset + 0x10 * len(pages)
    region = first_block + sum(len(entries) for _, entries in pages) * record_size

    strings = bytearray()

    def add(payload: bytes) -> int:
        offset = region + len(strings)
        strings.extend(pack_string(payload))
        return offset

    table = b""
    blocks = b""
    for name, entries in pages:
        name_offset = add(name.encode("utf-8"))
        table += struct.pack(
            ">IIII", name_offset, len(entries), first_block + len(blocks), 0
        )
        for entry in entries:
            if has_ids:
                entry_id, label, value = entry
            else:
                label, value = entry
            label_offset = add(xor(label.encode("utf-8"), key))
            value_offset = add(xor(value.encode("utf-8"), key))
            if has_ids:
                blocks += struct.pack(">iIII", entry_id, label_offset, value_offset, 0)
            else:
                blocks += struct.pack(">II", label_offset, value_offset)

    header = b"RT" + tag + struct.pack(">III", len(pages), table_offset, region)
    header += b"\x00" * (0x20 - len(header))
    return header + table + blocks + bytes(strings)


@pytest.fixture
def legacy_buffer() -> bytes:
    return build_rtext(b"03", [("common", [("OK", "Yes it's fine")]), ("menu", [])])


@pytest.fixture
def current_buffer() -> bytes:
    return build_rtext(b"04", [("ui", [(10, "A", "foo"), (11, "B", "bar")])])


@pytest.fixture
def rtext_builder():
    return build_rtext
