"""Decode/encode tests against hand-assembled RText buffers."""

import struct
from io import BytesIO

import pytest

from rtext.codec import RText, decode, encode, load, save
from rtext.config import DEFAULT_KEY
from rtext.document import CurrentEntry, LegacyEntry, RTextDocument
from rtext.errors import (
    KeyTooShort,
    MalformedPageTable,
    StringResolutionError,
)
from rtext.header import Variant

# Offsets inside the current_buffer fixture:
# page table at 0x20, entry block at 0x30, strings from 0x50
# ("ui" at 0x50, "A" at 0x58, "foo" at 0x5C)
FIRST_LABEL_OFFSET_FIELD = 0x34
FIRST_LABEL_STRING = 0x58


def patched(data: bytes, offset: int, fmt: str, value: int) -> bytes:
    buf = bytearray(data)
    struct.pack_into(fmt, buf, offset, value)
    return bytes(buf)


class TestDecode:
    """Test decoding both layouts."""

    def test_legacy_scenario(self, legacy_buffer: bytes) -> None:
        document = decode(legacy_buffer)
        assert document.variant is Variant.Legacy
        assert list(document.get_pages()) == ["common", "menu"]

        common = document.get_pages()["common"]
        assert list(common.pair_units) == ["OK"]
        assert common.pair_units["OK"] == LegacyEntry("OK", "Yes it's fine")
        assert len(document.get_pages()["menu"]) == 0

    def test_current_ids(self, current_buffer: bytes) -> None:
        document = decode(current_buffer)
        page = document.get_page("ui")
        assert list(page) == [CurrentEntry(10, "A", "foo"), CurrentEntry(11, "B", "bar")]
        assert page.get_last_id() == 11

    def test_negative_id(self, rtext_builder) -> None:
        data = rtext_builder(b"04", [("p", [(-1, "neg", "x")])])
        assert decode(data).get_page("p").get_row("neg").id == -1

    def test_page_order_preserved(self, rtext_builder) -> None:
        names = ["zeta", "alpha", "mid", "beta"]
        data = rtext_builder(b"03", [(name, []) for name in names])
        assert list(decode(data).pages) == names

    def test_parse_keeps_header(self, current_buffer: bytes) -> None:
        parser = RText(BytesIO(current_buffer))
        parser.parse()
        assert parser.header.page_count == 1
        assert parser.header.string_region_offset == 0x50


class TestDecodeErrors:
    """Test structural errors abort the decode."""

    def test_page_count_past_end(self, current_buffer: bytes) -> None:
        with pytest.raises(MalformedPageTable):
            decode(patched(current_buffer, 0x04, ">I", 100))

    def test_entry_block_past_end(self, current_buffer: bytes) -> None:
        with pytest.raises(MalformedPageTable):
            decode(patched(current_buffer, 0x24, ">I", 1000))

    def test_name_offset_past_end(self, current_buffer: bytes) -> None:
        with pytest.raises(MalformedPageTable):
            decode(patched(current_buffer, 0x20, ">I", 0xFFFF0))

    def test_duplicate_page_name(self, rtext_builder) -> None:
        with pytest.raises(MalformedPageTable):
            decode(rtext_builder(b"03", [("menu", []), ("menu", [])]))

    def test_duplicate_label(self, rtext_builder) -> None:
        data = rtext_builder(b"03", [("menu", [("OK", "a"), ("OK", "b")])])
        with pytest.raises(MalformedPageTable):
            decode(data)

    def test_empty_label(self, rtext_builder) -> None:
        data = rtext_builder(b"03", [("menu", [("", "orphan value")])])
        with pytest.raises(StringResolutionError, match="empty label"):
            decode(data)

    def test_empty_value_allowed(self, rtext_builder) -> None:
        document = decode(rtext_builder(b"03", [("menu", [("OK", "")])]))
        rebuilt = RTextDocument.from_dict(document.to_dict())
        assert rebuilt.get_page("menu").get_row("OK").value == ""

    def test_misaligned_string(self, current_buffer: bytes) -> None:
        data = patched(current_buffer, FIRST_LABEL_OFFSET_FIELD, ">I", FIRST_LABEL_STRING + 1)
        with pytest.raises(StringResolutionError):
            decode(data)

    def test_string_before_region(self, current_buffer: bytes) -> None:
        data = patched(current_buffer, FIRST_LABEL_OFFSET_FIELD, ">I", 0x30)
        with pytest.raises(StringResolutionError):
            decode(data)

    def test_string_past_end(self, current_buffer: bytes) -> None:
        data = patched(current_buffer, FIRST_LABEL_OFFSET_FIELD, ">I", len(current_buffer))
        with pytest.raises(StringResolutionError):
            decode(data)

    def test_string_length_past_end(self, current_buffer: bytes) -> None:
        with pytest.raises(StringResolutionError):
            decode(patched(current_buffer, FIRST_LABEL_STRING, ">H", 0xFFFF))

    def test_missing_terminator(self, current_buffer: bytes) -> None:
        with pytest.raises(StringResolutionError):
            decode(patched(current_buffer, FIRST_LABEL_STRING + 3, ">B", 0x41))

    def test_invalid_utf8(self, current_buffer: bytes) -> None:
        data = patched(current_buffer, FIRST_LABEL_STRING + 2, ">B", DEFAULT_KEY[0] ^ 0xFF)
        with pytest.raises(StringResolutionError):
            decode(data)

    def test_key_too_short_is_not_wrapped(self, rtext_builder) -> None:
        """Test a short key surfaces as KeyTooShort, not as a string error."""
        short_key = b"\x05\x06"
        data = rtext_builder(b"04", [("ui", [(1, "A", "foo")])], key=short_key + DEFAULT_KEY)
        with pytest.raises(KeyTooShort) as exc_info:
            decode(data, short_key)
        assert not isinstance(exc_info.value, StringResolutionError)
        assert exc_info.value.payload_length == 3


class TestEncode:
    """Test encoding and round trips."""

    def test_byte_exact_round_trip(self, legacy_buffer: bytes, current_buffer: bytes) -> None:
        assert encode(decode(legacy_buffer)) == legacy_buffer
        assert encode(decode(current_buffer)) == current_buffer

    def test_structural_round_trip(self) -> None:
        document = RTextDocument(Variant.Current)
        page = document.add_page("race")
        page.add_row(1, "LAP", "Lap {0}/{1}")
        page.add_row(2, "MULTI", "Line one\nLine two\r\n\ttabbed")
        page.add_row(3, "UNICODE", "日本語 «Ñandú» ✓")
        page.add_row(4, "EMPTY", "")
        document.add_page("empty")
        document.add_page("last").add_row(7, "X", "\x1b[FF0000]red\x1b[-]")

        assert decode(encode(document)).to_dict() == document.to_dict()

    def test_empty_document(self) -> None:
        data = encode(RTextDocument(Variant.Legacy))
        assert len(data) == 0x20
        assert decode(data).pages == {}

    def test_delete_then_round_trip(self, legacy_buffer: bytes) -> None:
        document = decode(legacy_buffer)
        document.get_pages()["common"].delete_row("OK")

        reloaded = decode(encode(document))
        assert list(reloaded.pages) == ["common", "menu"]
        assert len(reloaded.get_pages()["common"].pair_units) == 0

    def test_added_rows_appended(self, current_buffer: bytes) -> None:
        document = decode(current_buffer)
        document.get_page("ui").add_row(12, "C", "baz")
        labels = [unit.label for unit in decode(encode(document)).get_page("ui")]
        assert labels == ["A", "B", "C"]

    def test_custom_key_kept(self, rtext_builder) -> None:
        key = bytes(range(1, 200))
        data = rtext_builder(b"03", [("menu", [("OK", "fine")])], key=key)
        document = decode(data, key)
        assert document.key == key
        assert encode(document) == data

    def test_value_longer_than_key(self) -> None:
        document = RTextDocument(Variant.Legacy, key=b"abc")
        document.add_page("menu").add_row(None, "OK", "too long")
        with pytest.raises(KeyTooShort):
            encode(document)

    def test_load_and_save(self, tmp_path, current_buffer: bytes) -> None:
        source = tmp_path / "US.rt2"
        source.write_bytes(current_buffer)
        target = tmp_path / "copy.rt2"
        save(load(source), target)
        assert target.read_bytes() == current_buffer

    def test_failed_save_leaves_file(self, tmp_path) -> None:
        target = tmp_path / "keep.rt2"
        target.write_bytes(b"original")
        document = RTextDocument(Variant.Legacy, key=b"k")
        document.add_page("menu").add_row(None, "OK", "long value")
        with pytest.raises(KeyTooShort):
            save(document, target)
        assert target.read_bytes() == b"original"
