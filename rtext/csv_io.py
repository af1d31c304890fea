"""
CSV interchange for a single page.

Current-layout pages use the columns RecNo,Id,Label,String and legacy pages
RecNo,Label,String. Numbers are written bare, text is always quoted.
"""

import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, TextIO

from .document import CurrentEntry, Page
from .errors import CSVImportError
from .header import Variant

logger = logging.getLogger(__name__)

CURRENT_HEADERS = ["RecNo", "Id", "Label", "String"]
LEGACY_HEADERS = ["RecNo", "Label", "String"]


@dataclass
class CsvRow:
    rec_no: int
    id: Optional[int]
    label: str
    value: str


def csv_headers(variant: Variant) -> List[str]:
    return CURRENT_HEADERS if variant.has_ids else LEGACY_HEADERS


def write_page_csv(page: Page, f: TextIO) -> int:
    """Write the page as CSV rows to an open text stream, returning the row count."""
    header_writer = csv.writer(f)
    header_writer.writerow(csv_headers(page.variant))
    row_writer = csv.writer(f, quoting=csv.QUOTE_NONNUMERIC)
    count = 0
    for rec_no, unit in page.entries():
        if isinstance(unit, CurrentEntry):
            row_writer.writerow([rec_no, unit.id, unit.label, unit.value])
        else:
            row_writer.writerow([rec_no, unit.label, unit.value])
        count += 1
    return count


def export_page_csv(page: Page, csv_file: Path) -> int:
    """Export a page to a UTF-8 (with BOM) CSV file."""
    with csv_file.open("w", newline="", encoding="utf-8-sig") as f:
        count = write_page_csv(page, f)
    logger.info(f"Exported {count} rows of page '{page.name}' to {csv_file}")
    return count


def decode_csv_bytes(data: bytes) -> str:
    """UTF-8 (BOM optional) first, Windows-1252 when the bytes are not UTF-8."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.warning("CSV is not valid UTF-8, reading it as Windows-1252")
    try:
        return data.decode("cp1252")
    except UnicodeDecodeError as e:
        raise CSVImportError(
            f"CSV is neither UTF-8 nor Windows-1252: byte 0x{data[e.start]:02X} at position {e.start}"
        ) from None


def _parse_int(field: str, column: str, line: int) -> int:
    try:
        return int(field.strip())
    except ValueError:
        raise CSVImportError(f'Invalid {column} at line {line}: "{field}"') from None


def parse_csv_text(text: str, variant: Variant) -> List[CsvRow]:
    """
    Parse CSV text for a page of the given variant.
    The header row, blank rows and rows with too few columns are skipped.
    """
    min_fields = len(csv_headers(variant))
    reader = csv.reader(io.StringIO(text, newline=""))
    next(reader, None)  # Skip header row

    rows: List[CsvRow] = []
    for fields in reader:
        line = reader.line_num
        if len(fields) < min_fields:
            continue
        rec_no = _parse_int(fields[0], "RecNo", line)
        if variant.has_ids:
            entry_id = _parse_int(fields[1], "Id", line)
            rows.append(CsvRow(rec_no, entry_id, fields[2], fields[3]))
        else:
            rows.append(CsvRow(rec_no, None, fields[1], fields[2]))
    return rows


def read_csv_rows(csv_file: Path, variant: Variant) -> List[CsvRow]:
    rows = parse_csv_text(decode_csv_bytes(csv_file.read_bytes()), variant)
    if not rows:
        raise CSVImportError(f"No valid rows found in {csv_file}.")
    return rows


def apply_csv_rows(page: Page, rows: List[CsvRow]) -> int:
    """
    Add or overwrite rows in the page. Existing labels are deleted and re-added,
    legacy rows take the next free position.
    """
    for row in rows:
        if page.pair_exists(row.label):
            page.delete_row(row.label)
        if page.variant.has_ids and row.id is not None:
            page.add_row(row.id, row.label, row.value)
        else:
            page.add_row(page.get_last_id() + 1, row.label, row.value)
    logger.info(f"Applied {len(rows)} CSV rows to page '{page.name}'")
    return len(rows)
