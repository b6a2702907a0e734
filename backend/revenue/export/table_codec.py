"""
Encoder for the legacy binary table format (dBase III layout).

This is the wire contract with the national claims clearing system, so the
layout is reproduced byte for byte:

    32-byte header
        0       version marker 0x03
        1-3     last update: year - 1900, month, day
        4-7     record count (uint32 LE)
        8-9     header length = 32 + 32 * field_count + 1 (uint16 LE)
        10-11   record length = 1 + sum(field lengths) (uint16 LE)
    32 bytes per field descriptor
        0-10    name, ASCII, null padded
        11      type code
        12-15   reserved
        16      field length
        17      decimal places
        18-31   reserved
    0x0D field terminator
    records: 0x20 deletion flag + each field slot
    0x1A end-of-file marker

Values longer than their slot are truncated, never rejected. Run the
validator first when strictness matters.
"""
from datetime import date
from typing import Any, Iterable, List, Optional

from revenue.core.table import FieldDescriptor, Record
from revenue.export.table_writer import TableWriter

VERSION_MARKER = 0x03
HEADER_SIZE = 32
FIELD_DESCRIPTOR_SIZE = 32
FIELD_TERMINATOR = 0x0D
RECORD_ACTIVE = 0x20
END_OF_FILE = 0x1A

# Thai single-byte code page expected by the consuming system
TEXT_ENCODING = "tis-620"
EMPTY_DATE = "00000000"


def header_length(fields: List[FieldDescriptor]) -> int:
    return HEADER_SIZE + FIELD_DESCRIPTOR_SIZE * len(fields) + 1


def record_length(fields: List[FieldDescriptor]) -> int:
    return 1 + sum(f.length for f in fields)


def format_date(value: Any) -> str:
    """
    Normalize a date value to YYYYMMDD.

    Accepts date/datetime objects, ISO "YYYY-MM-DD" strings (a time part is
    ignored) and ASCII 8-digit strings, which pass through unchanged. Anything
    empty or unparseable becomes "00000000".
    """
    if value is None:
        return EMPTY_DATE

    if isinstance(value, date):
        return value.strftime("%Y%m%d")

    text = str(value).strip()
    if not text or text == EMPTY_DATE or not text.isascii():
        return EMPTY_DATE

    if len(text) == 8 and text.isdigit():
        return text

    if "-" in text:
        try:
            return date.fromisoformat(text[:10]).strftime("%Y%m%d")
        except ValueError:
            return EMPTY_DATE

    return EMPTY_DATE


def encode_value(field: FieldDescriptor, value: Any) -> bytes:
    """Encode one value into exactly ``field.length`` bytes."""
    if value is None:
        value = ""

    if field.is_numeric:
        text = str(value).rjust(field.length)
    elif field.is_date:
        text = format_date(value).ljust(field.length)
    else:
        text = str(value).ljust(field.length)

    encoded = text.encode(TEXT_ENCODING, errors="replace")
    return encoded[:field.length].ljust(field.length, b" ")


def encode_table(
    fields: List[FieldDescriptor],
    records: Iterable[Record],
    updated: Optional[date] = None,
) -> bytes:
    """
    Serialize fields and records into a complete table file.

    Args:
        fields: Column descriptors, in file order
        records: Rows keyed by field name; missing keys encode as empty
        updated: Last-update date written to the header (defaults to today)

    Returns:
        File content, ``header_length + n * record_length + 1`` bytes long
    """
    records = list(records)
    updated = updated or date.today()
    head_len = header_length(fields)
    rec_len = record_length(fields)

    writer = TableWriter(head_len + len(records) * rec_len + 1)

    # File header
    writer.write_byte(VERSION_MARKER)
    writer.write_byte(updated.year - 1900)
    writer.write_byte(updated.month)
    writer.write_byte(updated.day)
    writer.write_uint32_le(len(records))
    writer.write_uint16_le(head_len)
    writer.write_uint16_le(rec_len)
    writer.skip(HEADER_SIZE - 12)

    # Field descriptors
    for field in fields:
        writer.write_fixed(field.name.encode("ascii", errors="replace"), 11)
        writer.write_byte(ord(field.type[0]))
        writer.skip(4)
        writer.write_byte(field.length)
        writer.write_byte(field.decimal_places)
        writer.skip(14)

    writer.write_byte(FIELD_TERMINATOR)

    # Records
    for record in records:
        writer.write_byte(RECORD_ACTIVE)
        for field in fields:
            writer.write_fixed(encode_value(field, record.get(field.name)), field.length, b" ")

    writer.write_byte(END_OF_FILE)

    return writer.getvalue()
