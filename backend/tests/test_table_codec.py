"""
Tests for the legacy binary table encoder.

Layout checks are byte-exact; the consuming system rejects anything else.
"""
import struct
from datetime import date, datetime

import pytest

from revenue.core.table import FieldDescriptor
from revenue.export.table_codec import (
    END_OF_FILE,
    FIELD_TERMINATOR,
    RECORD_ACTIVE,
    encode_table,
    encode_value,
    format_date,
    header_length,
    record_length,
)


@pytest.fixture
def hn_date_fields():
    return [FieldDescriptor("HN", "C", 10), FieldDescriptor("DATE", "D", 8)]


def test_end_to_end_layout(hn_date_fields):
    """HN + DATE table with one record is 117 bytes."""
    data = encode_table(hn_date_fields, [{"HN": "12345", "DATE": "2024-01-15"}], updated=date(2024, 3, 7))

    assert header_length(hn_date_fields) == 97
    assert record_length(hn_date_fields) == 19
    assert len(data) == 117

    record = data[97:97 + 19]
    assert record[0] == RECORD_ACTIVE
    assert record[1:11] == b"12345     "
    assert record[11:19] == b"20240115"
    assert data[-1] == END_OF_FILE


def test_header_fields(hn_date_fields):
    records = [{"HN": str(i), "DATE": "20240101"} for i in range(3)]
    data = encode_table(hn_date_fields, records, updated=date(2024, 3, 7))

    assert data[0] == 0x03
    assert (data[1], data[2], data[3]) == (124, 3, 7)
    assert struct.unpack_from("<I", data, 4)[0] == 3
    assert struct.unpack_from("<H", data, 8)[0] == 97
    assert struct.unpack_from("<H", data, 10)[0] == 19
    assert data[12:32] == b"\x00" * 20


def test_field_descriptors():
    fields = [FieldDescriptor("RATE", "N", 12, 2), FieldDescriptor("HN", "C", 9)]
    data = encode_table(fields, [])

    first = data[32:64]
    assert first[0:11] == b"RATE" + b"\x00" * 7
    assert first[11:12] == b"N"
    assert first[12:16] == b"\x00" * 4
    assert first[16] == 12
    assert first[17] == 2
    assert first[18:32] == b"\x00" * 14

    second = data[64:96]
    assert second[0:11] == b"HN" + b"\x00" * 9
    assert second[11:12] == b"C"
    assert second[16] == 9

    assert data[96] == FIELD_TERMINATOR


def test_empty_table_size():
    fields = [FieldDescriptor("HN", "C", 9)]
    data = encode_table(fields, [])

    assert len(data) == header_length(fields) + 1
    assert data[-2] == FIELD_TERMINATOR
    assert data[-1] == END_OF_FILE


def test_total_size_many_records(adp_fields, adp_records):
    data = encode_table(adp_fields, adp_records)
    assert len(data) == header_length(adp_fields) + len(adp_records) * record_length(adp_fields) + 1


def test_header_date_defaults_to_today(hn_date_fields):
    today = date.today()
    data = encode_table(hn_date_fields, [])
    assert (data[1], data[2], data[3]) == (today.year - 1900, today.month, today.day)


def test_numeric_right_justified():
    field = FieldDescriptor("QTY", "N", 6)
    assert encode_value(field, "42") == b"    42"
    assert encode_value(field, 3.5) == b"   3.5"


def test_character_left_justified():
    field = FieldDescriptor("HN", "C", 6)
    assert encode_value(field, "AB") == b"AB    "


def test_missing_value_is_blank():
    assert encode_value(FieldDescriptor("HN", "C", 4), None) == b"    "
    assert encode_value(FieldDescriptor("QTY", "N", 4), None) == b"    "


def test_missing_date_is_zeros():
    assert encode_value(FieldDescriptor("DATE", "D", 8), None) == b"00000000"


def test_overlong_value_truncated():
    field = FieldDescriptor("HN", "C", 4)
    assert encode_value(field, "123456789") == b"1234"


def test_overlong_numeric_truncated():
    field = FieldDescriptor("QTY", "N", 3)
    assert encode_value(field, "12345") == b"123"


def test_thai_text_single_byte():
    field = FieldDescriptor("NAME", "C", 6)
    encoded = encode_value(field, "สมชาย")

    assert len(encoded) == 6
    assert encoded == "สมชาย".encode("tis-620") + b" "


def test_unencodable_text_replaced_not_raised():
    field = FieldDescriptor("NAME", "C", 4)
    encoded = encode_value(field, "€")
    assert len(encoded) == 4
    assert encoded.startswith(b"?")


def test_thai_text_truncated_to_slot():
    field = FieldDescriptor("NAME", "C", 3)
    assert encode_value(field, "สมชาย") == "สมช".encode("tis-620")


def test_record_missing_key_encodes_blank(hn_date_fields):
    data = encode_table(hn_date_fields, [{"HN": "1"}])
    record = data[97:97 + 19]
    assert record[1:11] == b"1         "
    assert record[11:19] == b"00000000"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-01-15", "20240115"),
        ("2024-01-15T10:30:00", "20240115"),
        ("20240115", "20240115"),
        (date(2023, 12, 31), "20231231"),
        (datetime(2023, 2, 1, 8, 0), "20230201"),
        (None, "00000000"),
        ("", "00000000"),
        ("   ", "00000000"),
        ("00000000", "00000000"),
        ("2024-13-45", "00000000"),
        ("not a date", "00000000"),
        ("15/01/2024", "00000000"),
    ],
)
def test_format_date(value, expected):
    assert format_date(value) == expected


@pytest.mark.parametrize("value", ["๒๐๒๔๐๑๑๕", "๒๐๒๔-๐๑-๑๕", "２０２４０１１５"])
def test_format_date_rejects_non_ascii_digits(value):
    assert format_date(value) == "00000000"


def test_thai_digit_date_encodes_as_zeros(hn_date_fields):
    data = encode_table(hn_date_fields, [{"HN": "1", "DATE": "๒๐๒๔๐๑๑๕"}])
    record = data[97:97 + 19]
    assert record[11:19] == b"00000000"
