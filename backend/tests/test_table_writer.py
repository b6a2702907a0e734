"""
Tests for TableWriter.
"""
import pytest

from revenue.export.table_writer import TableWriter


def test_writes_advance_position():
    writer = TableWriter(7)
    writer.write_byte(0x03)
    writer.write_uint16_le(0x0102)
    writer.write_uint32_le(0x01020304)

    assert writer.position == 7
    assert writer.getvalue() == b"\x03\x02\x01\x04\x03\x02\x01"


def test_write_byte_masks_to_one_byte():
    writer = TableWriter(1)
    writer.write_byte(0x1FF)
    assert writer.getvalue() == b"\xff"


def test_write_fixed_pads_with_nulls():
    writer = TableWriter(5)
    writer.write_fixed(b"HN", 5)
    assert writer.getvalue() == b"HN\x00\x00\x00"


def test_write_fixed_custom_fill():
    writer = TableWriter(5)
    writer.write_fixed(b"AB", 5, b" ")
    assert writer.getvalue() == b"AB   "


def test_write_fixed_truncates():
    writer = TableWriter(3)
    writer.write_fixed(b"ABCDEF", 3)
    assert writer.getvalue() == b"ABC"
    assert writer.position == 3


def test_skip_leaves_zeros():
    writer = TableWriter(4)
    writer.skip(3)
    writer.write_byte(0x0D)
    assert writer.getvalue() == b"\x00\x00\x00\x0d"


def test_write_past_end_raises():
    writer = TableWriter(1)
    writer.write_byte(1)
    with pytest.raises(IndexError):
        writer.write_byte(2)
