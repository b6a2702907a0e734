"""
Position-tracking writer for fixed-layout binary buffers.

All offset arithmetic for the legacy table format goes through here:
callers write fixed-width slots in order and the writer advances.
"""
import struct


class TableWriter:
    """
    Writes into a pre-sized zero-filled buffer at a moving position.

    Usage:
        writer = TableWriter(size)
        writer.write_byte(0x03)
        writer.write_uint32_le(record_count)
        writer.write_fixed(b"HN", 11)
        data = writer.getvalue()
    """

    def __init__(self, size: int):
        self._buffer = bytearray(size)
        self.position = 0

    def write_byte(self, value: int) -> None:
        self._buffer[self.position] = value & 0xFF
        self.position += 1

    def write_uint16_le(self, value: int) -> None:
        struct.pack_into("<H", self._buffer, self.position, value & 0xFFFF)
        self.position += 2

    def write_uint32_le(self, value: int) -> None:
        struct.pack_into("<I", self._buffer, self.position, value & 0xFFFFFFFF)
        self.position += 4

    def write_fixed(self, data: bytes, width: int, fill: bytes = b"\x00") -> None:
        """
        Write data into a slot of exactly ``width`` bytes.

        Longer data is truncated; shorter data is padded with ``fill``.
        """
        chunk = data[:width]
        chunk = chunk + fill * (width - len(chunk))
        self._buffer[self.position:self.position + width] = chunk
        self.position += width

    def skip(self, count: int) -> None:
        """Leave ``count`` reserved bytes as zeros."""
        self.position += count

    def getvalue(self) -> bytes:
        return bytes(self._buffer)
