"""Bit-level reader for EER event streams."""
from __future__ import annotations

from .constants import MAX_READ_BITS
from .errors import CorruptStreamError


class BitReader:
    """
    Reads unsigned integers of arbitrary width from a byte buffer.

    Bits are consumed least-significant first within each byte and bytes in
    ascending order, so bit 0 of a returned value is the first unread bit.
    """

    def __init__(self, buffer: bytes):
        self._buffer = buffer if isinstance(buffer, bytes) else bytes(buffer)
        self._total_bits = 8 * len(self._buffer)
        self._bit_pos = 0

    @property
    def bit_position(self) -> int:
        return self._bit_pos

    @property
    def bits_remaining(self) -> int:
        return max(0, self._total_bits - self._bit_pos)

    def get_bits(self, n: int) -> int:
        if n < 1 or n > MAX_READ_BITS:
            raise ValueError(f"Bit count must be in 1..{MAX_READ_BITS}, got {n}")
        end = self._bit_pos + n
        if end > self._total_bits:
            raise CorruptStreamError(
                f"Read of {n} bits at bit {self._bit_pos} exceeds buffer of {self._total_bits} bits"
            )
        byte_index = self._bit_pos >> 3
        bit_offset = self._bit_pos & 7
        # at most 5 bytes: a 32-bit read at offset 7 spans 39 bits
        last_byte = (end + 7) >> 3
        chunk = int.from_bytes(self._buffer[byte_index:last_byte], "little")
        self._bit_pos = end
        return (chunk >> bit_offset) & ((1 << n) - 1)

    def no_bits_left(self) -> bool:
        return self._bit_pos >= self._total_bits
