"""Container-level helpers for EER frames: compression parameters and strips."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, List

from .constants import (
    COMPRESSION_EER_V0,
    COMPRESSION_EER_V1,
    COMPRESSION_EER_V2,
    MAX_READ_BITS,
    TAG_HORZ_SUB_BITS,
    TAG_POS_SKIP_BITS,
    TAG_VERT_SUB_BITS,
)
from .errors import CorruptStreamError, StripReadError, UnsupportedFormatError


@dataclass(frozen=True)
class CompressionParams:
    code_len: int
    horz_sub_bits: int
    vert_sub_bits: int

    @property
    def sentinel(self) -> int:
        """Skip value meaning 'keep skipping, no event here'."""
        return (1 << self.code_len) - 1


@dataclass(frozen=True)
class StripInfo:
    offset: int
    size: int


_FIXED_PARAMS = {
    COMPRESSION_EER_V0: CompressionParams(code_len=8, horz_sub_bits=2, vert_sub_bits=2),
    COMPRESSION_EER_V1: CompressionParams(code_len=7, horz_sub_bits=2, vert_sub_bits=2),
}


def _required_tag(frame, code: int) -> int:
    value = frame.tag_value(code)
    if value is None:
        raise UnsupportedFormatError(f"Missing EER tag {code} for compression {COMPRESSION_EER_V2}")
    return int(value)


def get_compression_params(frame) -> CompressionParams:
    """
    Resolve the code layout for the frame the cursor currently points at.

    Must be called again for every decoded frame since the compression tag
    can change between pages.
    """
    compression = int(frame.compression)
    if compression in _FIXED_PARAMS:
        return _FIXED_PARAMS[compression]
    if compression != COMPRESSION_EER_V2:
        raise UnsupportedFormatError(f"Unsupported compression type: {compression}")

    params = CompressionParams(
        code_len=_required_tag(frame, TAG_POS_SKIP_BITS),
        horz_sub_bits=_required_tag(frame, TAG_HORZ_SUB_BITS),
        vert_sub_bits=_required_tag(frame, TAG_VERT_SUB_BITS),
    )
    if not 1 <= params.code_len <= MAX_READ_BITS:
        raise CorruptStreamError(f"Invalid skip code length {params.code_len}")
    for sub_bits in (params.horz_sub_bits, params.vert_sub_bits):
        if not 0 <= sub_bits <= MAX_READ_BITS:
            raise CorruptStreamError(f"Invalid sub-pixel bit count {sub_bits}")
    return params


def get_strips_info(frame) -> List[StripInfo]:
    offsets = list(frame.strip_offsets)
    sizes = list(frame.strip_byte_counts)
    if len(offsets) != len(sizes):
        raise CorruptStreamError(
            f"Strip offsets ({len(offsets)}) and byte counts ({len(sizes)}) differ in length"
        )
    return [StripInfo(offset=int(o), size=int(s)) for o, s in zip(offsets, sizes)]


def strip_pixel_range(strip_idx: int, rows_per_strip: int, width: int, height: int) -> tuple[int, int]:
    """Flat [start, end) pixel range of a strip; the last strip is clipped to the frame."""
    start_row = strip_idx * rows_per_strip
    end_row = min(start_row + rows_per_strip, height)
    return start_row * width, max(start_row, end_row) * width


def read_strip(fh: BinaryIO, strip: StripInfo, strip_idx: int = 0) -> bytes:
    if strip.size == 0:
        return b""
    try:
        fh.seek(strip.offset)
        data = fh.read(strip.size)
    except OSError as exc:
        raise StripReadError(f"Failed to read strip {strip_idx} at offset {strip.offset}: {exc}") from exc
    if len(data) != strip.size:
        raise StripReadError(
            f"Short read for strip {strip_idx}: expected {strip.size} bytes at offset {strip.offset}, got {len(data)}"
        )
    return data
