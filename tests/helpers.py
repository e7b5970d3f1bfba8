"""Builders for synthetic EER strips, frame cursors and TIFF files."""
from __future__ import annotations

import io
import struct
from pathlib import Path

from emfir.constants import (
    COMPRESSION_EER_V0,
    COMPRESSION_EER_V2,
    TAG_HORZ_SUB_BITS,
    TAG_POS_SKIP_BITS,
    TAG_VERT_SUB_BITS,
    TAG_XML_DATA,
)
from emfir.format import CompressionParams
from emfir.mrc import HEADER_STRUCT


def pack_bits(fields: list[tuple[int, int]]) -> bytes:
    """Pack (value, width) fields LSB-first, zero-padding the last byte."""
    acc = 0
    nbits = 0
    for value, width in fields:
        acc |= (value & ((1 << width) - 1)) << nbits
        nbits += width
    return acc.to_bytes((nbits + 7) // 8, "little")


def event_fields(positions, n_pixels: int, params: CompressionParams) -> list[tuple[int, int]]:
    """Code words placing one event at each strip-local position."""
    sentinel = params.sentinel
    fields = []
    prev = 0
    for p in sorted(positions):
        gap = p - prev
        while gap >= sentinel:
            fields.append((sentinel, params.code_len))
            gap -= sentinel
        fields.append((gap, params.code_len))
        if params.vert_sub_bits:
            fields.append((0, params.vert_sub_bits))
        if params.horz_sub_bits:
            fields.append((0, params.horz_sub_bits))
        prev = p + 1
    while prev < n_pixels:
        fields.append((sentinel, params.code_len))
        prev += sentinel
    return fields


def encode_frame(events, width: int, height: int, rows_per_strip: int, params: CompressionParams) -> list[bytes]:
    """Strip payloads for a frame with events at flat pixel indices ``events``."""
    strips = []
    for start_row in range(0, height, rows_per_strip):
        end_row = min(start_row + rows_per_strip, height)
        start = start_row * width
        end = end_row * width
        local = [e - start for e in events if start <= e < end]
        strips.append(pack_bits(event_fields(local, end - start, params)))
    return strips


PARAMS_V0 = CompressionParams(code_len=8, horz_sub_bits=2, vert_sub_bits=2)


class FakeEER:
    """In-memory frame cursor with the same surface as ``emfir.EERFile``."""

    def __init__(self, pages: list[dict]):
        self.pages = pages
        self.frame_index = 0
        blob = bytearray()
        for page in pages:
            offsets = []
            for strip in page["strips"]:
                offsets.append(len(blob))
                blob += strip
            page.setdefault("strip_offsets", offsets)
            page.setdefault("strip_byte_counts", [len(s) for s in page["strips"]])
        self.fh = io.BytesIO(bytes(blob))

    @property
    def page(self) -> dict:
        return self.pages[self.frame_index]

    @property
    def num_frames(self) -> int:
        return len(self.pages)

    def more_frames(self) -> bool:
        return self.frame_index + 1 < len(self.pages)

    def next_frame(self) -> None:
        self.frame_index += 1

    def tag_value(self, code: int, default=None):
        return self.page.get("tags", {}).get(code, default)

    @property
    def width(self) -> int:
        return self.page["width"]

    @property
    def height(self) -> int:
        return self.page["height"]

    @property
    def compression(self) -> int:
        return self.page.get("compression", COMPRESSION_EER_V0)

    @property
    def rows_per_strip(self) -> int:
        return self.page["rows_per_strip"]

    @property
    def strip_offsets(self):
        return self.page["strip_offsets"]

    @property
    def strip_byte_counts(self):
        return self.page["strip_byte_counts"]


def make_page(events, width=8, height=6, rows_per_strip=2, params=PARAMS_V0, compression=COMPRESSION_EER_V0):
    page = {
        "width": width,
        "height": height,
        "rows_per_strip": rows_per_strip,
        "compression": compression,
        "strips": encode_frame(events, width, height, rows_per_strip, params),
    }
    if compression == COMPRESSION_EER_V2:
        page["tags"] = {
            TAG_POS_SKIP_BITS: params.code_len,
            TAG_HORZ_SUB_BITS: params.horz_sub_bits,
            TAG_VERT_SUB_BITS: params.vert_sub_bits,
        }
    return page


_SHORT = 3
_LONG = 4
_UNDEFINED = 7


def write_eer_tiff(path: Path, pages: list[dict], xml: bytes | None = None) -> None:
    """
    Write a minimal little-endian TIFF whose pages carry EER strips.

    Each page dict holds width, height, rows_per_strip, compression, strips
    and optional extra SHORT tags under "tags".
    """
    buf = bytearray(b"II" + struct.pack("<HI", 42, 0))
    next_ptr = 4
    for page_idx, page in enumerate(pages):
        offsets = []
        for strip in page["strips"]:
            offsets.append(len(buf))
            buf += strip
        counts = [len(s) for s in page["strips"]]

        def external(values):
            if len(values) == 1:
                return values[0]
            if len(buf) % 2:
                buf.append(0)
            pos = len(buf)
            buf.extend(struct.pack(f"<{len(values)}I", *values))
            return pos

        offsets_value = external(offsets)
        counts_value = external(counts)

        entries = [
            (256, _LONG, 1, page["width"]),
            (257, _LONG, 1, page["height"]),
            (258, _SHORT, 1, 1),
            (259, _SHORT, 1, page["compression"]),
            (262, _SHORT, 1, 1),
            (273, _LONG, len(offsets), offsets_value),
            (277, _SHORT, 1, 1),
            (278, _LONG, 1, page["rows_per_strip"]),
            (279, _LONG, len(counts), counts_value),
        ]
        if xml is not None and page_idx == 0:
            if len(buf) % 2:
                buf.append(0)
            xml_pos = len(buf)
            buf += xml
            entries.append((TAG_XML_DATA, _UNDEFINED, len(xml), xml_pos))
        for code, value in sorted(page.get("tags", {}).items()):
            entries.append((code, _SHORT, 1, value))
        entries.sort(key=lambda e: e[0])

        if len(buf) % 2:
            buf.append(0)
        ifd_pos = len(buf)
        struct.pack_into("<I", buf, next_ptr, ifd_pos)
        buf += struct.pack("<H", len(entries))
        for code, typ, count, value in entries:
            if typ == _SHORT and count == 1:
                buf += struct.pack("<HHIHH", code, typ, count, value, 0)
            else:
                buf += struct.pack("<HHII", code, typ, count, value)
        next_ptr = len(buf)
        buf += struct.pack("<I", 0)

    Path(path).write_bytes(bytes(buf))


def write_mrc(path, data, mode: int, cell=(20.0, 10.0, 5.0), sampling=None, nsymbt=0) -> None:
    """Write a (nz, ny, nx) array behind a 1024-byte MRC header."""
    nz, ny, nx = data.shape
    mx, my, mz = sampling or (nx, ny, nz)
    header = HEADER_STRUCT.pack(
        nx, ny, nz, mode,
        0, 0, 0,
        mx, my, mz,
        *cell,
        90.0, 90.0, 90.0,
        1, 2, 3,
        float(data.min()), float(data.max()), float(data.mean()),
        1, nsymbt,
    )
    with open(path, "wb") as f:
        f.write(header.ljust(1024, b"\x00"))
        f.write(b"\xAA" * nsymbt)
        f.write(data.tobytes())
