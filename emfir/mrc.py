"""MRC volume reader: fixed-layout header plus strided thumbnail sampling."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

import imageio.v2 as imageio
import numpy as np

from .constants import (
    DEFAULT_MRC_DOWNSAMPLE,
    MRC_HEADER_SIZE,
    MRC_MAX_MODE,
    MRC_MODE_FLOAT32,
    MRC_MODE_INT16,
    MRC_MODE_INT8,
    MRC_MODE_UINT16,
)
from .errors import CorruptStreamError, UnsupportedFormatError
from .models import ImageData, VoxelType
from .utils import gray_to_rgb, linear_scale_to_u8

# nx..mz, cella, cellb, mapc/mapr/maps, dmin/dmax/dmean, ispg, nsymbt
HEADER_STRUCT = struct.Struct("<10i6f3i3f2i")

VOXEL_TYPES = {
    MRC_MODE_INT8: VoxelType.Int8,
    MRC_MODE_INT16: VoxelType.Int16,
    MRC_MODE_FLOAT32: VoxelType.Float32,
    MRC_MODE_UINT16: VoxelType.UInt16,
}

THUMBNAIL_DTYPES = {
    MRC_MODE_INT8: np.dtype("<i1"),
    MRC_MODE_INT16: np.dtype("<i2"),
    MRC_MODE_FLOAT32: np.dtype("<f4"),
    MRC_MODE_UINT16: np.dtype("<u2"),
}


@dataclass
class MrcHeader:
    nx: int
    ny: int
    nz: int
    mode: int
    start: tuple[int, int, int]
    sampling: tuple[int, int, int]
    cell_dims: tuple[float, float, float]
    cell_angles: tuple[float, float, float]
    map_axis: tuple[int, int, int]
    density: tuple[float, float, float]
    space_group: int
    nsymbt: int

    @classmethod
    def read(cls, f: BinaryIO) -> "MrcHeader":
        f.seek(0)
        raw = f.read(HEADER_STRUCT.size)
        if len(raw) != HEADER_STRUCT.size:
            raise CorruptStreamError("Incomplete MRC header")
        v = HEADER_STRUCT.unpack(raw)
        header = cls(
            nx=v[0],
            ny=v[1],
            nz=v[2],
            mode=v[3],
            start=(v[4], v[5], v[6]),
            sampling=(v[7], v[8], v[9]),
            cell_dims=(v[10], v[11], v[12]),
            cell_angles=(v[13], v[14], v[15]),
            map_axis=(v[16], v[17], v[18]),
            density=(v[19], v[20], v[21]),
            space_group=v[22],
            nsymbt=v[23],
        )
        if header.mode < 0 or header.mode > MRC_MAX_MODE:
            raise UnsupportedFormatError("Invalid mode value")
        if header.nx <= 0 or header.ny <= 0 or header.nz <= 0:
            raise CorruptStreamError(f"Invalid MRC dimensions {header.nx}x{header.ny}x{header.nz}")
        if header.nsymbt < 0:
            raise CorruptStreamError(f"Invalid extended header size {header.nsymbt}")
        return header

    @property
    def pixel_size(self) -> tuple[float, float, float]:
        """Cell length over grid sampling per axis (Angstrom per pixel)."""
        sizes = []
        for length, sampling, n in zip(self.cell_dims, self.sampling, (self.nx, self.ny, self.nz)):
            divisor = sampling if sampling > 0 else n
            sizes.append(float(length) / divisor)
        return tuple(sizes)

    @property
    def data_offset(self) -> int:
        return MRC_HEADER_SIZE + self.nsymbt


def image_data_from_header(header: MrcHeader) -> ImageData:
    sx, sy, sz = header.pixel_size
    return ImageData(
        size_x=header.nx,
        size_y=header.ny,
        size_z=header.nz,
        size_t=1,
        size_c=1,
        voxel_type=VOXEL_TYPES.get(header.mode, VoxelType.Float32),
        voxel_spacing_x=sx,
        voxel_spacing_y=sy,
        voxel_spacing_z=sz,
    )


class MrcFile:
    def __init__(self, path: str | Path, header: MrcHeader):
        self.path = Path(path)
        self.header = header
        self.image_data = image_data_from_header(header)

    @classmethod
    def open(cls, path: str | Path) -> "MrcFile":
        with open(path, "rb") as f:
            header = MrcHeader.read(f)
        return cls(path, header)

    def read_section(self, z: int = 0, downsample: int = 1) -> np.ndarray:
        """Nearest-neighbour sample every ``downsample``-th pixel of section ``z``."""
        if downsample < 1:
            raise ValueError("downsample must be >= 1")
        hdr = self.header
        dtype = THUMBNAIL_DTYPES.get(hdr.mode)
        if dtype is None:
            raise UnsupportedFormatError(f"Unsupported mode for thumbnails: {hdr.mode}")
        if not 0 <= z < hdr.nz:
            raise IndexError(f"Section {z} out of range for nz={hdr.nz}")

        section_bytes = hdr.nx * hdr.ny * dtype.itemsize
        offset = hdr.data_offset + z * section_bytes
        if os.path.getsize(self.path) < offset + section_bytes:
            raise CorruptStreamError(f"MRC data for section {z} is truncated")
        section = np.memmap(
            self.path, dtype=dtype, mode="r", offset=offset, shape=(hdr.ny, hdr.nx)
        )
        return np.array(section[::downsample, ::downsample], dtype=np.float32)

    def save_thumbnail(self, path: str | Path, downsample: int = DEFAULT_MRC_DOWNSAMPLE) -> np.ndarray:
        thumb = self.read_section(0, downsample=downsample)
        rgb = gray_to_rgb(linear_scale_to_u8(thumb))
        imageio.imwrite(str(path), rgb)
        return rgb
