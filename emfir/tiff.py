"""Frame cursor over the TIFF pages of an EER file (backed by tifffile)."""
from __future__ import annotations

import warnings
from pathlib import Path

import tifffile

from .constants import (
    TAG_COMPRESSION,
    TAG_IMAGE_LENGTH,
    TAG_IMAGE_WIDTH,
    TAG_ROWS_PER_STRIP,
    TAG_STRIP_BYTE_COUNTS,
    TAG_STRIP_OFFSETS,
    TAG_XML_DATA,
    XML_PIXEL_HEIGHT,
    XML_PIXEL_WIDTH,
)
from .errors import CorruptStreamError
from .models import ImageData, VoxelType, parse_float, parse_xml_metadata


def _as_tuple(value) -> tuple:
    if isinstance(value, (tuple, list)):
        return tuple(value)
    return (value,)


class EERFile:
    """
    Walks the pages of an EER container one frame at a time.

    Tag values are read straight from the page IFD so that pages with
    compression codes tifffile cannot decode are still usable. Strip bytes
    are read through ``fh``, a separate raw handle on the same file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._tif = tifffile.TiffFile(str(self.path))
        self._pages = self._tif.pages
        # full TiffPage objects are needed for tag access on every frame
        self._pages.useframes = False
        self.fh = open(self.path, "rb")
        self.frame_index = 0
        self._num_frames: int | None = None
        if len(self._pages) == 0:
            self.close()
            raise CorruptStreamError(f"No TIFF pages in {self.path}")

    def __enter__(self) -> "EERFile":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.fh.close()
        self._tif.close()

    @property
    def page(self):
        return self._pages[self.frame_index]

    @property
    def num_frames(self) -> int:
        if self._num_frames is None:
            self._num_frames = len(self._pages)
        return self._num_frames

    def more_frames(self) -> bool:
        return self.frame_index + 1 < self.num_frames

    def next_frame(self) -> None:
        if not self.more_frames():
            raise IndexError("No more frames in EER file")
        self.frame_index += 1

    def rewind(self) -> None:
        self.frame_index = 0

    def tag_value(self, code: int, default=None):
        tag = self.page.tags.get(code)
        if tag is None:
            return default
        return tag.value

    def _required(self, code: int):
        value = self.tag_value(code)
        if value is None:
            raise CorruptStreamError(f"Frame {self.frame_index} is missing TIFF tag {code}")
        return value

    @property
    def width(self) -> int:
        return int(self._required(TAG_IMAGE_WIDTH))

    @property
    def height(self) -> int:
        return int(self._required(TAG_IMAGE_LENGTH))

    @property
    def compression(self) -> int:
        return int(self.tag_value(TAG_COMPRESSION, 1))

    @property
    def rows_per_strip(self) -> int:
        rows = self.tag_value(TAG_ROWS_PER_STRIP)
        if rows is None:
            return self.height
        return int(rows)

    @property
    def strip_offsets(self) -> tuple:
        return _as_tuple(self._required(TAG_STRIP_OFFSETS))

    @property
    def strip_byte_counts(self) -> tuple:
        return _as_tuple(self._required(TAG_STRIP_BYTE_COUNTS))

    def xml_metadata(self) -> bytes | str | None:
        value = self.tag_value(TAG_XML_DATA)
        if value is None:
            return None
        if isinstance(value, (tuple, list)):
            return bytes(int(v) & 0xFF for v in value)
        return value


def eer_image_data(eer: EERFile) -> ImageData:
    """Summary record for the current frame; pixel spacing comes from the XML tag."""
    image_data = ImageData(
        size_x=eer.width,
        size_y=eer.height,
        voxel_type=VoxelType.UInt16,
    )
    xml = eer.xml_metadata()
    if xml is None:
        warnings.warn(f"No XML metadata in {eer.path}; pixel spacing left at 0.0")
        return image_data
    metadata = parse_xml_metadata(xml)
    image_data.voxel_spacing_x = parse_float(metadata, XML_PIXEL_WIDTH)
    image_data.voxel_spacing_y = parse_float(metadata, XML_PIXEL_HEIGHT)
    return image_data


def show_header_info(path: str | Path) -> tuple[ImageData, int]:
    with EERFile(path) as eer:
        return eer_image_data(eer), eer.num_frames
