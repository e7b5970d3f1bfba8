"""Electron-microscopy image extraction from EER event streams and MRC maps."""
from .constants import (
    COMPRESSION_EER_V0,
    COMPRESSION_EER_V1,
    COMPRESSION_EER_V2,
    DEFAULT_FRAME_SKIP,
)
from .bitstream import BitReader
from .errors import CorruptStreamError, EmfirError, StripReadError, UnsupportedFormatError
from .format import CompressionParams, StripInfo, get_compression_params, get_strips_info
from .decoder import decode_eer_frame, decode_frames, decode_strip, generate_thumbnail
from .models import ImageData, VoxelType, parse_xml_metadata
from .mrc import MrcFile, MrcHeader
from .tiff import EERFile, show_header_info
from .version import __version__, get_version_string, get_build_meta

__all__ = [
    "COMPRESSION_EER_V0",
    "COMPRESSION_EER_V1",
    "COMPRESSION_EER_V2",
    "DEFAULT_FRAME_SKIP",
    "BitReader",
    "CompressionParams",
    "StripInfo",
    "get_compression_params",
    "get_strips_info",
    "decode_strip",
    "decode_eer_frame",
    "decode_frames",
    "generate_thumbnail",
    "EERFile",
    "show_header_info",
    "MrcFile",
    "MrcHeader",
    "ImageData",
    "VoxelType",
    "parse_xml_metadata",
    "EmfirError",
    "UnsupportedFormatError",
    "CorruptStreamError",
    "StripReadError",
    "get_version_string",
    "get_build_meta",
    "__version__",
]
