"""Shared constants for EER and MRC decoding."""

# TIFF Compression tag values used by EER
COMPRESSION_EER_V0 = 65000
COMPRESSION_EER_V1 = 65001
COMPRESSION_EER_V2 = 65002

# Standard TIFF tags
TAG_IMAGE_WIDTH = 256
TAG_IMAGE_LENGTH = 257
TAG_COMPRESSION = 259
TAG_STRIP_OFFSETS = 273
TAG_ROWS_PER_STRIP = 278
TAG_STRIP_BYTE_COUNTS = 279

# Custom EER tags
TAG_XML_DATA = 65001
TAG_POS_SKIP_BITS = 65007
TAG_HORZ_SUB_BITS = 65008
TAG_VERT_SUB_BITS = 65009

MAX_READ_BITS = 32

# Accumulated images are reported as unsigned 16-bit counts
COUNT_MAX = 0xFFFF

DEFAULT_FRAME_SKIP = 10
DEFAULT_MRC_DOWNSAMPLE = 10

MRC_HEADER_SIZE = 1024
MRC_MODE_INT8 = 0
MRC_MODE_INT16 = 1
MRC_MODE_FLOAT32 = 2
MRC_MODE_UINT16 = 6
MRC_MAX_MODE = 6

XML_PIXEL_WIDTH = "sensorPixelSize.width"
XML_PIXEL_HEIGHT = "sensorPixelSize.height"
