"""Summary metadata records shared by the EER and MRC readers."""
from __future__ import annotations

import enum
import json
import warnings
import xml.etree.ElementTree as ET
from dataclasses import asdict, dataclass


class VoxelType(enum.Enum):
    Float32 = "Float32"
    Float64 = "Float64"
    Int8 = "Int8"
    UInt8 = "UInt8"
    Int16 = "Int16"
    UInt16 = "UInt16"


@dataclass
class ImageData:
    size_x: int = 0
    size_y: int = 0
    size_z: int = 1
    size_t: int = 1
    size_c: int = 1
    voxel_type: VoxelType = VoxelType.UInt16
    voxel_spacing_x: float = 0.0
    voxel_spacing_y: float = 0.0
    voxel_spacing_z: float = 0.0

    def to_dict(self) -> dict:
        out = asdict(self)
        out["voxel_type"] = self.voxel_type.value
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)


def parse_xml_metadata(xml: bytes | str) -> dict[str, str]:
    """
    Collect ``<item name="...">value</item>`` entries from EER side-metadata.

    Malformed XML is not fatal; a warning is emitted and an empty dict returned.
    """
    if isinstance(xml, bytes):
        xml = xml.decode("utf-8", errors="replace")
    xml = xml.strip("\x00 \r\n\t")
    try:
        root = ET.fromstring(xml)
    except ET.ParseError as exc:
        warnings.warn(f"Error parsing XML metadata: {exc}")
        return {}

    metadata: dict[str, str] = {}
    for item in root.iter("item"):
        name = item.get("name")
        text = (item.text or "").strip()
        if name and text:
            metadata[name] = text
    return metadata


def parse_float(metadata: dict[str, str], key: str, default: float = 0.0) -> float:
    value = metadata.get(key)
    if value is None:
        warnings.warn(f"Metadata field {key!r} not found; using {default}")
        return default
    try:
        return float(value)
    except ValueError:
        warnings.warn(f"Metadata field {key!r} is not a number ({value!r}); using {default}")
        return default
