from hunt_summary.attributes.decoder import (
    decode_attribute_document,
    read_attribute_file,
    stat_attribute_file,
)
from hunt_summary.attributes.types import RawAttributeMap, SourceMarker

__all__ = [
    "RawAttributeMap",
    "SourceMarker",
    "decode_attribute_document",
    "read_attribute_file",
    "stat_attribute_file",
]
