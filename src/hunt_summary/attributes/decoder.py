from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from types import MappingProxyType

from hunt_summary.attributes.types import RawAttributeMap, SourceMarker
from hunt_summary.core.errors import EmptyDocument, FileAccessError, MalformedDocument

logger = logging.getLogger(__name__)


def decode_attribute_document(raw: bytes | str) -> RawAttributeMap:
    """
    Decode an attribute-list document into a flat key -> text mapping.

    The client writes entries like `<Attr name="MissionBagPlayer_0_0_mmr" value="2500"/>`.
    Every element carrying both `name` and `value` counts as an entry, wherever it
    sits in the tree. Values are kept as text; typing happens per known key during
    extraction. A repeated name keeps its last value.

    Raises:
      - EmptyDocument when there is nothing to decode yet (empty file, bare root).
      - MalformedDocument when the bytes are not well-formed XML.
    """
    if isinstance(raw, str):
        raw = raw.lstrip("\ufeff")

    if not raw.strip():
        raise EmptyDocument("Attribute document is empty.")

    try:
        root = ET.fromstring(raw)
    except ET.ParseError as e:
        raise MalformedDocument(f"Attribute document is not well-formed: {e}") from e

    items: dict[str, str] = {}
    for elem in root.iter():
        name = elem.get("name")
        value = elem.get("value")
        if name is None or value is None:
            continue
        name = name.strip()
        if not name:
            continue
        items[name] = value

    if not items:
        raise EmptyDocument("Attribute document has no entries.")

    logger.debug("Decoded %d attribute entries", len(items))
    return MappingProxyType(items)


def read_attribute_file(path: Path) -> tuple[bytes, SourceMarker]:
    """Read the source file and the marker it had when read."""

    marker = stat_attribute_file(path)
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise FileAccessError(f"Could not read {path}: {e}") from e

    return raw, marker


def stat_attribute_file(path: Path) -> SourceMarker:
    try:
        return SourceMarker.from_stat(path.stat())
    except OSError as e:
        raise FileAccessError(f"Could not stat {path}: {e}") from e
