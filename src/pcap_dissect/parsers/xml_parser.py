"""Parser for PDML (``tshark -T pdml``) output."""

from __future__ import annotations

import io
import re
from typing import Dict, Iterator, List, Optional, Tuple
from xml.etree import ElementTree

from ..core.config import settings
from ..core.constants import FRAME_LAYER_NAME, GENINFO_LAYER_NAME
from ..core.decorators import handle_parse_errors
from ..exceptions import XMLParseError
from ..logging import get_logger
from ..packet import FieldOffset, LayerFieldsContainer, Packet, XmlLayer
from .base import BaseParser, InputData, read_bytes

logger = get_logger(__name__)

_XML_DECLARATION = re.compile(rb"^\s*<\?xml[^>]*\?>")

# packet attribute -> (geninfo field, frame field)
_FRAME_METADATA: Dict[str, Tuple[str, str]] = {
    "number": ("num", "frame.number"),
    "length": ("len", "frame.len"),
    "captured_length": ("caplen", "frame.cap_len"),
    "frame_time": ("", "frame.time"),
    "frame_time_epoch": ("timestamp", "frame.time_epoch"),
}


def ensure_pdml_root(content: bytes) -> bytes:
    """Wrap a bare ``<packet>`` fragment in a ``<pdml>`` element."""
    if b"<pdml" in content:
        return content
    body = _XML_DECLARATION.sub(b"", content, count=1)
    return b"<pdml>" + body + b"</pdml>"


def _container_text(container: Optional[LayerFieldsContainer], prefer_raw: bool = False) -> str:
    if container is None or container.main_field is None:
        return ""
    main = container.main_field
    if prefer_raw and main.raw_value:
        return main.raw_value
    return main.default_value


class XmlParser(BaseParser):
    """Build packets from PDML, one ``<packet>`` element at a time.

    ``raw_mode`` and ``include_positions`` default to the
    ``xml_raw_mode``/``xml_include_positions`` settings.
    """

    format_name = "pdml"
    error_class = XMLParseError

    def __init__(
        self, raw_mode: Optional[bool] = None, include_positions: Optional[bool] = None
    ) -> None:
        self.raw_mode = settings.xml_raw_mode if raw_mode is None else raw_mode
        self.include_positions = (
            settings.xml_include_positions if include_positions is None else include_positions
        )

    @handle_parse_errors(XMLParseError)
    def iter_packets(self, data: InputData) -> Iterator[Packet]:
        content = read_bytes(data)
        if not content.strip():
            return
        content = ensure_pdml_root(content)
        position = 0
        try:
            for _, element in ElementTree.iterparse(io.BytesIO(content), events=("end",)):
                if element.tag != "packet":
                    continue
                packet = self.packet_from_element(element)
                element.clear()
                yield packet
                position += 1
        except ElementTree.ParseError as exc:
            raise XMLParseError(
                f"malformed PDML in packet {position}", context=str(exc)
            ) from exc

    def packet_from_element(self, element: ElementTree.Element) -> Packet:
        metadata = {attr: "" for attr in _FRAME_METADATA}
        layers: List[XmlLayer] = []
        field_offsets: Dict[Tuple[str, str], FieldOffset] = {}
        layer_spans: Dict[str, FieldOffset] = {}

        for proto in element.findall("proto"):
            layer = XmlLayer.from_element(
                proto, raw_mode=self.raw_mode, include_positions=self.include_positions
            )
            if layer.layer_name == GENINFO_LAYER_NAME:
                self._apply_metadata(layer, metadata, use_geninfo=True)
                continue
            if layer.layer_name == FRAME_LAYER_NAME:
                self._apply_metadata(layer, metadata, use_geninfo=False)
            layers.append(layer)
            if self.include_positions:
                self._collect_offsets(layer, field_offsets, layer_spans)

        if not metadata["number"]:
            metadata["number"] = element.get("num", "")

        return Packet(
            layers=tuple(layers),
            field_offsets=field_offsets,
            layer_spans=layer_spans,
            **metadata,
        )

    @staticmethod
    def _apply_metadata(layer: XmlLayer, metadata: Dict[str, str], use_geninfo: bool) -> None:
        for attr, (geninfo_name, frame_name) in _FRAME_METADATA.items():
            name = geninfo_name if use_geninfo else frame_name
            if not name:
                continue
            # geninfo's "timestamp" shows a date; its value attribute is the epoch
            value = _container_text(
                layer.all_fields.get(name), prefer_raw=use_geninfo and attr == "frame_time_epoch"
            )
            if value:
                metadata[attr] = value

    @staticmethod
    def _collect_offsets(
        layer: XmlLayer,
        field_offsets: Dict[Tuple[str, str], FieldOffset],
        layer_spans: Dict[str, FieldOffset],
    ) -> None:
        for layer_field in layer.iter_positioned_fields():
            field_offsets.setdefault(
                (layer.layer_name, layer_field.name),
                FieldOffset(
                    start=layer_field.pos,
                    length=layer_field.size,
                    name=layer_field.name,
                    showname=layer_field.showname,
                ),
            )
        if layer.pos is not None and layer.size:
            layer_spans.setdefault(
                layer.layer_name,
                FieldOffset(start=layer.pos, length=layer.size, name=layer.layer_name),
            )
