"""Parser for newline-delimited ``tshark -T ek`` output."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from ..core.config import settings
from ..core.constants import FRAME_LAYER_NAME, RAW_SUFFIX
from ..core.decorators import handle_parse_errors
from ..exceptions import EKParseError
from ..logging import get_logger
from ..packet import EkLayer, Packet, field_text
from ..utils import decode_hex, normalize_epoch, parse_timestamp
from .base import BaseParser, InputData

logger = get_logger(__name__)

FRAME_RAW_KEY = FRAME_LAYER_NAME + RAW_SUFFIX
_FRAME_METADATA = {
    "number": "number",
    "length": "len",
    "captured_length": "cap_len",
    "frame_time": "time",
    "frame_time_epoch": "time_epoch",
}


def _iter_lines(data: InputData) -> Iterable[Union[str, bytes]]:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).splitlines()
    if isinstance(data, str):
        return data.splitlines()
    # file objects are consumed lazily
    return data


class EkParser(BaseParser):
    """Build packets from EK documents, one JSON object per line.

    Bulk-index lines (``{"index": ...}``) and blank lines are skipped.
    ``cast_values`` defaults to the ``ek_cast_values`` setting.
    """

    format_name = "ek"
    error_class = EKParseError

    def __init__(self, cast_values: Optional[bool] = None) -> None:
        self.cast_values = settings.ek_cast_values if cast_values is None else cast_values

    @handle_parse_errors(EKParseError)
    def iter_packets(self, data: InputData) -> Iterator[Packet]:
        for line_number, line in enumerate(_iter_lines(data), start=1):
            if isinstance(line, (bytes, bytearray)):
                line = bytes(line).decode("utf-8", errors="replace")
            line = line.strip()
            if not line:
                continue
            try:
                document = json.loads(line)
            except json.JSONDecodeError as exc:
                raise EKParseError(
                    f"malformed EK document on line {line_number}", context=str(exc)
                ) from exc
            if not isinstance(document, dict):
                raise EKParseError(f"EK document on line {line_number} is not an object")
            if "index" in document and "_source" not in document and "layers" not in document:
                logger.debug("Skipping bulk index line %d", line_number)
                continue
            yield self.packet_from_document(document, line_number)

    def packet_from_document(self, document: Dict[str, Any], line_number: int = 0) -> Packet:
        source = document.get("_source", document)
        layers_blob = source.get("layers") if isinstance(source, dict) else None
        if not isinstance(layers_blob, dict):
            raise EKParseError(f"EK document on line {line_number} has no layers object")

        index: Dict[str, Any] = {}
        if isinstance(document.get("_index"), dict):
            index.update(document["_index"])
        elif "_index" in document:
            index["index"] = document["_index"]

        raw_data = None
        layer_blobs: Dict[str, Dict[str, Any]] = {}
        for name, value in layers_blob.items():
            if isinstance(value, dict):
                layer_blobs[name] = value
            elif name == FRAME_RAW_KEY:
                raw_data = self._decode_frame_raw(value, line_number)
            else:
                logger.debug("Ignoring non-layer key %s on line %d", name, line_number)

        metadata = {attr: "" for attr in _FRAME_METADATA}
        layers: List[EkLayer] = []
        frame_blob = layer_blobs.pop(FRAME_LAYER_NAME, None)
        if frame_blob is not None:
            # Metadata is read uncast so it stays in tshark's textual form.
            frame_reader = EkLayer(FRAME_LAYER_NAME, frame_blob, cast_values=False)
            for attr, name in _FRAME_METADATA.items():
                metadata[attr] = field_text(frame_reader.get_field(name))
            metadata["frame_time_epoch"] = normalize_epoch(metadata["frame_time_epoch"])
            layers.append(EkLayer(FRAME_LAYER_NAME, frame_blob, cast_values=self.cast_values))

        timestamp = source.get("timestamp", document.get("timestamp"))
        if not metadata["frame_time_epoch"] and timestamp is not None:
            parsed = parse_timestamp(timestamp)
            if parsed is not None:
                metadata["frame_time_epoch"] = f"{parsed.timestamp():.6f}"
                if not metadata["frame_time"]:
                    metadata["frame_time"] = parsed.isoformat()

        for name in sorted(layer_blobs):
            layers.append(EkLayer(name, layer_blobs[name], cast_values=self.cast_values))

        return Packet(layers=tuple(layers), index=index, raw_data=raw_data, **metadata)

    @staticmethod
    def _decode_frame_raw(value: Any, line_number: int) -> Optional[bytes]:
        hex_value = field_text(value)
        if not hex_value:
            return None
        try:
            return decode_hex(hex_value)
        except ValueError:
            logger.debug("Ignoring undecodable frame_raw on line %d", line_number)
            return None
