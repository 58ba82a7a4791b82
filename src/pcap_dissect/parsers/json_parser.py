"""Parser for ``tshark -T json`` output."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..core.constants import FRAME_LAYER_NAME, RAW_SUFFIX
from ..core.decorators import handle_parse_errors
from ..exceptions import JSONParseError
from ..logging import get_logger
from ..packet import FieldOffset, JsonLayer, Packet
from ..utils import _safe_int, decode_hex, normalize_epoch
from .base import BaseParser, InputData, read_text

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s*")

FRAME_RAW_KEY = FRAME_LAYER_NAME + RAW_SUFFIX
_FRAME_METADATA = {
    "number": "frame.number",
    "length": "frame.len",
    "captured_length": "frame.cap_len",
    "frame_time": "frame.time",
    "frame_time_epoch": "frame.time_epoch",
}
_INDEX_KEYS = ("_index", "_type", "_score")


def _merge_duplicate_keys(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    """``object_pairs_hook`` turning repeated keys into lists of values.

    tshark prints a repeated field (two ``ip.addr``, two ``dns.a``...) as the
    same key several times in one object.
    """
    merged: Dict[str, Any] = {}
    repeated = set()
    for key, value in pairs:
        if key not in merged:
            merged[key] = value
            continue
        if key not in repeated:
            merged[key] = [merged[key]]
            repeated.add(key)
        merged[key].append(value)
    return merged


def iter_array_elements(text: str) -> Iterator[Tuple[int, Any]]:
    """Yield ``(position, element)`` for each element of a top-level JSON array.

    Elements are decoded one at a time, so a malformed element raises only
    after every earlier element has been yielded. A bare object is treated as
    a one-element array and empty input yields nothing.
    """
    decoder = json.JSONDecoder(object_pairs_hook=_merge_duplicate_keys)
    end = len(text)
    idx = _WHITESPACE.match(text, 0).end()
    if idx >= end:
        return
    if text[idx] != "[":
        try:
            element, _ = decoder.raw_decode(text, idx)
        except json.JSONDecodeError as exc:
            raise JSONParseError("failed to decode packet 0", context=str(exc)) from exc
        yield 0, element
        return

    idx += 1
    position = 0
    while True:
        idx = _WHITESPACE.match(text, idx).end()
        if idx >= end:
            raise JSONParseError(
                "unterminated JSON array", context=f"after packet {position - 1}"
            )
        if text[idx] == "]":
            return
        if position:
            if text[idx] != ",":
                raise JSONParseError(
                    f"expected ',' before packet {position}", context=f"offset {idx}"
                )
            idx = _WHITESPACE.match(text, idx + 1).end()
        try:
            element, idx = decoder.raw_decode(text, idx)
        except json.JSONDecodeError as exc:
            raise JSONParseError(f"failed to decode packet {position}", context=str(exc)) from exc
        yield position, element
        position += 1


def _scalar(value: Any) -> str:
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("value")
    return "" if value is None else str(value)


def _raw_hex(value: Any) -> Optional[str]:
    """Hex string of a ``*_raw`` entry: plain string, ``[hex, pos, len, ...]`` or ``{"value": hex}``."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, dict):
        value = value.get("value")
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, str) else None


def _raw_span(name: str, value: Any) -> Optional[FieldOffset]:
    """Offset from a ``[hex, pos, len, mask, type]`` list (first one if repeated)."""
    if not isinstance(value, list) or not value:
        return None
    if isinstance(value[0], list):
        value = value[0]
    if len(value) < 3 or not isinstance(value[0], str):
        return None
    start = _safe_int(value[1])
    length = _safe_int(value[2])
    if start is None or length is None:
        return None
    return FieldOffset(start=start, length=length, name=name)


class JsonParser(BaseParser):
    """Build packets from the JSON array tshark writes with ``-T json``."""

    format_name = "json"
    error_class = JSONParseError

    @handle_parse_errors(JSONParseError)
    def iter_packets(self, data: InputData) -> Iterator[Packet]:
        for position, element in iter_array_elements(read_text(data)):
            yield self.packet_from_document(element, position)

    def packet_from_document(self, document: Any, position: int = 0) -> Packet:
        source = document.get("_source") if isinstance(document, dict) else None
        layers_blob = source.get("layers") if isinstance(source, dict) else None
        if not isinstance(layers_blob, dict):
            raise JSONParseError(
                "packet has no _source.layers object", context=f"packet {position}"
            )

        index = {key.lstrip("_"): document[key] for key in _INDEX_KEYS if key in document}
        if isinstance(document.get("_index"), dict):
            index.update(document["_index"])

        layer_spans: Dict[str, FieldOffset] = {}
        field_offsets: Dict[Tuple[str, str], FieldOffset] = {}
        layer_blobs: Dict[str, Any] = {}
        for key, value in layers_blob.items():
            if value is None:
                continue
            if key.endswith(RAW_SUFFIX):
                span = _raw_span(key[: -len(RAW_SUFFIX)], value)
                if span is not None:
                    layer_spans[span.name] = span
            else:
                layer_blobs[key] = value

        raw_data = self._decode_frame_raw(layers_blob.get(FRAME_RAW_KEY), position)

        metadata = {attr: "" for attr in _FRAME_METADATA}
        layers: List[JsonLayer] = []
        frame_blob = layer_blobs.pop(FRAME_LAYER_NAME, None)
        if frame_blob is not None:
            frame_fields = frame_blob[0] if isinstance(frame_blob, list) and frame_blob else frame_blob
            if isinstance(frame_fields, dict):
                for attr, key in _FRAME_METADATA.items():
                    metadata[attr] = _scalar(frame_fields.get(key))
                metadata["frame_time_epoch"] = normalize_epoch(metadata["frame_time_epoch"])
                self._collect_frame_offsets(frame_fields, field_offsets)
            self._collect_field_offsets(FRAME_LAYER_NAME, frame_blob, field_offsets)
            layers.append(JsonLayer(FRAME_LAYER_NAME, frame_blob))

        for name in sorted(layer_blobs):
            blob = layer_blobs[name]
            self._collect_field_offsets(name, blob, field_offsets)
            layers.append(JsonLayer(name, blob))

        return Packet(
            layers=tuple(layers),
            index=index,
            raw_data=raw_data,
            field_offsets=field_offsets,
            layer_spans=layer_spans,
            **metadata,
        )

    @staticmethod
    def _decode_frame_raw(value: Any, position: int) -> Optional[bytes]:
        hex_value = _raw_hex(value)
        if not hex_value:
            return None
        try:
            return decode_hex(hex_value)
        except ValueError:
            logger.debug("Ignoring undecodable frame_raw in packet %d", position)
            return None

    @staticmethod
    def _collect_frame_offsets(
        frame_fields: Dict[str, Any], field_offsets: Dict[Tuple[str, str], FieldOffset]
    ) -> None:
        entries = frame_fields.get("frame.offset")
        if isinstance(entries, dict):
            entries = [entries]
        if not isinstance(entries, list):
            return
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            start = _safe_int(entry.get("pos"))
            length = _safe_int(entry.get("size"))
            if start is None or length is None:
                continue
            name = str(entry.get("name") or "frame.offset")
            field_offsets.setdefault(
                (FRAME_LAYER_NAME, name),
                FieldOffset(start=start, length=length, name=name, showname=str(entry.get("showname", ""))),
            )

    def _collect_field_offsets(
        self, layer_name: str, blob: Any, field_offsets: Dict[Tuple[str, str], FieldOffset]
    ) -> None:
        if isinstance(blob, list):
            for item in blob:
                self._collect_field_offsets(layer_name, item, field_offsets)
            return
        if not isinstance(blob, dict):
            return
        for key, value in blob.items():
            if key.endswith(RAW_SUFFIX):
                span = _raw_span(key[: -len(RAW_SUFFIX)], value)
                if span is not None:
                    field_offsets.setdefault((layer_name, span.name), span)
            elif isinstance(value, (dict, list)):
                self._collect_field_offsets(layer_name, value, field_offsets)
