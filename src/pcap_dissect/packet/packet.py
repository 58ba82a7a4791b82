"""Parsed packet: ordered layers plus frame metadata and optional raw bytes."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, TextIO, Tuple, Union

from ..core.constants import TRANSPORT_LAYERS
from ..exceptions import SniffTimeUnavailableError
from .layers import BaseLayer


@dataclass(frozen=True)
class FieldOffset:
    """Byte range of a field (or layer) within the raw frame."""

    start: int
    length: int
    name: str = ""
    showname: str = ""

    def fits(self, buffer_length: int) -> bool:
        return self.start >= 0 and self.length > 0 and self.start + self.length <= buffer_length

    def slice(self, raw_data: Optional[bytes]) -> Optional[bytes]:
        if raw_data is None or not self.fits(len(raw_data)):
            return None
        return raw_data[self.start:self.start + self.length]


@dataclass(frozen=True, eq=False)
class Packet:
    """A single dissected packet.

    ``layers`` is ordered: the frame layer (when present) comes first. Frame
    metadata is kept as the strings tshark printed; use :attr:`sniff_time` for
    a parsed timestamp.
    """

    layers: Tuple[BaseLayer, ...] = ()
    number: str = ""
    length: str = ""
    captured_length: str = ""
    frame_time: str = ""
    frame_time_epoch: str = ""
    index: Dict[str, Any] = field(default_factory=dict)
    raw_data: Optional[bytes] = None
    field_offsets: Dict[Tuple[str, str], FieldOffset] = field(default_factory=dict)
    layer_spans: Dict[str, FieldOffset] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def get_layer(self, name: str) -> Optional[BaseLayer]:
        """Return the first layer called ``name`` (case-insensitive)."""
        lowered = name.lower()
        for layer in self.layers:
            if layer.layer_name.lower() == lowered:
                return layer
        return None

    def get_multiple_layers(self, name: str) -> List[BaseLayer]:
        lowered = name.lower()
        return [layer for layer in self.layers if layer.layer_name.lower() == lowered]

    def has_layer(self, name: str) -> bool:
        return self.get_layer(name) is not None

    @property
    def highest_layer(self) -> str:
        if not self.layers:
            return ""
        return self.layers[-1].layer_name

    @property
    def transport_layer(self) -> str:
        for name in TRANSPORT_LAYERS:
            if self.has_layer(name):
                return name
        return ""

    # ------------------------------------------------------------------
    # Time
    # ------------------------------------------------------------------

    @property
    def sniff_timestamp(self) -> float:
        if not self.frame_time_epoch:
            raise SniffTimeUnavailableError(
                "sniff time epoch not available", context=f"packet {self.number or '?'}"
            )
        try:
            timestamp = float(self.frame_time_epoch)
        except ValueError as exc:
            raise SniffTimeUnavailableError(
                "failed to parse sniff time epoch", context=self.frame_time_epoch
            ) from exc
        if not math.isfinite(timestamp):
            raise SniffTimeUnavailableError(
                "sniff time epoch is not finite", context=self.frame_time_epoch
            )
        return timestamp

    @property
    def sniff_time(self) -> datetime:
        """Capture time as an aware UTC datetime."""
        timestamp = self.sniff_timestamp
        try:
            return datetime.fromtimestamp(timestamp, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise SniffTimeUnavailableError(
                "sniff time epoch out of range", context=self.frame_time_epoch
            ) from exc

    # ------------------------------------------------------------------
    # Raw bytes
    # ------------------------------------------------------------------

    def get_raw_packet(self) -> Optional[bytes]:
        return self.raw_data or None

    def get_layer_raw_bytes(self, layer_name: str) -> Optional[bytes]:
        span = self.layer_spans.get(layer_name)
        if span is None:
            lowered = layer_name.lower()
            span = next((s for n, s in self.layer_spans.items() if n.lower() == lowered), None)
        if span is None:
            return None
        return span.slice(self.raw_data)

    def get_field_offset(self, layer_name: str, field_name: str) -> Optional[FieldOffset]:
        """Look the offset up by the given name, then by its ``layer.field`` form."""
        for key in ((layer_name, field_name), (layer_name, f"{layer_name}.{field_name}")):
            offset = self.field_offsets.get(key)
            if offset is not None:
                return offset
        return None

    def get_field_raw_bytes(self, layer_name: str, field_name: str) -> Optional[bytes]:
        offset = self.get_field_offset(layer_name, field_name)
        if offset is None:
            return None
        return offset.slice(self.raw_data)

    # ------------------------------------------------------------------
    # Container protocol
    # ------------------------------------------------------------------

    def __getitem__(self, item: Union[int, str]) -> BaseLayer:
        if isinstance(item, int):
            return self.layers[item]
        layer = self.get_layer(item)
        if layer is None:
            raise KeyError(f"Layer {item} does not exist in packet")
        return layer

    def __getattr__(self, item: str) -> BaseLayer:
        if item.startswith("_"):
            raise AttributeError(item)
        layer = self.get_layer(item)
        if layer is None:
            raise AttributeError(f"No attribute named {item}")
        return layer

    def __contains__(self, item: object) -> bool:
        return isinstance(item, str) and self.has_layer(item)

    def __iter__(self) -> Iterator[BaseLayer]:
        return iter(self.layers)

    def __len__(self) -> int:
        return len(self.layers)

    def __bool__(self) -> bool:
        return True

    def __dir__(self) -> List[str]:
        return sorted(set(dir(type(self))) | set(self.__dict__) | {layer.layer_name for layer in self.layers})

    def pretty_print(self, writer: Optional[TextIO] = None) -> None:
        writer = writer or sys.stdout
        for layer in self.layers:
            layer.pretty_print(writer)

    def __repr__(self) -> str:
        transport = self.transport_layer.upper()
        highest = self.highest_layer.upper()
        if transport and transport != highest:
            return f"<{highest}/{transport} Packet>"
        return f"<{highest or 'EMPTY'} Packet>"
