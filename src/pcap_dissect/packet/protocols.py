"""Typed views over common protocol layers.

A view wraps any layer variant and reads fields by their short dotted names,
so the same accessors work for JSON, PDML and EK packets.
"""

from __future__ import annotations

import ipaddress
import re
from typing import Any, Dict, List, Optional, Set, Type, Union

from ..core.constants import IP_LAYERS, TCP_FLAG_ALIASES, TCP_FLAG_BITS, TCP_FLAG_FIELDS
from ..utils import _safe_int
from .fields import LayerFieldsContainer, field_text
from .layers import BaseLayer

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]

_FLAG_WORD = re.compile(r"[A-Za-z]+")
_HEADER_LINE = re.compile(r"^\s*([^:\s][^:]*):\s*(.*?)\s*$")

IP_PROTOCOL_NAMES: Dict[int, str] = {1: "ICMP", 6: "TCP", 17: "UDP", 58: "ICMPv6"}


def _all_text(value: Any) -> List[str]:
    """Every value of a possibly repeated field as strings."""
    if value is None:
        return []
    if isinstance(value, LayerFieldsContainer):
        return [f.default_value for f in value]
    if isinstance(value, list):
        return [text for item in value for text in _all_text(item)]
    values = getattr(value, "values", None)
    if isinstance(values, list) and values:
        return [field_text(item) for item in values]
    text = field_text(value)
    return [text] if text else []


def parse_flag_text(text: str) -> Set[str]:
    """Flag names from a bitmask (``"0x0012"``) or symbolic (``"SYN,ACK"``) value."""
    bitmask = _safe_int(text)
    if bitmask is not None:
        return {name for name, bit in TCP_FLAG_BITS.items() if bitmask & bit}
    flags = set()
    for word in _FLAG_WORD.findall(text.upper()):
        word = TCP_FLAG_ALIASES.get(word, word)
        if word in TCP_FLAG_BITS:
            flags.add(word)
    return flags


class ProtocolView:
    """Base class for the protocol views; subclasses set ``layer_names``."""

    layer_names: tuple[str, ...] = ()

    def __init__(self, layer: BaseLayer) -> None:
        self.layer = layer

    @property
    def name(self) -> str:
        return self.layer.layer_name

    @classmethod
    def accepts(cls, layer: BaseLayer) -> bool:
        return layer.layer_name.lower() in cls.layer_names

    @classmethod
    def from_layer(cls, layer: Optional[BaseLayer]):
        """Return a view of ``layer`` or ``None`` if it is another protocol."""
        if layer is None or not cls.accepts(layer):
            return None
        return cls(layer)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class TcpView(ProtocolView):
    layer_names = ("tcp",)

    @property
    def source_port(self) -> int:
        return self.layer.get_int("srcport")

    @property
    def destination_port(self) -> int:
        return self.layer.get_int("dstport")

    @property
    def sequence_number(self) -> int:
        return self.layer.get_int("seq")

    @property
    def acknowledgment_number(self) -> int:
        return self.layer.get_int("ack")

    @property
    def flags(self) -> Set[str]:
        """Flags from the ``flags`` field and the per-flag boolean fields."""
        flags = parse_flag_text(self.layer.get_str("flags").strip())
        for field_name, flag in TCP_FLAG_FIELDS.items():
            if self.layer.get_bool(field_name):
                flags.add(flag)
        return flags

    @property
    def has_syn(self) -> bool:
        return "SYN" in self.flags

    @property
    def has_ack(self) -> bool:
        return "ACK" in self.flags

    @property
    def has_fin(self) -> bool:
        return "FIN" in self.flags

    @property
    def has_rst(self) -> bool:
        return "RST" in self.flags


class HttpView(ProtocolView):
    layer_names = ("http",)

    @property
    def method(self) -> str:
        return self.layer.get_str("request.method")

    @property
    def uri(self) -> str:
        return self.layer.get_str("request.uri")

    @property
    def version(self) -> str:
        return self.layer.get_str("request.version") or self.layer.get_str("response.version")

    @property
    def status_code(self) -> int:
        return self.layer.get_int("response.code")

    @property
    def status_message(self) -> str:
        return self.layer.get_str("response.phrase")

    @property
    def is_request(self) -> bool:
        return bool(self.method) or self.layer.has_field("request")

    @property
    def is_response(self) -> bool:
        return bool(self.status_code) or self.layer.has_field("response")

    @property
    def headers(self) -> Dict[str, str]:
        """Header lines keyed by name; a repeated header keeps its last value."""
        headers: Dict[str, str] = {}
        for field_name in ("request.line", "response.line"):
            for line in _all_text(self.layer.get_field(field_name)):
                match = _HEADER_LINE.match(line)
                if match:
                    headers[match.group(1)] = match.group(2)
        return headers


class DnsView(ProtocolView):
    layer_names = ("dns",)

    @property
    def is_response(self) -> bool:
        return self.layer.get_bool("flags.response")

    @property
    def is_query(self) -> bool:
        return not self.is_response

    @property
    def query_name(self) -> str:
        return self.layer.get_str("qry.name")

    @property
    def query_type(self) -> str:
        return self.layer.get_str("qry.type")

    @property
    def response_code(self) -> int:
        return self.layer.get_int("flags.rcode")

    @property
    def answers(self) -> List[str]:
        return _all_text(self.layer.get_field("a")) + _all_text(self.layer.get_field("aaaa"))


class IpView(ProtocolView):
    layer_names = IP_LAYERS

    @property
    def version(self) -> int:
        return 6 if self.name.lower() == "ipv6" else 4

    def _address(self, name: str) -> Optional[IPAddress]:
        try:
            return ipaddress.ip_address(self.layer.get_str(name))
        except ValueError:
            return None

    @property
    def source(self) -> Optional[IPAddress]:
        return self._address("src")

    @property
    def destination(self) -> Optional[IPAddress]:
        return self._address("dst")

    @property
    def ttl(self) -> int:
        return self.layer.get_int("ttl" if self.version == 4 else "hlim")

    @property
    def protocol(self) -> int:
        return self.layer.get_int("proto" if self.version == 4 else "nxt")

    @property
    def protocol_name(self) -> str:
        number = self.protocol
        return IP_PROTOCOL_NAMES.get(number, f"Unknown ({number})")


_VIEWS: tuple[Type[ProtocolView], ...] = (TcpView, HttpView, DnsView, IpView)


def protocol_view(layer: BaseLayer) -> Optional[ProtocolView]:
    """Return the matching view for ``layer``, if there is one."""
    for view_cls in _VIEWS:
        if view_cls.accepts(layer):
            return view_cls(layer)
    return None


__all__ = [
    "ProtocolView",
    "TcpView",
    "HttpView",
    "DnsView",
    "IpView",
    "IP_PROTOCOL_NAMES",
    "parse_flag_text",
    "protocol_view",
]
