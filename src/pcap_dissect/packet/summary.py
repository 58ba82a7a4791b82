from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

import pandas as pd

from ..core.constants import IP_LAYERS
from ..exceptions import SniffTimeUnavailableError
from ..logging import get_logger
from ..utils import _safe_int
from .fields import field_text
from .packet import Packet
from .protocols import DnsView, HttpView

logger = get_logger(__name__)


@dataclass
class PacketSummary:
    """One-line view of a packet, similar to tshark's default output."""

    number: int = 0
    time: Optional[datetime] = None
    source_ip: str = ""
    destination_ip: str = ""
    protocol: str = ""
    length: int = 0
    info: str = ""

    @classmethod
    def from_packet(cls, packet: Packet) -> "PacketSummary":
        try:
            sniff_time: Optional[datetime] = packet.sniff_time
        except SniffTimeUnavailableError:
            sniff_time = None

        source_ip = destination_ip = ""
        for name in IP_LAYERS:
            ip_layer = packet.get_layer(name)
            if ip_layer is not None:
                source_ip = field_text(ip_layer.get_field("src"))
                destination_ip = field_text(ip_layer.get_field("dst"))
                break

        protocol = packet.highest_layer
        return cls(
            number=_safe_int(packet.number) or 0,
            time=sniff_time,
            source_ip=source_ip,
            destination_ip=destination_ip,
            protocol=protocol,
            length=_safe_int(packet.length) or 0,
            info=_extract_info(packet, protocol),
        )

    @property
    def description(self) -> str:
        return f"{self.protocol} {self.source_ip} → {self.destination_ip} {self.info}"

    def __str__(self) -> str:
        clock = self.time.strftime("%H:%M:%S.%f") if self.time else "--:--:--"
        return (
            f"#{self.number} {clock} {self.source_ip} → {self.destination_ip} "
            f"[{self.protocol}] {self.length} bytes: {self.info}"
        )


def _first_present(layer, *names: str) -> str:
    for name in names:
        text = field_text(layer.get_field(name))
        if text:
            return text
    return ""


def _http_info(packet: Packet) -> str:
    http = HttpView(packet.get_layer("http"))
    if http.method:
        return f"{http.method} {http.uri}".strip()
    if http.status_code:
        return f"{http.status_code} {http.status_message}".strip()
    return ""


def _dns_info(packet: Packet) -> str:
    dns = DnsView(packet.get_layer("dns"))
    layer = dns.layer
    query = dns.query_name
    if query:
        query_type = dns.query_type
        return f"Query: {query} ({query_type})" if query_type else f"Query: {query}"
    response = _first_present(layer, "resp_name", "resp.name")
    if response:
        response_type = _first_present(layer, "resp_type", "resp.type")
        data = _first_present(layer, "resp_data", "a", "aaaa")
        if response_type and data:
            return f"Response: {response} ({response_type}) = {data}"
        return f"Response: {response}"
    return ""


def _port_info(layer_name: str) -> Callable[[Packet], str]:
    def extract(packet: Packet) -> str:
        layer = packet.get_layer(layer_name)
        src_port = _first_present(layer, "srcport")
        dst_port = _first_present(layer, "dstport")
        if src_port and dst_port:
            return f"Port {src_port} → {dst_port}"
        return ""

    return extract


def _icmp_info(packet: Packet) -> str:
    layer = packet.get_layer("icmp")
    icmp_type = _first_present(layer, "type")
    if not icmp_type:
        return ""
    code = _first_present(layer, "code")
    return f"Type: {icmp_type}, Code: {code}" if code else f"Type: {icmp_type}"


_INFO_EXTRACTORS: Dict[str, Callable[[Packet], str]] = {
    "http": _http_info,
    "dns": _dns_info,
    "tcp": _port_info("tcp"),
    "udp": _port_info("udp"),
    "icmp": _icmp_info,
}


def _extract_info(packet: Packet, protocol: str) -> str:
    key = protocol.lower()
    extractor = _INFO_EXTRACTORS.get(key)
    if extractor is None or not packet.has_layer(key):
        return ""
    return extractor(packet)


def summaries_to_dataframe(packets: Iterable[Packet]) -> pd.DataFrame:
    """Return one row per packet with the :class:`PacketSummary` columns."""
    rows = [asdict(PacketSummary.from_packet(packet)) for packet in packets]
    columns = list(PacketSummary.__dataclass_fields__)
    df = pd.DataFrame(rows, columns=columns)
    logger.debug("Built summary frame with %d rows", len(df))
    return df


__all__ = ["PacketSummary", "summaries_to_dataframe"]
