"""Centralized constant definitions for pcap_dissect."""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Layer names
# ---------------------------------------------------------------------------
TRANSPORT_LAYERS: tuple[str, ...] = ("tcp", "udp", "sctp", "dccp")
IP_LAYERS: tuple[str, ...] = ("ip", "ipv6")

FRAME_LAYER_NAME = "frame"
GENINFO_LAYER_NAME = "geninfo"
DATA_LAYER_NAME = "DATA"
FAKE_FIELD_WRAPPER = "fake-field-wrapper"

# Suffix tshark appends to layer and field names carrying raw bytes (``-x``)
RAW_SUFFIX = "_raw"

# ---------------------------------------------------------------------------
# EK prefix aliases
# ---------------------------------------------------------------------------
# EK joins nested names with underscores; some layers also carry fields whose
# names start with a longer prefix than the layer name itself.
EK_LAYER_PREFIX_ALIASES: dict[str, tuple[str, ...]] = {
    "ip": ("ip_src", "ip_dst"),
    "tcp": ("tcp_srcport", "tcp_dstport"),
    "udp": ("udp_srcport", "udp_dstport"),
    "http": ("http_request", "http_response"),
    "dns": ("dns_query", "dns_response"),
}

# ---------------------------------------------------------------------------
# TCP flag bits (tcp.flags bitmask)
# ---------------------------------------------------------------------------
TCP_FLAG_BITS: dict[str, int] = {
    "FIN": 0x01,
    "SYN": 0x02,
    "RST": 0x04,
    "PSH": 0x08,
    "ACK": 0x10,
    "URG": 0x20,
    "ECE": 0x40,
    "CWR": 0x80,
}

# Individual tshark boolean flag fields and the flag they represent
TCP_FLAG_FIELDS: dict[str, str] = {
    "flags.syn": "SYN",
    "flags.ack": "ACK",
    "flags.fin": "FIN",
    "flags.reset": "RST",
}

TCP_FLAG_ALIASES: dict[str, str] = {
    "RESET": "RST",
    "PUSH": "PSH",
}

__all__ = [
    "TRANSPORT_LAYERS",
    "IP_LAYERS",
    "FRAME_LAYER_NAME",
    "GENINFO_LAYER_NAME",
    "DATA_LAYER_NAME",
    "FAKE_FIELD_WRAPPER",
    "RAW_SUFFIX",
    "EK_LAYER_PREFIX_ALIASES",
    "TCP_FLAG_BITS",
    "TCP_FLAG_FIELDS",
    "TCP_FLAG_ALIASES",
]
