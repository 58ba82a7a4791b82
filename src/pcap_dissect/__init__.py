# src/pcap_dissect/__init__.py
from typing import List, Optional

from .core.config import settings
from .exceptions import (
    EKParseError,
    FieldDecodeError,
    JSONParseError,
    PacketParsingError,
    ParserNotAvailable,
    PcapDissectError,
    SessionKeyError,
    SniffTimeUnavailableError,
    XMLParseError,
)
from .packet import (
    BaseLayer,
    EkLayer,
    EkMultiField,
    DnsView,
    FieldOffset,
    HttpView,
    IpView,
    JsonLayer,
    LayerField,
    LayerFieldsContainer,
    Packet,
    PacketSummary,
    ProtocolView,
    TcpView,
    XmlLayer,
    protocol_view,
    summaries_to_dataframe,
)
from .parsers import BaseParser, EkParser, JsonParser, ParserFactory, XmlParser
from .parsers.base import InputData
from .sessions import Session, SessionKey, SessionState, SessionTracker, extract_session_key


def parse_packets(data: InputData, fmt: Optional[str] = None, **options) -> List[Packet]:
    """Parse tshark output ``data`` in format ``fmt`` (``json``, ``pdml``/``xml`` or ``ek``).

    ``fmt`` defaults to the ``default_format`` setting; ``options`` go to the
    parser constructor.
    """
    parser = ParserFactory.create_parser(fmt or settings.default_format, **options)
    return parser.parse_packets(data)


__all__ = [
    "parse_packets",
    "LayerField",
    "LayerFieldsContainer",
    "BaseLayer",
    "JsonLayer",
    "XmlLayer",
    "EkLayer",
    "EkMultiField",
    "FieldOffset",
    "Packet",
    "PacketSummary",
    "summaries_to_dataframe",
    "ProtocolView",
    "TcpView",
    "HttpView",
    "DnsView",
    "IpView",
    "protocol_view",
    "BaseParser",
    "JsonParser",
    "XmlParser",
    "EkParser",
    "ParserFactory",
    "Session",
    "SessionKey",
    "SessionState",
    "SessionTracker",
    "extract_session_key",
    "PcapDissectError",
    "PacketParsingError",
    "JSONParseError",
    "XMLParseError",
    "EKParseError",
    "FieldDecodeError",
    "SniffTimeUnavailableError",
    "SessionKeyError",
    "ParserNotAvailable",
]
