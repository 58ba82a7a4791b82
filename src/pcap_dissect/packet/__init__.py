from .fields import LayerField, LayerFieldsContainer, field_text
from .layers import BaseLayer, EkLayer, EkMultiField, JsonLayer, XmlLayer
from .packet import FieldOffset, Packet
from .protocols import DnsView, HttpView, IpView, ProtocolView, TcpView, protocol_view
from .summary import PacketSummary, summaries_to_dataframe

__all__ = [
    "LayerField",
    "LayerFieldsContainer",
    "field_text",
    "BaseLayer",
    "JsonLayer",
    "XmlLayer",
    "EkLayer",
    "EkMultiField",
    "FieldOffset",
    "Packet",
    "ProtocolView",
    "TcpView",
    "HttpView",
    "DnsView",
    "IpView",
    "protocol_view",
    "PacketSummary",
    "summaries_to_dataframe",
]
