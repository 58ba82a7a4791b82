from .base import BaseLayer, get_field_prefix, sanitize_field_name
from .json_layer import JsonLayer
from .xml_layer import XmlLayer
from .ek_layer import EkLayer, EkMultiField

__all__ = [
    "BaseLayer",
    "JsonLayer",
    "XmlLayer",
    "EkLayer",
    "EkMultiField",
    "get_field_prefix",
    "sanitize_field_name",
]
