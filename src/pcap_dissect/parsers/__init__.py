from .base import BaseParser, InputData
from .json_parser import JsonParser
from .xml_parser import XmlParser
from .ek_parser import EkParser
from .factory import ParserFactory

__all__ = [
    "BaseParser",
    "InputData",
    "JsonParser",
    "XmlParser",
    "EkParser",
    "ParserFactory",
]
