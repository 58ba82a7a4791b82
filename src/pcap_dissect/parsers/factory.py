from __future__ import annotations

from typing import Any, Dict, List, Type

from ..exceptions import ParserNotAvailable
from ..logging import get_logger
from .base import BaseParser
from .ek_parser import EkParser
from .json_parser import JsonParser
from .xml_parser import XmlParser

logger = get_logger(__name__)


class ParserFactory:
    """Registry mapping format names to parser classes."""

    _registry: Dict[str, Type[BaseParser]] = {}

    @classmethod
    def register_parser(cls, fmt: str, parser_cls: Type[BaseParser]) -> None:
        """Register ``parser_cls`` under the (case-insensitive) name ``fmt``."""
        cls._registry[fmt.lower()] = parser_cls
        logger.debug("Registered parser %s for format %s", parser_cls.__name__, fmt)

    @classmethod
    def available_formats(cls) -> List[str]:
        return sorted(cls._registry)

    @classmethod
    def create_parser(cls, fmt: str, **options: Any) -> BaseParser:
        """Instantiate the parser registered for ``fmt``.

        ``options`` are passed to the parser constructor.
        """
        parser_cls = cls._registry.get(fmt.lower())
        if parser_cls is None:
            logger.error("No parser registered for format %r", fmt)
            raise ParserNotAvailable(
                f"No parser available for format {fmt!r}",
                suggestion=f"Use one of: {', '.join(cls.available_formats())}",
            )
        logger.debug("Selected parser: %s", parser_cls.__name__)
        return parser_cls(**options)


ParserFactory.register_parser("json", JsonParser)
ParserFactory.register_parser("pdml", XmlParser)
ParserFactory.register_parser("xml", XmlParser)
ParserFactory.register_parser("ek", EkParser)
