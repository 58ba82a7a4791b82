from __future__ import annotations

from abc import ABC, abstractmethod
from typing import IO, Iterator, List, Type, Union

from ..core.decorators import log_performance
from ..exceptions import PacketParsingError
from ..logging import get_logger
from ..packet import Packet

logger = get_logger(__name__)

InputData = Union[bytes, bytearray, str, IO[bytes], IO[str]]


def read_bytes(data: InputData) -> bytes:
    """Return the full content of ``data`` as bytes."""
    if hasattr(data, "read"):
        data = data.read()  # type: ignore[union-attr]
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)  # type: ignore[arg-type]


def read_text(data: InputData) -> str:
    """Return the full content of ``data`` as text (UTF-8, invalid bytes replaced)."""
    if hasattr(data, "read"):
        data = data.read()  # type: ignore[union-attr]
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return data  # type: ignore[return-value]


class BaseParser(ABC):
    """Abstract base class for dissection output parsers."""

    format_name: str = ""
    error_class: Type[PacketParsingError] = PacketParsingError

    @abstractmethod
    def iter_packets(self, data: InputData) -> Iterator[Packet]:
        """Yield :class:`Packet` objects in input order.

        A malformed unit raises ``error_class`` only after every earlier
        packet has been yielded.
        """

    @log_performance
    def parse_packets(self, data: InputData) -> List[Packet]:
        """Parse every packet in ``data``.

        On failure the packets decoded before the bad unit are attached to the
        raised error as ``parsed_packets``.
        """
        packets: List[Packet] = []
        try:
            for packet in self.iter_packets(data):
                packets.append(packet)
        except PacketParsingError as exc:
            exc.parsed_packets = packets
            raise
        logger.info("Parsed %d %s packets", len(packets), self.format_name)
        return packets

    def parse_single_packet(self, data: InputData) -> Packet:
        for packet in self.iter_packets(data):
            return packet
        raise self.error_class(
            "no packets found", context=f"{self.format_name} input contained no packet units"
        )
